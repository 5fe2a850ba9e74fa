# region 2** status
E200 = "250 Message accepted for delivery"
# endregion

# region 4** errors
E404 = "421 MH E404 Unexpected error - Retry later"
# endregion

# region 5** errors
# every reject produced by the routing engine uses this code
REJECT_CODE = 550

E501 = "Invalid recipient for this domain"
E502 = "Routing loop detected"
E503 = "No such user at this domain"
E504 = "Destination not verified"
E505 = "Internal error"
# endregion


def smtp_status(code: int, reason: str) -> str:
    return f"{code} {reason}"
