class MailhopException(Exception):
    def __str__(self):
        super_str = super().__str__()
        return f"{type(self).__name__} {super_str}"

    def error_for_user(self) -> str:
        """By default send the exception errror to the user. Should be overloaded by the child exceptions"""
        return str(self)


class DeliveryError(MailhopException):
    """raised when the transport cannot forward an email to its destination"""

    def __init__(self, destination: str, reason: str = ""):
        self.destination = destination
        self.reason = reason
        super().__init__(f"cannot forward to {destination}: {reason}")


class AliasAlreadyExistsError(MailhopException):
    """raised when an alias is created with an address that already exists"""

    def error_for_user(self) -> str:
        return "Alias already exists"


class ErrAddressInvalid(MailhopException):
    """raised when an email address is not a valid address"""

    def __init__(self, address: str):
        self.address = address
        super().__init__(address)

    def error_for_user(self) -> str:
        return f"{self.address} is not a valid email address"
