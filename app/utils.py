def sanitize_email(email_address: str) -> str:
    if email_address:
        email_address = email_address.strip().replace(" ", "").replace("\n", " ").lower()
    return email_address
