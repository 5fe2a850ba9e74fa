from typing import NamedTuple

from app.utils import sanitize_email


class Address(NamedTuple):
    """Canonical form of an email address. local and domain are empty when the address is invalid"""

    local: str
    domain: str
    full: str


def normalize_address(raw: str) -> Address:
    """Trim and lowercase an address then split it on its last "@".

    An address without "@" or with an empty local part gets empty local/domain
    but keeps its full form so callers can still log it.
    """
    full = (raw or "").strip().lower()
    at = full.rfind("@")
    if at < 1:
        return Address(local="", domain="", full=full)

    return Address(local=full[:at], domain=full[at + 1 :], full=full)


def get_email_domain_part(address: str) -> str:
    """
    Get the domain part from email
    ab@cd.com -> cd.com
    """
    return normalize_address(address).domain


def is_valid_email(email_address: str) -> bool:
    """Minimal sanity check, not a RFC 5322 validation"""
    email_address = sanitize_email(email_address)
    if not email_address:
        return False

    address = normalize_address(email_address)
    return bool(address.local and address.domain)
