from typing import Optional, List

from sqlalchemy.exc import IntegrityError

from app import config
from app.db import Session
from app.email_utils import is_valid_email, get_email_domain_part
from app.errors import AliasAlreadyExistsError, ErrAddressInvalid
from app.log import LOG
from app.models import Alias
from app.utils import sanitize_email

# sentinel to distinguish "not provided" from None
NOT_SET = object()


def _check_address(address: str) -> str:
    address = sanitize_email(address)
    if not is_valid_email(address):
        raise ErrAddressInvalid(address)
    return address


def create_alias(
    address: str,
    forward_to: str,
    notes: Optional[str] = None,
    allow_plus: bool = True,
) -> Alias:
    address = _check_address(address)
    forward_to = _check_address(forward_to)

    if Alias.get_by_address(address):
        raise AliasAlreadyExistsError(address)

    if get_email_domain_part(forward_to) == config.EMAIL_DOMAIN:
        LOG.w("%s forwards to %s, emails to it will be rejected", address, forward_to)

    try:
        alias = Alias.create(
            address=address,
            forward_to=forward_to,
            notes=notes,
            allow_plus=bool(allow_plus),
            commit=True,
        )
    except IntegrityError:
        Session.rollback()
        raise AliasAlreadyExistsError(address)

    LOG.i("create alias %s -> %s", alias.address, alias.forward_to)
    return alias


def update_alias(
    alias: Alias, forward_to=NOT_SET, notes=NOT_SET, allow_plus=NOT_SET
) -> Alias:
    if forward_to is not NOT_SET:
        alias.forward_to = _check_address(forward_to)

    if notes is not NOT_SET:
        alias.notes = None if notes is None else str(notes)

    if allow_plus is not NOT_SET:
        alias.allow_plus = bool(allow_plus)

    Session.commit()
    LOG.i("update alias %s", alias)
    return alias


def delete_alias(alias: Alias):
    LOG.i("delete alias %s", alias)
    Alias.delete(alias.id, commit=True)


def get_aliases_by_destination(forward_to: str) -> List[Alias]:
    forward_to = sanitize_email(forward_to)
    return Alias.filter_by(forward_to=forward_to).order_by(Alias.address).all()
