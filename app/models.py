from __future__ import annotations

import enum
from typing import Optional

import arrow
import sqlalchemy as sa
from sqlalchemy import func
from sqlalchemy.orm import declarative_base

from app.db import Session
from app.utils import sanitize_email

Base = declarative_base()


class ModelMixin(object):
    id = sa.Column(sa.Integer, primary_key=True, autoincrement=True)

    _repr_hide = []

    @classmethod
    def query(cls):
        return Session.query(cls)

    @classmethod
    def get(cls, id):
        return Session.get(cls, id)

    @classmethod
    def get_by(cls, **kw):
        return Session.query(cls).filter_by(**kw).first()

    @classmethod
    def filter_by(cls, **kw):
        return Session.query(cls).filter_by(**kw)

    @classmethod
    def filter(cls, *args, **kw):
        return Session.query(cls).filter(*args, **kw)

    @classmethod
    def order_by(cls, *args, **kw):
        return Session.query(cls).order_by(*args, **kw)

    @classmethod
    def all(cls):
        return Session.query(cls).all()

    @classmethod
    def count(cls):
        return Session.query(cls).count()

    @classmethod
    def create(cls, **kw):
        # whether to call Session.commit
        commit = kw.pop("commit", False)
        flush = kw.pop("flush", False)

        r = cls(**kw)
        Session.add(r)

        if commit:
            Session.commit()

        if flush:
            Session.flush()

        return r

    def save(self):
        Session.add(self)

    @classmethod
    def delete(cls, obj_id, commit=False):
        Session.query(cls).filter(cls.id == obj_id).delete()

        if commit:
            Session.commit()

    def __repr__(self):
        values = ", ".join(
            "%s=%r" % (n, getattr(self, n))
            for n in self.__table__.c.keys()
            if n not in self._repr_hide
        )
        return "%s(%s)" % (self.__class__.__name__, values)


class RouteKind(enum.Enum):
    """How (or whether) a recipient was resolved"""

    exact = "exact"
    base_tag = "base+tag"
    none = "none"
    invalid_domain = "invalid-domain"


# route stored in email_log when the pipeline fails unexpectedly
ROUTE_EXCEPTION = "exception"


class EmailResult(enum.Enum):
    forwarded = "forwarded"
    rejected = "rejected"
    error = "error"


def _now_ts() -> int:
    return arrow.utcnow().int_timestamp


class Alias(Base, ModelMixin):
    """Forward rule from an address under EMAIL_DOMAIN to a destination"""

    __tablename__ = "alias"
    __table_args__ = (sa.Index("ix_alias_forward_to", "forward_to"),)

    # full alias address, stored lowercase
    address = sa.Column(sa.String(255), unique=True, nullable=False)

    forward_to = sa.Column(sa.String(255), nullable=False)

    notes = sa.Column(sa.Text, default=None, nullable=True)

    # unix seconds
    created_at = sa.Column(sa.Integer, default=_now_ts, nullable=False)

    # when enabled, user+tag@domain is routed to this alias
    allow_plus = sa.Column(
        sa.Boolean, nullable=False, default=True, server_default=sa.true()
    )

    @classmethod
    def get_by_address(cls, address: str) -> Optional[Alias]:
        """case-insensitive lookup"""
        address = sanitize_email(address) or ""
        return cls.filter(func.lower(cls.address) == address).first()


class EmailLog(Base, ModelMixin):
    """One row per processed inbound email"""

    __tablename__ = "email_log"
    __table_args__ = (sa.Index("ix_email_log_ts", "ts"),)

    # unix seconds
    ts = sa.Column(sa.Integer, nullable=False)
    message_id = sa.Column(sa.String(512), nullable=True)
    from_addr = sa.Column(sa.String(512), nullable=True)
    to_addr = sa.Column(sa.String(512), nullable=True)

    # exact | base+tag | none | invalid-domain | exception
    route = sa.Column(sa.String(32), nullable=True)

    # base alias for plus addressing
    base_addr = sa.Column(sa.String(512), nullable=True)

    # final destination address
    dest_addr = sa.Column(sa.String(512), nullable=True)

    # forwarded | rejected | error
    result = sa.Column(sa.String(32), nullable=True)

    size_bytes = sa.Column(sa.Integer, nullable=False, default=0)
    error = sa.Column(sa.Text, nullable=True)
