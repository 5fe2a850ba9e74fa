"""
Resolve an inbound recipient to a forwarding destination.

Two kinds of match are supported, in this order:
- exact alias:     user@example.com
- plus addressing: user+tag@example.com -> user@example.com, only if the base alias has allow_plus

The resolver never forwards or rejects anything, it only returns a RoutingDecision
that the email handler acts upon.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.db import Session
from app.log import LOG
from app.models import Alias, RouteKind


@dataclass
class RoutingDecision:
    route_kind: RouteKind
    # only for RouteKind.base_tag
    base_address: Optional[str] = None
    # only for RouteKind.exact and RouteKind.base_tag
    destination: Optional[str] = None


class AliasStore(ABC):
    @abstractmethod
    def lookup_exact(self, address: str) -> Optional[Alias]:
        """Return the alias whose address is `address` (case-insensitive) or None"""


class DbAliasStore(AliasStore):
    def lookup_exact(self, address: str) -> Optional[Alias]:
        try:
            return Alias.get_by_address(address)
        except Exception:
            # leave the session usable for the email log
            Session.rollback()
            raise


def resolve(
    recipient_full: str,
    recipient_local: str,
    recipient_domain: str,
    worker_domain: str,
    store: AliasStore,
) -> RoutingDecision:
    if recipient_domain != worker_domain:
        LOG.d(
            "recipient domain %s is not worker domain %s",
            recipient_domain,
            worker_domain,
        )
        return RoutingDecision(RouteKind.invalid_domain)

    alias = store.lookup_exact(recipient_full)
    if alias:
        return RoutingDecision(RouteKind.exact, destination=alias.forward_to)

    # user+a+b@domain has user@domain as base
    plus_index = recipient_local.find("+")
    if plus_index > -1:
        base = f"{recipient_local[:plus_index]}@{recipient_domain}"
        base_alias = store.lookup_exact(base)
        if base_alias and base_alias.allow_plus:
            return RoutingDecision(
                RouteKind.base_tag,
                base_address=base,
                destination=base_alias.forward_to,
            )

        if base_alias:
            LOG.d("plus addressing disabled on %s", base_alias)

    return RoutingDecision(RouteKind.none)
