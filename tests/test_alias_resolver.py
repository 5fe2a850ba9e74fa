from app.alias_resolver import resolve, DbAliasStore, RoutingDecision
from app.email_utils import normalize_address
from app.models import Alias, RouteKind
from tests.utils import InMemoryAliasStore, create_alias

WORKER_DOMAIN = "example.com"


def _resolve(recipient: str, store) -> RoutingDecision:
    rcpt = normalize_address(recipient)
    return resolve(rcpt.full, rcpt.local, rcpt.domain, WORKER_DOMAIN, store)


def _alias(address, forward_to, allow_plus=True) -> Alias:
    return Alias(address=address, forward_to=forward_to, allow_plus=allow_plus)


def test_resolve_exact():
    store = InMemoryAliasStore([_alias("hello@example.com", "you@inbox.example.net")])

    decision = _resolve("Hello@Example.com", store)

    assert decision == RoutingDecision(
        RouteKind.exact, destination="you@inbox.example.net"
    )
    assert store.lookups == ["hello@example.com"]


def test_resolve_plus_tag():
    store = InMemoryAliasStore([_alias("hello@example.com", "you@inbox.example.net")])

    decision = _resolve("hello+promo@example.com", store)

    assert decision.route_kind == RouteKind.base_tag
    assert decision.base_address == "hello@example.com"
    assert decision.destination == "you@inbox.example.net"
    assert store.lookups == ["hello+promo@example.com", "hello@example.com"]


def test_resolve_plus_tag_disabled():
    store = InMemoryAliasStore(
        [_alias("hello@example.com", "you@inbox.example.net", allow_plus=False)]
    )

    decision = _resolve("hello+x@example.com", store)

    assert decision == RoutingDecision(RouteKind.none)


def test_resolve_plus_tag_without_base_alias():
    store = InMemoryAliasStore()

    assert _resolve("nobody+x@example.com", store).route_kind == RouteKind.none
    assert store.lookups == ["nobody+x@example.com", "nobody@example.com"]


def test_resolve_compound_plus_uses_first_plus():
    store = InMemoryAliasStore(
        [
            _alias("user@example.com", "user@inbox.net"),
            _alias("user+a@example.com", "other@inbox.net"),
        ]
    )

    decision = _resolve("user+a+b@example.com", store)

    assert decision.route_kind == RouteKind.base_tag
    assert decision.base_address == "user@example.com"
    assert decision.destination == "user@inbox.net"


def test_resolve_exact_wins_over_plus_tag():
    store = InMemoryAliasStore(
        [
            _alias("hello@example.com", "base@inbox.net"),
            _alias("hello+promo@example.com", "promo@inbox.net"),
        ]
    )

    decision = _resolve("hello+promo@example.com", store)

    assert decision == RoutingDecision(RouteKind.exact, destination="promo@inbox.net")
    assert store.lookups == ["hello+promo@example.com"]


def test_resolve_no_alias():
    store = InMemoryAliasStore()

    assert _resolve("nobody@example.com", store) == RoutingDecision(RouteKind.none)
    # no "+" so no base lookup
    assert store.lookups == ["nobody@example.com"]


def test_resolve_other_domain_has_no_lookup():
    store = InMemoryAliasStore([_alias("x@other.com", "x@inbox.net")])

    for recipient in ["x@other.com", "x@sub.example.com", "invalid", "@example.com"]:
        assert _resolve(recipient, store).route_kind == RouteKind.invalid_domain

    assert store.lookups == []


def test_db_alias_store_is_case_insensitive(flask_client):
    create_alias("hello@example.com", "you@inbox.example.net")
    store = DbAliasStore()

    assert store.lookup_exact("HELLO@Example.com").forward_to == "you@inbox.example.net"
    assert store.lookup_exact("hello@example.com") is not None
    assert store.lookup_exact("nobody@example.com") is None


def test_resolve_with_db_alias_store(flask_client):
    create_alias("hello@example.com", "you@inbox.example.net", allow_plus=True)
    create_alias("strict@example.com", "strict@inbox.example.net", allow_plus=False)

    assert _resolve("hello+x@example.com", DbAliasStore()).route_kind == RouteKind.base_tag
    assert _resolve("strict+x@example.com", DbAliasStore()).route_kind == RouteKind.none
    assert _resolve("strict@example.com", DbAliasStore()).route_kind == RouteKind.exact
