import random
import string
from typing import Optional, List, Dict

from app.alias_resolver import AliasStore
from app.email_log_utils import LogSink, LogEntry
from app.errors import DeliveryError
from app.inbound import InboundMessage
from app.models import Alias


def random_token(length: int = 10) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def create_alias(
    address: str, forward_to: str, allow_plus: bool = True, notes: str = None
) -> Alias:
    return Alias.create(
        address=address,
        forward_to=forward_to,
        allow_plus=allow_plus,
        notes=notes,
        commit=True,
    )


class FakeInboundMessage(InboundMessage):
    """Record the calls made by the email handler"""

    def __init__(
        self,
        to_addr: str,
        from_addr: str = "sender@sender.net",
        raw_size: int = 1234,
        message_id: Optional[str] = None,
        forward_error: Optional[Exception] = None,
        reject_error: Optional[Exception] = None,
    ):
        self.to_addr = to_addr
        self.from_addr = from_addr
        self.raw_size = raw_size
        self.message_id = message_id or f"<{random_token()}@sender.net>"

        self._forward_error = forward_error
        self._reject_error = reject_error
        self.forward_calls: List[str] = []
        self.reject_calls: List[tuple] = []

    def forward(self, destination: str):
        self.forward_calls.append(destination)
        if self._forward_error:
            raise self._forward_error

    def reject(self, code: int, reason: str):
        self.reject_calls.append((code, reason))
        if self._reject_error:
            raise self._reject_error


def unverified_destination_error(destination: str) -> DeliveryError:
    return DeliveryError(destination, "destination address not verified")


class InMemoryAliasStore(AliasStore):
    """Count the lookups"""

    def __init__(self, aliases: List[Alias] = None):
        self._aliases: Dict[str, Alias] = {
            alias.address.lower(): alias for alias in aliases or []
        }
        self.lookups: List[str] = []

    def lookup_exact(self, address: str) -> Optional[Alias]:
        self.lookups.append(address)
        return self._aliases.get(address.lower())


class BrokenAliasStore(AliasStore):
    def lookup_exact(self, address: str) -> Optional[Alias]:
        raise RuntimeError("database is gone")


class InMemoryLogSink(LogSink):
    def __init__(self):
        self.entries: List[LogEntry] = []

    def append(self, entry: LogEntry):
        self.entries.append(entry)


class BrokenLogSink(LogSink):
    def __init__(self):
        self.nb_calls = 0

    def append(self, entry: LogEntry):
        self.nb_calls += 1
        raise RuntimeError("disk full")
