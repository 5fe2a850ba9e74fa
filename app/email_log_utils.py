"""
Audit trail of the routing decisions.

Every processed email gets exactly one LogEntry, written to the email_log table and
emitted as a JSON line + a New Relic event. Both are best-effort: a failure here
must never change what has already been decided for the email.
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Optional

import arrow
import newrelic.agent

from app import config
from app.db import Session
from app.log import LOG
from app.models import EmailLog, EmailResult


@dataclass
class LogEntry:
    message_id: Optional[str]
    from_addr: Optional[str]
    to_addr: Optional[str]
    route: Optional[str] = None
    result: Optional[str] = None
    base_addr: Optional[str] = None
    dest_addr: Optional[str] = None
    size_bytes: int = 0
    error: Optional[str] = None
    # unix seconds
    timestamp: int = 0

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = arrow.utcnow().int_timestamp

    @property
    def is_forwarded(self) -> bool:
        return self.result == EmailResult.forwarded.value

    def to_dict(self) -> dict:
        return asdict(self)


class LogSink(ABC):
    @abstractmethod
    def append(self, entry: LogEntry):
        """Persist entry. Can raise"""


class DbLogSink(LogSink):
    def __init__(self, max_rows: int = None):
        self.max_rows = max_rows or config.EMAIL_LOG_MAX_ROWS

    def append(self, entry: LogEntry):
        error = entry.error
        if error:
            error = str(error)[: config.EMAIL_LOG_MAX_ERROR_LENGTH]

        try:
            email_log = EmailLog.create(
                ts=entry.timestamp,
                message_id=entry.message_id,
                from_addr=entry.from_addr,
                to_addr=entry.to_addr,
                route=entry.route,
                base_addr=entry.base_addr,
                dest_addr=entry.dest_addr,
                result=entry.result,
                size_bytes=int(entry.size_bytes or 0),
                error=error,
                flush=True,
            )
            LOG.d("create %s", email_log)
            self._prune()
            Session.commit()
        except Exception:
            Session.rollback()
            raise

    def _prune(self):
        """only keep the most recent max_rows rows"""
        oldest_id_to_keep = (
            Session.query(EmailLog.id)
            .order_by(EmailLog.id.desc())
            .offset(self.max_rows - 1)
            .limit(1)
            .scalar()
        )
        if oldest_id_to_keep is None:
            return

        nb_deleted = EmailLog.filter(EmailLog.id < oldest_id_to_keep).delete(
            synchronize_session=False
        )
        if nb_deleted:
            LOG.d("delete %s old email logs", nb_deleted)


def emit_email_log_event(entry: LogEntry):
    LOG.i("%s", json.dumps(entry.to_dict()))
    newrelic.agent.record_custom_event(
        "EmailRouted", {"route": entry.route, "result": entry.result}
    )


def record(entry: LogEntry, sink: LogSink):
    """Never raise"""
    try:
        emit_email_log_event(entry)
    except Exception:
        LOG.e("cannot emit email log event for %s", entry.message_id)

    try:
        sink.append(entry)
    except Exception:
        LOG.e("cannot persist email log for %s", entry.message_id)
