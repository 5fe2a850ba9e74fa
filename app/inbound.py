"""The capability set the email handler needs from an inbound email, whatever its transport"""
import uuid
from abc import ABC, abstractmethod
from email.message import Message
from typing import Optional

from aiosmtpd.smtp import Envelope

from app.email import headers, status
from app.log import LOG
from app.mail_sender import mh_sendmail


class InboundMessage(ABC):
    from_addr: str
    to_addr: str
    raw_size: int
    message_id: str

    @abstractmethod
    def forward(self, destination: str):
        """Deliver the email to destination. Raise on failure"""

    @abstractmethod
    def reject(self, code: int, reason: str):
        pass


class SmtpInboundMessage(InboundMessage):
    """One recipient of an SMTP transaction received by aiosmtpd"""

    def __init__(self, envelope: Envelope, msg: Message, rcpt_to: str):
        self._envelope = envelope
        self._msg = msg

        self.from_addr = envelope.mail_from
        self.to_addr = rcpt_to
        self.raw_size = len(envelope.original_content or b"")
        self.message_id = msg[headers.MESSAGE_ID] or str(uuid.uuid4())

        # the SMTP reply for this recipient, set by forward() or reject()
        self.smtp_status: Optional[str] = None

    def forward(self, destination: str):
        mh_sendmail(
            self.from_addr,
            destination,
            self._msg,
            self._envelope.mail_options,
            self._envelope.rcpt_options,
        )
        self.smtp_status = status.E200

    def reject(self, code: int, reason: str):
        LOG.d("reject %s with %s %s", self.to_addr, code, reason)
        self.smtp_status = status.smtp_status(code, reason)

    @property
    def is_forwarded(self) -> bool:
        return self.smtp_status == status.E200
