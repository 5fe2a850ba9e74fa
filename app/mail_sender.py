from __future__ import annotations

import time
from email.message import Message
from functools import wraps
from smtplib import SMTP, SMTPException
from typing import Dict, List, Callable

import newrelic.agent
import sentry_sdk
from attr import dataclass

from app import config
from app.email import headers
from app.errors import DeliveryError
from app.log import LOG
from app.message_utils import message_to_bytes


@dataclass
class SendRequest:
    envelope_from: str
    envelope_to: str
    msg: Message
    mail_options: Dict = {}
    rcpt_options: Dict = {}


class MailSender:
    """Relay emails to the upstream MTA. Retries are left to the MTA"""

    def __init__(self):
        self._store_emails = False
        self._emails_sent: List[SendRequest] = []

    def store_emails_instead_of_sending(self, store_emails: bool = True):
        self._store_emails = store_emails

    def purge_stored_emails(self):
        self._emails_sent = []

    def get_stored_emails(self) -> List[SendRequest]:
        return self._emails_sent

    def store_emails_test_decorator(self, fn: Callable) -> Callable:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            self.purge_stored_emails()
            self.store_emails_instead_of_sending()
            result = fn(*args, **kwargs)
            self.purge_stored_emails()
            self.store_emails_instead_of_sending(False)
            return result

        return wrapper

    def send(self, send_request: SendRequest):
        """Send the email once. Raise DeliveryError if the MTA refuses it"""
        if self._store_emails:
            self._emails_sent.append(send_request)
            return
        if config.NOT_SEND_EMAIL:
            LOG.d(
                "send email with subject '%s', from '%s' to '%s'",
                send_request.msg[headers.SUBJECT],
                send_request.envelope_from,
                send_request.envelope_to,
            )
            return

        start = time.time()
        try:
            self._send_to_server(send_request)
        except (SMTPException, OSError) as e:
            LOG.w(f"Got error {e} while sending email to {config.POSTFIX_SERVER}")
            newrelic.agent.record_custom_event("SmtpError", {"error": e.__class__})
            raise DeliveryError(send_request.envelope_to, str(e)) from e
        finally:
            newrelic.agent.record_custom_metric(
                "Custom/smtp_sending_time", time.time() - start
            )

    def _send_to_server(self, send_request: SendRequest):
        with SMTP(
            host=config.POSTFIX_SERVER,
            port=config.POSTFIX_PORT,
            timeout=config.POSTFIX_TIMEOUT,
        ) as smtp:
            if config.POSTFIX_SUBMISSION_TLS:
                smtp.starttls()

            # smtp.send_message has UnicodeEncodeError
            # encode message raw directly instead
            LOG.d(
                "Sendmail mail_from:%s, rcpt_to:%s, header_from:%s, header_to:%s",
                send_request.envelope_from,
                send_request.envelope_to,
                send_request.msg[headers.FROM],
                send_request.msg[headers.TO],
            )
            smtp.sendmail(
                send_request.envelope_from,
                send_request.envelope_to,
                message_to_bytes(send_request.msg),
                send_request.mail_options,
                send_request.rcpt_options,
            )
        LOG.d(
            f"Email sent using {config.POSTFIX_SERVER}:{config.POSTFIX_PORT} "
            f"from {send_request.envelope_from} to {send_request.envelope_to}"
        )


mail_sender = MailSender()


@sentry_sdk.trace
def mh_sendmail(
    envelope_from: str,
    envelope_to: str,
    msg: Message,
    mail_options=(),
    rcpt_options=(),
):
    send_request = SendRequest(
        envelope_from,
        envelope_to,
        msg,
        mail_options,
        rcpt_options,
    )
    mail_sender.send(send_request)
