"""
Route the emails sent to EMAIL_DOMAIN. There are 3 actors:
- sender: who sends emails to alias@example.com
- Mailhop email handler (this script)
- destination: the address configured as forward_to on the alias

For each recipient, the email goes through:
    normalize recipient -> resolve alias -> loop check -> forward -> email log -> SMTP reply

Supported recipients:
- exact aliases:   user@example.com
- plus addressing: user+tag@example.com -> user@example.com, if allow_plus is enabled on the alias

Every recipient ends up either forwarded or rejected with a 550 status, and gets exactly one email log.
"""
import argparse
import email
import time
import uuid
from email.message import Message
from typing import Optional, Tuple

import newrelic.agent
from aiosmtpd.controller import Controller
from aiosmtpd.smtp import Envelope

from app import config
from app.alias_resolver import AliasStore, DbAliasStore, resolve
from app.db import Session
from app.delivery import deliver
from app.email import status
from app.email.checks import check_loop
from app.email_log_utils import LogEntry, LogSink, DbLogSink, record
from app.email_utils import normalize_address
from app.inbound import InboundMessage, SmtpInboundMessage
from app.log import LOG, set_message_id
from app.models import RouteKind, EmailResult, ROUTE_EXCEPTION
from app.sentry_utils import init_sentry
from app.utils import sanitize_email


def _new_log_entry(message: InboundMessage) -> LogEntry:
    return LogEntry(
        message_id=getattr(message, "message_id", None),
        from_addr=getattr(message, "from_addr", None),
        to_addr=getattr(message, "to_addr", None),
        size_bytes=getattr(message, "raw_size", None) or 0,
    )


def route_email(
    message: InboundMessage, worker_domain: str, alias_store: AliasStore
) -> Tuple[LogEntry, Optional[str]]:
    """return the email log entry and the reject reason, None if the email is forwarded"""
    entry = _new_log_entry(message)

    rcpt = normalize_address(message.to_addr)
    decision = resolve(rcpt.full, rcpt.local, rcpt.domain, worker_domain, alias_store)
    LOG.d("routing decision for %s: %s", rcpt.full, decision)

    entry.route = decision.route_kind.value
    entry.base_addr = decision.base_address
    entry.dest_addr = decision.destination

    if decision.route_kind == RouteKind.invalid_domain:
        entry.result = EmailResult.rejected.value
        entry.error = (
            f"recipient domain {rcpt.domain or '<none>'} "
            f"does not match worker domain {worker_domain}"
        )
        return entry, status.E501

    if decision.route_kind == RouteKind.none:
        entry.result = EmailResult.rejected.value
        entry.error = "no matching alias or plus-base alias found"
        return entry, status.E503

    # exact or base+tag
    if check_loop(decision.destination, worker_domain):
        LOG.w("routing loop: %s -> %s", rcpt.full, decision.destination)
        entry.result = EmailResult.rejected.value
        entry.error = "routing loop detected (forward_to is within worker's own domain)"
        return entry, status.E502

    delivery = deliver(message, decision.destination)
    if not delivery.forwarded:
        entry.result = EmailResult.error.value
        entry.error = delivery.reason
        return entry, status.E504

    entry.result = EmailResult.forwarded.value
    return entry, None


def handle(
    message: InboundMessage,
    worker_domain: str,
    alias_store: Optional[AliasStore] = None,
    log_sink: Optional[LogSink] = None,
) -> LogEntry:
    """Route one email. Never raise: the email is either forwarded or rejected"""
    alias_store = alias_store or DbAliasStore()
    log_sink = log_sink or DbLogSink()

    try:
        entry, reject_reason = route_email(message, worker_domain, alias_store)
    except Exception as e:
        LOG.e(
            "email routing fail with error:%s mail_from:%s, rcpt_to:%s",
            e,
            getattr(message, "from_addr", None),
            getattr(message, "to_addr", None),
        )
        entry = _new_log_entry(message)
        entry.route = ROUTE_EXCEPTION
        entry.result = EmailResult.error.value
        entry.error = str(e)
        reject_reason = status.E505

    record(entry, log_sink)

    if reject_reason:
        try:
            message.reject(status.REJECT_CODE, reject_reason)
        except Exception:
            LOG.e("cannot reject %s with %s", entry.to_addr, reject_reason)

    return entry


def handle_envelope(envelope: Envelope, msg: Message, worker_domain: str) -> str:
    """Return SMTP status"""
    envelope.mail_from = sanitize_email(envelope.mail_from)

    LOG.d(
        "==>> Handle mail_from:%s, rcpt_tos:%s, mail_options:%s, rcpt_options:%s",
        envelope.mail_from,
        envelope.rcpt_tos,
        envelope.mail_options,
        envelope.rcpt_options,
    )

    # result of all deliveries
    # each element is a couple of whether the delivery is successful and the smtp status
    res: [(bool, str)] = []
    for rcpt_to in envelope.rcpt_tos:
        message = SmtpInboundMessage(envelope, msg, rcpt_to)
        handle(message, worker_domain)
        res.append((message.is_forwarded, message.smtp_status))

    if not res:
        LOG.w("no recipient for mail_from:%s", envelope.mail_from)
        return status.smtp_status(status.REJECT_CODE, status.E503)

    for is_success, smtp_status in res:
        # Consider all deliveries successful if 1 delivery is successful
        if is_success:
            return smtp_status

    # Failed delivery for all, return the first failure
    return res[0][1]


class MailHandler:
    def __init__(self, worker_domain: str = None):
        self.worker_domain = worker_domain or config.EMAIL_DOMAIN

    async def handle_DATA(self, server, session, envelope: Envelope):
        try:
            msg = email.message_from_bytes(envelope.original_content)
            return self._handle(envelope, msg)
        except Exception as e:
            LOG.e(
                "email handling fail with error:%s mail_from:%s, rcpt_tos:%s",
                e,
                envelope.mail_from,
                envelope.rcpt_tos,
            )
            return status.E404

    @newrelic.agent.background_task()
    def _handle(self, envelope: Envelope, msg: Message):
        start = time.time()

        # generate a different message_id to keep track of an email lifecycle
        message_id = str(uuid.uuid4())
        set_message_id(message_id)

        LOG.d("====>=====>====>====>====>====>====>====>")
        LOG.i(
            "New message, mail from %s, rctp tos %s ",
            envelope.mail_from,
            envelope.rcpt_tos,
        )
        newrelic.agent.record_custom_metric(
            "Custom/nb_rcpt_tos", len(envelope.rcpt_tos)
        )

        try:
            return_status = handle_envelope(envelope, msg, self.worker_domain)
        finally:
            Session.remove()

        elapsed = time.time() - start
        LOG.i(
            "Finish mail_from %s, rcpt_tos %s, takes %s seconds with return code '%s'<<===",
            envelope.mail_from,
            envelope.rcpt_tos,
            elapsed,
            return_status,
        )

        newrelic.agent.record_custom_metric("Custom/email_handler_time", elapsed)
        newrelic.agent.record_custom_metric("Custom/number_incoming_email", 1)
        return return_status


def main(port: int):
    """Use aiosmtpd Controller"""
    if config.ENABLE_SENTRY:
        init_sentry()

    controller = Controller(MailHandler(), hostname="0.0.0.0", port=port)

    controller.start()
    LOG.d("Start mail controller %s %s", controller.hostname, controller.port)

    while True:
        time.sleep(2)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "-p", "--port", help="SMTP port to listen for", type=int, default=20381
    )
    args = parser.parse_args()

    LOG.i("Listen for port %s", args.port)
    main(port=args.port)
