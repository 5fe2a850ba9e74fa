from dataclasses import dataclass
from typing import Optional

from app.inbound import InboundMessage
from app.log import LOG


@dataclass
class DeliveryResult:
    forwarded: bool
    # transport error when the email couldn't be forwarded
    reason: Optional[str] = None


def deliver(message: InboundMessage, destination: str) -> DeliveryResult:
    """Forward the email exactly once, never retry"""
    try:
        message.forward(destination)
    except Exception as e:
        LOG.w("cannot forward %s to %s: %s", message.to_addr, destination, e)
        return DeliveryResult(forwarded=False, reason=str(e))

    LOG.d("%s forwarded to %s", message.to_addr, destination)
    return DeliveryResult(forwarded=True)
