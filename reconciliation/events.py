"""Closed set of provider events the coordinator understands.

Anything the portal does not model parses to ``IgnoredEvent`` so it can
still be acknowledged.
"""
from dataclasses import dataclass
from typing import Optional, Union

from common.errors import InvalidSignature

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class CheckoutCompleted:
    event_id: str
    payment_id: Optional[str]
    session_id: str
    payment_status: str


@dataclass(frozen=True)
class PaymentFailed:
    event_id: str
    payment_id: Optional[str]


@dataclass(frozen=True)
class IgnoredEvent:
    event_id: str
    kind: str


Event = Union[CheckoutCompleted, PaymentFailed, IgnoredEvent]


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def parse_event(data) -> Event:
    if not isinstance(data, dict):
        raise InvalidSignature("event payload is not an object")
    event_id = data.get("id")
    kind = data.get("type")
    if not (event_id and isinstance(event_id, str)) or not (kind and isinstance(kind, str)):
        raise InvalidSignature("event payload has no id or type")
    obj = _as_dict(_as_dict(data.get("data")).get("object"))
    metadata = _as_dict(obj.get("metadata"))
    payment_id = metadata.get("paymentId")
    if kind == CHECKOUT_COMPLETED:
        return CheckoutCompleted(
            event_id=event_id,
            payment_id=payment_id,
            session_id=str(obj.get("id") or ""),
            payment_status=str(obj.get("payment_status") or ""),
        )
    if kind == PAYMENT_FAILED:
        return PaymentFailed(event_id=event_id, payment_id=payment_id)
    return IgnoredEvent(event_id=event_id, kind=kind)
