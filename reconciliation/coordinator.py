"""Applies verified provider events to the payment ledger.

Webhooks arrive at least once and in any order. Each event id is recorded
in the same transaction as its effect, and every payment transition is a
conditional update from an open status, so a repeated or late event turns
into a logged no-op instead of a second write.
"""
import enum
import logging

from django.db import transaction

from common.errors import InvalidSignature
from financials import ledger
from financials.gateways import get_payment_gateway
from financials.models import Payment

from .events import CheckoutCompleted, IgnoredEvent, PaymentFailed
from .guards import remember_event

logger = logging.getLogger(__name__)


class ApplyOutcome(enum.Enum):
    APPLIED = "applied"
    NOOP = "noop"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


def verify_and_parse(raw_payload, signature_header, shared_secret, gateway=None):
    gateway = gateway or get_payment_gateway()
    try:
        return gateway.verify_webhook_signature(raw_payload, signature_header, shared_secret)
    except InvalidSignature as e:
        logger.warning("Rejected webhook with invalid signature: %s", str(e))
        raise


def _payment_pk(raw_id):
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        return None


def _current_status(pk):
    return Payment.objects.filter(pk=pk).values_list("status", flat=True).first()


def _noop(event, pk, action):
    status = _current_status(pk) if pk is not None else None
    if status is None:
        logger.info("Event %s: no payment %r to %s", event.event_id, event.payment_id, action)
    else:
        logger.info(
            "Event %s: payment %s is %s, not applying %s",
            event.event_id, pk, status, action,
        )
    return ApplyOutcome.NOOP


def _apply_checkout_completed(event: CheckoutCompleted, method: str):
    if event.payment_status != "paid":
        logger.info(
            "Event %s: checkout %s finished with payment_status=%s, nothing to settle",
            event.event_id, event.session_id, event.payment_status,
        )
        return ApplyOutcome.IGNORED
    pk = _payment_pk(event.payment_id)
    if pk is None or not ledger.settle_payment(pk, method, event.session_id):
        return _noop(event, pk, "settle")
    logger.info("Event %s: payment %s settled by %s", event.event_id, pk, event.session_id)
    return ApplyOutcome.APPLIED


def _apply_payment_failed(event: PaymentFailed):
    pk = _payment_pk(event.payment_id)
    if pk is None or not ledger.cancel_payment(pk):
        return _noop(event, pk, "cancel")
    logger.info("Event %s: payment %s cancelled after failed charge", event.event_id, pk)
    return ApplyOutcome.APPLIED


def apply(event, method="STRIPE") -> ApplyOutcome:
    with transaction.atomic():
        if not remember_event(event.event_id):
            logger.info("Event %s already processed, skipping", event.event_id)
            return ApplyOutcome.DUPLICATE
        if isinstance(event, CheckoutCompleted):
            return _apply_checkout_completed(event, method)
        if isinstance(event, PaymentFailed):
            return _apply_payment_failed(event)
        if isinstance(event, IgnoredEvent):
            logger.info("Unhandled event type: %s (%s)", event.kind, event.event_id)
            return ApplyOutcome.IGNORED
        raise TypeError(f"unknown event {event!r}")
