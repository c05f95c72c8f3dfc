import threading
from decimal import Decimal
from unittest import skipIf

from django.db import connection
from django.test import TestCase, TransactionTestCase

from common.errors import InvalidSignature
from financials.gateways import StripeGateway
from financials.models import Payment, PaymentStatus
from financials.tests.threads import WORKERS, run_concurrently
from financials.tests.webhooks import SECRET, checkout_completed, stripe_signature
from reconciliation.coordinator import ApplyOutcome, apply, verify_and_parse
from reconciliation.events import CheckoutCompleted, IgnoredEvent, PaymentFailed
from reconciliation.guards import compare_and_set, remember_event
from reconciliation.models import ProcessedEvent
from students.tests.factories import make_student


def completed(event_id, payment, session_id="cs_test_1", payment_status="paid"):
    return CheckoutCompleted(
        event_id=event_id,
        payment_id=str(payment.id),
        session_id=session_id,
        payment_status=payment_status,
    )


class ApplyTests(TestCase):
    def setUp(self):
        self.payment = Payment.objects.create(
            student=make_student(), amount=Decimal("150.00"), month=3, year=2025
        )

    def reload(self):
        self.payment.refresh_from_db()
        return self.payment

    def test_checkout_completed_settles_payment(self):
        self.assertEqual(apply(completed("evt_1", self.payment)), ApplyOutcome.APPLIED)
        payment = self.reload()
        self.assertEqual(payment.status, PaymentStatus.PAID)
        self.assertEqual(payment.method, "STRIPE")
        self.assertEqual(payment.external_reference, "cs_test_1")
        self.assertIsNotNone(payment.settled_at)

    def test_replayed_event_is_applied_once(self):
        event = completed("evt_1", self.payment)
        apply(event)
        settled_at = self.reload().settled_at
        self.assertEqual(apply(event), ApplyOutcome.DUPLICATE)
        self.assertEqual(self.reload().settled_at, settled_at)
        self.assertEqual(ProcessedEvent.objects.filter(event_id="evt_1").count(), 1)

    def test_second_completion_with_new_event_id_is_a_noop(self):
        apply(completed("evt_1", self.payment, session_id="cs_a"))
        outcome = apply(completed("evt_2", self.payment, session_id="cs_b"))
        self.assertEqual(outcome, ApplyOutcome.NOOP)
        self.assertEqual(self.reload().external_reference, "cs_a")

    def test_failure_after_payment_keeps_paid(self):
        apply(completed("evt_1", self.payment))
        outcome = apply(PaymentFailed(event_id="evt_2", payment_id=str(self.payment.id)))
        self.assertEqual(outcome, ApplyOutcome.NOOP)
        self.assertEqual(self.reload().status, PaymentStatus.PAID)

    def test_failure_first_then_completion_stays_cancelled(self):
        self.assertEqual(
            apply(PaymentFailed(event_id="evt_1", payment_id=str(self.payment.id))),
            ApplyOutcome.APPLIED,
        )
        self.assertEqual(apply(completed("evt_2", self.payment)), ApplyOutcome.NOOP)
        payment = self.reload()
        self.assertEqual(payment.status, PaymentStatus.CANCELLED)
        self.assertIsNone(payment.method)
        self.assertIsNone(payment.external_reference)

    def test_overdue_payment_can_be_settled(self):
        Payment.objects.filter(pk=self.payment.pk).update(status=PaymentStatus.OVERDUE)
        self.assertEqual(apply(completed("evt_1", self.payment)), ApplyOutcome.APPLIED)
        self.assertEqual(self.reload().status, PaymentStatus.PAID)

    def test_unpaid_checkout_is_ignored(self):
        outcome = apply(completed("evt_1", self.payment, payment_status="unpaid"))
        self.assertEqual(outcome, ApplyOutcome.IGNORED)
        self.assertEqual(self.reload().status, PaymentStatus.PENDING)

    def test_unknown_or_garbled_payment_ids_are_noops(self):
        for n, raw in enumerate(("999999", "abc", None)):
            with self.subTest(raw=raw):
                event = CheckoutCompleted(
                    event_id=f"evt_{n}", payment_id=raw, session_id="cs", payment_status="paid"
                )
                self.assertEqual(apply(event), ApplyOutcome.NOOP)
        self.assertEqual(self.reload().status, PaymentStatus.PENDING)

    def test_unmodelled_events_are_ignored_but_remembered(self):
        event = IgnoredEvent(event_id="evt_x", kind="customer.created")
        self.assertEqual(apply(event), ApplyOutcome.IGNORED)
        self.assertEqual(apply(event), ApplyOutcome.DUPLICATE)

    def test_unknown_event_type_rolls_back_marker(self):
        class Unknown:
            event_id = "evt_w"

        with self.assertRaises(TypeError):
            apply(Unknown())
        self.assertFalse(ProcessedEvent.objects.filter(event_id="evt_w").exists())


class VerifyAndParseTests(TestCase):
    def test_delegates_to_gateway(self):
        body = checkout_completed("evt_1", 5)
        event = verify_and_parse(body, stripe_signature(body), SECRET, gateway=StripeGateway())
        self.assertEqual(event.payment_id, "5")

    def test_bad_signature_is_logged_and_raised(self):
        body = checkout_completed("evt_1", 5)
        with self.assertLogs("reconciliation.coordinator", level="WARNING"):
            with self.assertRaises(InvalidSignature):
                verify_and_parse(body, "t=1,v1=deadbeef", SECRET, gateway=StripeGateway())


class GuardTests(TestCase):
    def test_remember_event_only_once(self):
        self.assertTrue(remember_event("evt_1"))
        self.assertFalse(remember_event("evt_1"))

    def test_compare_and_set_requires_expected_status(self):
        payment = Payment.objects.create(student=make_student(), amount=1, month=1, year=2025)
        self.assertFalse(compare_and_set(Payment, payment.pk, "PAID", status="CANCELLED"))
        self.assertTrue(compare_and_set(Payment, payment.pk, ("PENDING", "OVERDUE"), status="PAID"))
        self.assertFalse(compare_and_set(Payment, payment.pk, ("PENDING", "OVERDUE"), status="CANCELLED"))


@skipIf(connection.vendor == "sqlite", "SQLite serializes writers at the file level")
class ConcurrentDeliveryTests(TransactionTestCase):
    def setUp(self):
        self.payment = Payment.objects.create(
            student=make_student(), amount=Decimal("150.00"), month=3, year=2025
        )

    def test_same_event_delivered_concurrently_applies_once(self):
        event = completed("evt_race", self.payment)
        outcomes = run_concurrently(lambda: apply(event))
        self.assertEqual(outcomes.count(ApplyOutcome.APPLIED), 1)
        self.assertEqual(outcomes.count(ApplyOutcome.DUPLICATE), WORKERS - 1)
        self.assertEqual(ProcessedEvent.objects.filter(event_id="evt_race").count(), 1)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.PAID)

    def test_distinct_events_for_one_payment_settle_it_once(self):
        ids = iter(range(WORKERS))
        lock = threading.Lock()

        def deliver():
            with lock:
                n = next(ids)
            return apply(completed(f"evt_{n}", self.payment, session_id=f"cs_{n}"))

        outcomes = run_concurrently(deliver)
        self.assertEqual(outcomes.count(ApplyOutcome.APPLIED), 1)
        self.assertEqual(outcomes.count(ApplyOutcome.NOOP), WORKERS - 1)
        self.assertEqual(ProcessedEvent.objects.count(), WORKERS)
