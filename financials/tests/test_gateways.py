import time
from types import SimpleNamespace
from unittest import mock

import stripe
from django.test import SimpleTestCase, override_settings

from common.errors import GatewayFailure, GatewayTimeout, InvalidSignature
from financials.gateways import StripeGateway, _stripe_client, get_payment_gateway
from reconciliation.events import CheckoutCompleted, IgnoredEvent, PaymentFailed

from .webhooks import SECRET, checkout_completed, payment_failed, stripe_signature

CHECKOUT_ARGS = dict(
    amount_minor_units=15000,
    currency="usd",
    description="Tuition 3/2025",
    metadata={"paymentId": "7", "studentId": "3"},
    success_url="https://portal.example.com/payments/?success=true",
    cancel_url="https://portal.example.com/payments/?canceled=true",
)


class StripeCheckoutTests(SimpleTestCase):
    def setUp(self):
        self.stripe = mock.Mock()
        self.create = self.stripe.checkout.sessions.create
        self.gateway = StripeGateway(api_key="sk_test_123", timeout=5, client=self.stripe)

    def test_returns_redirect_url_and_session_id(self):
        self.create.return_value = SimpleNamespace(id="cs_test_9", url="https://checkout.stripe.com/c/pay/cs_test_9")
        session = self.gateway.create_checkout_session(**CHECKOUT_ARGS)
        self.assertEqual(session.session_id, "cs_test_9")
        self.assertEqual(session.redirect_url, "https://checkout.stripe.com/c/pay/cs_test_9")
        params = self.create.call_args.kwargs["params"]
        self.assertEqual(params["line_items"][0]["price_data"]["unit_amount"], 15000)
        self.assertEqual(params["metadata"], CHECKOUT_ARGS["metadata"])
        self.assertEqual(params["payment_intent_data"], {"metadata": CHECKOUT_ARGS["metadata"]})

    def test_timeouts_are_gateway_timeouts(self):
        self.create.side_effect = stripe.APIConnectionError(
            "Unexpected error communicating with Stripe.\n\n(Network error: ReadTimeout: read timed out)"
        )
        with self.assertRaises(GatewayTimeout):
            self.gateway.create_checkout_session(**CHECKOUT_ARGS)

    def test_unreachable_provider_is_a_failure_not_a_timeout(self):
        self.create.side_effect = stripe.APIConnectionError(
            "Unexpected error communicating with Stripe.\n\n(Network error: ConnectionError: Connection refused)"
        )
        with self.assertRaises(GatewayFailure) as ctx:
            self.gateway.create_checkout_session(**CHECKOUT_ARGS)
        self.assertNotIsInstance(ctx.exception, GatewayTimeout)

    def test_other_stripe_errors_are_failures(self):
        self.create.side_effect = stripe.APIError("boom")
        with self.assertRaises(GatewayFailure):
            self.gateway.create_checkout_session(**CHECKOUT_ARGS)

    @mock.patch("stripe.StripeClient")
    def test_client_is_shared_and_leaves_module_settings_alone(self, stripe_client):
        _stripe_client.cache_clear()
        self.addCleanup(_stripe_client.cache_clear)
        retries = stripe.max_network_retries
        first = StripeGateway(api_key="sk_test_shared", timeout=7).client
        second = StripeGateway(api_key="sk_test_shared", timeout=7).client
        self.assertIs(first, second)
        stripe_client.assert_called_once()
        self.assertEqual(stripe_client.call_args.args, ("sk_test_shared",))
        self.assertEqual(stripe_client.call_args.kwargs["max_network_retries"], 0)
        self.assertEqual(stripe.max_network_retries, retries)

    @override_settings(PAYMENT_GATEWAY="financials.tests.fakes.FakeCheckoutGateway")
    def test_gateway_is_configurable(self):
        self.assertEqual(type(get_payment_gateway()).__name__, "FakeCheckoutGateway")


class StripeWebhookVerificationTests(SimpleTestCase):
    def setUp(self):
        self.gateway = StripeGateway(api_key="sk_test_123")

    def test_valid_checkout_completed(self):
        body = checkout_completed("evt_1", 7, session_id="cs_test_7")
        event = self.gateway.verify_webhook_signature(body.encode(), stripe_signature(body), SECRET)
        self.assertEqual(
            event,
            CheckoutCompleted(event_id="evt_1", payment_id="7", session_id="cs_test_7", payment_status="paid"),
        )

    def test_valid_payment_failed(self):
        body = payment_failed("evt_2", 7)
        event = self.gateway.verify_webhook_signature(body, stripe_signature(body), SECRET)
        self.assertEqual(event, PaymentFailed(event_id="evt_2", payment_id="7"))

    def test_unmodelled_kind_parses_to_ignored(self):
        body = '{"id": "evt_3", "type": "customer.created", "data": {"object": {}}}'
        event = self.gateway.verify_webhook_signature(body, stripe_signature(body), SECRET)
        self.assertEqual(event, IgnoredEvent(event_id="evt_3", kind="customer.created"))

    def test_rejections(self):
        body = checkout_completed("evt_1", 7)
        cases = {
            "wrong secret": (body, stripe_signature(body, secret="whsec_other"), SECRET),
            "tampered body": (body.replace('"7"', '"8"'), stripe_signature(body), SECRET),
            "missing header": (body, "", SECRET),
            "garbled header": (body, "not-a-signature", SECRET),
            "no secret configured": (body, stripe_signature(body), ""),
            "stale timestamp": (body, stripe_signature(body, timestamp=time.time() - 3600), SECRET),
        }
        for name, (payload, header, secret) in cases.items():
            with self.subTest(name):
                with self.assertRaises(InvalidSignature):
                    self.gateway.verify_webhook_signature(payload, header, secret)

    def test_malformed_data_parses_without_payment_id(self):
        body = '{"id": "evt_4", "type": "checkout.session.completed", "data": "x"}'
        event = self.gateway.verify_webhook_signature(body, stripe_signature(body), SECRET)
        self.assertEqual(
            event,
            CheckoutCompleted(event_id="evt_4", payment_id=None, session_id="", payment_status=""),
        )

    def test_signed_garbage_is_rejected(self):
        for body in ("not json", "[1, 2]", '{"type": "checkout.session.completed"}'):
            with self.subTest(body=body):
                with self.assertRaises(InvalidSignature):
                    self.gateway.verify_webhook_signature(body, stripe_signature(body), SECRET)
