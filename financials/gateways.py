import functools
import json
import logging
from dataclasses import dataclass

import requests
import stripe
from django.conf import settings
from django.utils.module_loading import import_string

from common.errors import GatewayFailure, GatewayTimeout, InvalidSignature
from reconciliation.events import parse_event

logger = logging.getLogger(__name__)

# seconds a signed webhook stays acceptable after Stripe stamped it
WEBHOOK_TOLERANCE = 300


@functools.lru_cache(maxsize=None)
def _stripe_client(api_key, timeout):
    # one attempt only; the caller decides whether to retry
    return stripe.StripeClient(
        api_key,
        http_client=stripe.RequestsClient(timeout=timeout),
        max_network_retries=0,
    )


def _is_timeout(error) -> bool:
    cause = error.__cause__ or error.__context__
    if isinstance(cause, requests.Timeout):
        return True
    text = str(error)
    return "Timeout" in text or "timed out" in text.lower()


@dataclass(frozen=True)
class CheckoutSession:
    redirect_url: str
    session_id: str


class StripeGateway:
    """Hosted checkout and webhook verification against Stripe."""

    method = "STRIPE"

    def __init__(self, api_key=None, timeout=None, client=None):
        self.api_key = api_key or settings.STRIPE_SECRET_KEY
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = _stripe_client(self.api_key, self.timeout)
        return self._client

    def create_checkout_session(
        self,
        amount_minor_units: int,
        currency: str,
        description: str,
        metadata: dict,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        try:
            session = self.client.checkout.sessions.create(params=dict(
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": description},
                            "unit_amount": amount_minor_units,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                # failed-payment events come from the PaymentIntent, not the session
                payment_intent_data={"metadata": metadata},
            ))
        except stripe.APIConnectionError as e:
            if _is_timeout(e):
                logger.error("Stripe checkout session creation timed out: %s", str(e))
                raise GatewayTimeout("payment provider did not respond") from e
            logger.error("Could not reach Stripe: %s", str(e))
            raise GatewayFailure("payment provider is unreachable") from e
        except stripe.StripeError as e:
            logger.error(
                "Stripe checkout session creation failed: %s %s",
                type(e).__name__, str(e),
            )
            raise GatewayFailure("payment provider rejected the request") from e
        return CheckoutSession(redirect_url=session.url, session_id=session.id)

    def verify_webhook_signature(self, raw_body, signature_header: str, secret: str):
        if not secret:
            raise InvalidSignature("webhook secret is not configured")
        if not signature_header:
            raise InvalidSignature("missing signature header")
        try:
            payload = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
            stripe.WebhookSignature.verify_header(
                payload, signature_header, secret, tolerance=WEBHOOK_TOLERANCE
            )
            data = json.loads(payload)
        except stripe.SignatureVerificationError as e:
            raise InvalidSignature(str(e)) from e
        except ValueError as e:
            raise InvalidSignature("payload is not valid JSON") from e
        return parse_event(data)


def get_payment_gateway():
    return import_string(settings.PAYMENT_GATEWAY)()
