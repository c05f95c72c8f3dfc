from common.errors import GatewayTimeout
from financials.gateways import CheckoutSession, StripeGateway


class FakeCheckoutGateway(StripeGateway):
    """Verifies webhooks like Stripe but never calls the network for checkout."""

    calls = []

    def create_checkout_session(self, **kwargs):
        self.calls.append(kwargs)
        n = len(self.calls)
        return CheckoutSession(
            redirect_url=f"https://checkout.stripe.test/c/pay/cs_test_{n}",
            session_id=f"cs_test_{n}",
        )


class TimingOutCheckoutGateway(StripeGateway):
    def create_checkout_session(self, **kwargs):
        raise GatewayTimeout("payment provider did not respond")
