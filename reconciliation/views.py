from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from common.errors import InvalidSignature
from financials.gateways import get_payment_gateway

from .coordinator import apply, verify_and_parse


@csrf_exempt
@require_POST
def payment_provider_webhook(request):
    gateway = get_payment_gateway()
    try:
        event = verify_and_parse(
            request.body,
            request.headers.get("Stripe-Signature", ""),
            settings.STRIPE_WEBHOOK_SECRET,
            gateway=gateway,
        )
    except InvalidSignature as e:
        return JsonResponse(e.as_payload(), status=400)
    # acknowledged whatever the outcome so the provider stops retrying
    apply(event, method=gateway.method)
    return JsonResponse({"received": True})
