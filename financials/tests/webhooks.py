import hashlib
import hmac
import json
import time

SECRET = "whsec_test_secret"


def stripe_signature(payload: str, secret: str = SECRET, timestamp=None) -> str:
    ts = int(timestamp if timestamp is not None else time.time())
    digest = hmac.new(
        secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return f"t={ts},v1={digest}"


def checkout_completed(event_id, payment_id, session_id="cs_test_1", payment_status="paid"):
    return json.dumps({
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": payment_status,
                "metadata": {"paymentId": str(payment_id)},
            }
        },
    })


def payment_failed(event_id, payment_id):
    return json.dumps({
        "id": event_id,
        "type": "payment_intent.payment_failed",
        "data": {
            "object": {
                "id": "pi_test_1",
                "object": "payment_intent",
                "metadata": {"paymentId": str(payment_id)},
            }
        },
    })
