import logging
from dataclasses import dataclass
from typing import Optional

import requests
from anymail.exceptions import AnymailError
from anymail.message import AnymailMessage
from django.conf import settings
from django.utils.module_loading import import_string

from common.errors import UnsupportedChannel

from .models import Channel

logger = logging.getLogger(__name__)

TWILIO_API = "https://api.twilio.com/2010-04-01"


@dataclass(frozen=True)
class SendResult:
    success: bool
    provider_message_id: Optional[str] = None
    error: Optional[str] = None


class TwilioGateway:
    """SMS and WhatsApp through the Twilio Messages REST endpoint."""

    def __init__(self, account_sid=None, auth_token=None, from_number=None, timeout=None):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number or settings.TWILIO_FROM_NUMBER
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS

    def send(self, channel, destination, body) -> SendResult:
        if not (self.account_sid and self.auth_token and self.from_number):
            logger.error("Twilio credentials not fully configured (sid/token/from)")
            return SendResult(False, error="Twilio is not configured")
        to, from_ = destination, self.from_number
        if channel == Channel.WHATSAPP:
            to, from_ = f"whatsapp:{to}", f"whatsapp:{from_}"
        url = f"{TWILIO_API}/Accounts/{self.account_sid}/Messages.json"
        try:
            r = requests.post(
                url,
                data={"From": from_, "To": to, "Body": body},
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
            r.raise_for_status()
            return SendResult(True, provider_message_id=r.json().get("sid"))
        except requests.Timeout:
            logger.error("Twilio %s send to %s timed out", channel, to)
            return SendResult(False, error="timed out")
        except requests.HTTPError as e:
            text = e.response.text if e.response is not None else ""
            logger.error(
                "Twilio %s send failed: %s %s",
                channel, getattr(e.response, "status_code", ""), text[:500],
            )
            return SendResult(False, error=f"HTTP {getattr(e.response, 'status_code', '')}: {text[:200]}")
        except requests.RequestException as e:
            logger.error("Twilio %s send failed: %s", channel, str(e))
            return SendResult(False, error=str(e))


class AnymailGateway:
    """E-mail through the configured Django / Anymail backend."""

    def send(self, channel, destination, body) -> SendResult:
        msg = AnymailMessage(
            subject=settings.NOTIFICATION_EMAIL_SUBJECT,
            body=body,
            to=[destination],
        )
        msg.tags = ["parent-notification"]
        try:
            msg.send()
        except AnymailError as e:
            logger.error("E-mail send to %s failed: %s", destination, str(e))
            return SendResult(False, error=str(e))
        status = getattr(msg, "anymail_status", None)
        return SendResult(True, provider_message_id=getattr(status, "message_id", None))


def get_gateway(channel):
    path = settings.NOTIFICATION_GATEWAYS.get(channel)
    if not path:
        raise UnsupportedChannel(f"no gateway configured for channel {channel}")
    return import_string(path)()
