"""
WhatsApp confirmation delivery
Prefers the n8n webhook when configured, otherwise the Twilio Messages API
"""

import re
import logging
import requests
from app.core.config import settings
from app.services.credentials import credential_url
from app.services.delivery import DeliveryResult

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

MESSAGE_TEMPLATES = {
    "en": (
        "Hi {name}! \U0001F44B\n\n"
        "Your registration for {event} on {date} is confirmed! ✅\n\n"
        "Access your entry pass here: {url}\n\n"
        "See you there! \U0001F389"
    ),
    "tr": (
        "Merhaba {name}! \U0001F44B\n\n"
        "{date} tarihindeki {event} kaydın onaylandı! ✅\n\n"
        "Giriş kartın: {url}\n\n"
        "Orada görüşmek üzere! \U0001F389"
    ),
    "ar": (
        "مرحباً {name}! \U0001F44B\n\n"
        "تم تأكيد تسجيلك في {event} بتاريخ {date}! ✅\n\n"
        "اضغط هنا لفتح بطاقة الدخول: {url}\n\n"
        "نراك هناك! \U0001F389"
    ),
}


def to_e164(phone: str) -> str:
    """Strip everything except digits and a leading plus"""
    return re.sub(r"[^\d+]", "", phone or "")


def render_message(student_name: str, event_title: str, event_date: str, token: str, language: str = "en") -> str:
    template = MESSAGE_TEMPLATES.get(language, MESSAGE_TEMPLATES["en"])
    return template.format(name=student_name, event=event_title, date=event_date, url=credential_url(token))


class WhatsAppService:
    def __init__(self):
        self.webhook_url = settings.N8N_WEBHOOK_URL
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_WHATSAPP_NUMBER
        self.timeout = settings.WHATSAPP_TIMEOUT

    def send_confirmation(
        self,
        to: str,
        student_name: str,
        event_title: str,
        event_date: str,
        token: str,
        language: str = "en",
    ) -> DeliveryResult:
        if self.webhook_url:
            return self._send_via_webhook(to, student_name, event_title, event_date, token, language)

        if not settings.twilio_configured:
            logger.warning("Twilio WhatsApp not configured (and no n8n webhook), skipping")
            return DeliveryResult(success=False, error="Twilio WhatsApp not configured")

        return self._send_via_twilio(to, render_message(student_name, event_title, event_date, token, language))

    def _send_via_webhook(self, to, student_name, event_title, event_date, token, language) -> DeliveryResult:
        logger.info(f"Delegating WhatsApp message for {to} to n8n webhook")
        payload = {
            "to": to,
            "studentName": student_name,
            "eventTitle": event_title,
            "eventDate": event_date,
            "qrUrl": credential_url(token),
            "language": language,
        }
        try:
            response = requests.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return DeliveryResult(success=True, message_id="n8n-queued")
        except requests.exceptions.RequestException as e:
            logger.error(f"n8n webhook failed: {str(e)}")
            return DeliveryResult(success=False, error=str(e))

    def _send_via_twilio(self, to: str, body: str) -> DeliveryResult:
        from_number = self.from_number
        if not from_number.startswith("whatsapp:"):
            from_number = f"whatsapp:{from_number}"

        data = {
            "From": from_number,
            "To": f"whatsapp:{to_e164(to)}",
            "Body": body,
        }
        try:
            response = requests.post(
                TWILIO_MESSAGES_URL.format(sid=self.account_sid),
                data=data,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
            sid = response.json().get("sid")
            logger.info(f"Twilio WhatsApp message sent: {sid}")
            return DeliveryResult(success=True, message_id=sid)
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to send WhatsApp message via Twilio: {str(e)}")
            return DeliveryResult(success=False, error=str(e))


whatsapp_service = WhatsAppService()
