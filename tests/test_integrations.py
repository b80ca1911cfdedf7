import json
from types import SimpleNamespace

import requests

from app.core.config import settings
from app.core.email_service import EmailService
from app.services import whatsapp_service as whatsapp_module
from app.services import zoho_crm as zoho_module
from app.services.enrichment_service import EnrichmentService, parse_enrichment
from app.services.whatsapp_service import WhatsAppService, render_message, to_e164
from app.services.zoho_crm import ZohoCRMService, ZohoLeadData, build_lead_record


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload or {}
        self.status_code = status_code

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


# ---------------------------
# Email
# ---------------------------

def test_email_disabled_reports_success_without_smtp(monkeypatch):
    monkeypatch.setattr(settings, "SEND_EMAILS", False)
    result = EmailService().send_confirmation_email(
        to_email="a@example.com",
        student_name="A",
        event_title="Fair",
        event_date="May 01, 2027 10:00 AM",
        event_venue="Hall, Istanbul",
        token="A" * 24,
    )
    assert result.success
    assert result.message_id


def test_email_smtp_failure_is_reported(monkeypatch):
    monkeypatch.setattr(settings, "SEND_EMAILS", True)

    def refuse(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr("app.core.email_service.smtplib.SMTP", refuse)
    result = EmailService().send_email(["a@example.com"], "Subject", "<p>hi</p>")
    assert not result.success
    assert "connection refused" in result.error


# ---------------------------
# WhatsApp
# ---------------------------

def test_whatsapp_prefers_n8n_webhook(monkeypatch):
    calls = []
    monkeypatch.setattr(whatsapp_module.requests, "post", lambda url, **kw: calls.append((url, kw)) or FakeResponse())
    service = WhatsAppService()
    service.webhook_url = "https://n8n.test/hook"

    result = service.send_confirmation("+90 555 111 2233", "Ali", "Fair", "May 1", "B" * 24, language="tr")

    assert result.success
    assert result.message_id == "n8n-queued"
    url, kwargs = calls[0]
    assert url == "https://n8n.test/hook"
    assert kwargs["json"]["qrUrl"].endswith("/r/" + "B" * 24)
    assert kwargs["json"]["language"] == "tr"


def test_whatsapp_without_any_provider_fails_softly(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)
    service = WhatsAppService()
    service.webhook_url = None

    result = service.send_confirmation("+905551112233", "Ali", "Fair", "May 1", "B" * 24)
    assert not result.success
    assert result.error == "Twilio WhatsApp not configured"


def test_whatsapp_via_twilio(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setattr(settings, "TWILIO_WHATSAPP_NUMBER", "+14155238886")
    calls = []
    monkeypatch.setattr(
        whatsapp_module.requests, "post",
        lambda url, **kw: calls.append((url, kw)) or FakeResponse({"sid": "SM42"}),
    )
    service = WhatsAppService()
    service.webhook_url = None

    result = service.send_confirmation("+90 (555) 111-2233", "Ali", "Fair", "May 1", "B" * 24)

    assert result.success
    assert result.message_id == "SM42"
    url, kwargs = calls[0]
    assert "/Accounts/AC123/Messages.json" in url
    assert kwargs["data"]["To"] == "whatsapp:+905551112233"
    assert kwargs["data"]["From"] == "whatsapp:+14155238886"
    assert kwargs["auth"] == ("AC123", "secret")


def test_whatsapp_message_falls_back_to_english():
    body = render_message("Ali", "Fair", "May 1", "C" * 24, language="de")
    assert body.startswith("Hi Ali!")
    assert to_e164("+90 555-111 22 33") == "+905551112233"


# ---------------------------
# Zoho CRM
# ---------------------------

def test_lead_record_splits_name_and_carries_attribution():
    record = build_lead_record(ZohoLeadData(
        full_name="Mehmet Ali Kaya",
        email="m@example.com",
        phone="+905551112233",
        country="Turkey",
        city="Bursa",
        campaign_id="camp-1",
        utm_medium="social",
        event_title="Fair Bursa",
    ))
    assert record["First_Name"] == "Mehmet Ali"
    assert record["Last_Name"] == "Kaya"
    assert record["Lead_Source"] == "Event Registration"
    assert record["UTM_Source"] == "Fair Bursa"
    assert record["Campaign_ID"] == "camp-1"


def configure_zoho(monkeypatch):
    monkeypatch.setattr(settings, "ZOHO_CLIENT_ID", "cid")
    monkeypatch.setattr(settings, "ZOHO_CLIENT_SECRET", "secret")
    monkeypatch.setattr(settings, "ZOHO_REFRESH_TOKEN", "refresh")


def test_zoho_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "ZOHO_CLIENT_ID", None)
    result = ZohoCRMService().create_lead(ZohoLeadData(full_name="A B", email="a@b.c", phone="1"))
    assert not result.success
    assert result.error == "Zoho CRM not configured"


def test_zoho_caches_access_token_and_treats_duplicates_as_success(monkeypatch):
    configure_zoho(monkeypatch)
    calls = []

    def fake_post(url, **kwargs):
        calls.append(url)
        if url.endswith("/oauth/v2/token"):
            return FakeResponse({"access_token": "tok", "expires_in": 3600})
        return FakeResponse({"data": [{"code": "DUPLICATE_DATA", "details": {"id": "77"}}]})

    monkeypatch.setattr(zoho_module.requests, "post", fake_post)
    service = ZohoCRMService()
    lead = ZohoLeadData(full_name="A B", email="a@b.c", phone="1")

    first = service.create_lead(lead)
    second = service.create_lead(lead)

    assert first.success and first.lead_id == "77"
    assert second.success
    assert sum(1 for url in calls if url.endswith("/oauth/v2/token")) == 1


def test_zoho_failure_is_reported(monkeypatch):
    configure_zoho(monkeypatch)

    def fake_post(url, **kwargs):
        if url.endswith("/oauth/v2/token"):
            return FakeResponse({"access_token": "tok", "expires_in": 3600})
        return FakeResponse({"data": [{"status": "error", "message": "MANDATORY_NOT_FOUND"}]})

    monkeypatch.setattr(zoho_module.requests, "post", fake_post)
    result = ZohoCRMService().create_lead(ZohoLeadData(full_name="A", email="a@b.c", phone="1"))
    assert not result.success
    assert result.error == "MANDATORY_NOT_FOUND"


# ---------------------------
# AI enrichment
# ---------------------------

def test_parse_enrichment_drops_unexpected_values():
    enrichment = parse_enrichment(json.dumps({
        "standardizedMajor": "Dentistry",
        "majorCategory": "Health",
        "gender": "Unknown",
    }))
    assert enrichment.standardized_major == "Dentistry"
    assert enrichment.major_category == "Health"
    assert enrichment.gender is None
    assert parse_enrichment("not json").is_empty


def test_enrichment_without_api_key_is_empty(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    assert EnrichmentService().enrich("Ali", "medicine").is_empty


def test_enrichment_uses_chat_completion_json(monkeypatch):
    captured = {}

    def create(**kwargs):
        captured.update(kwargs)
        message = SimpleNamespace(content='{"standardizedMajor": "Medicine", "majorCategory": "Health", "gender": "Male"}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    enrichment = EnrichmentService(client=client).enrich("Ali", "med")

    assert enrichment.standardized_major == "Medicine"
    assert enrichment.gender == "Male"
    assert captured["model"] == settings.OPENAI_MODEL
    assert captured["response_format"] == {"type": "json_object"}
