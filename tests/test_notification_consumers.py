import pytest

from app import crud
from app.models.message_log import MessageLog
from app.models.registrant import Registrant
from app.schemas.registrant import RegistrantCreate
from app.services import admission
from app.services.delivery import DeliveryResult
from app.services.enrichment_service import Enrichment
from app.services.notification_consumers import RegistrationConsumers
from app.services.registration_events import RegistrationCreated, RegistrationEventBus, RegistrationSource
from app.services.zoho_crm import ZohoLeadResult


class FakeMailer:
    def __init__(self, result):
        self.result = result
        self.sent = []

    def send_confirmation_email(self, **kwargs):
        self.sent.append(kwargs)
        return self.result


class FakeWhatsApp:
    def __init__(self, result):
        self.result = result
        self.sent = []

    def send_confirmation(self, **kwargs):
        self.sent.append(kwargs)
        return self.result


class FakeCRM:
    def __init__(self):
        self.leads = []

    def create_lead(self, lead):
        self.leads.append(lead)
        return ZohoLeadResult(success=True, lead_id="z-1")


class FakeEnricher:
    def enrich(self, name, interested_major):
        return Enrichment(standardized_major="Computer Science", major_category="Engineering", gender="Female")


class BrokenEnricher:
    def enrich(self, name, interested_major):
        raise RuntimeError("model unavailable")


@pytest.fixture
def wired(session_factory):
    mailer = FakeMailer(DeliveryResult(success=True, message_id="<msg-1@fairpass>"))
    whatsapp = FakeWhatsApp(DeliveryResult(success=False, error="Twilio WhatsApp not configured"))
    crm = FakeCRM()
    consumers = RegistrationConsumers(
        session_factory=session_factory,
        mailer=mailer,
        whatsapp=whatsapp,
        crm=crm,
        enricher=FakeEnricher(),
    )
    bus = RegistrationEventBus()
    consumers.register(bus)
    return bus, consumers


def register_student(db, bus, event):
    return admission.register(db, event_id=event.id, bus=bus, locale="ar", registrant_in=RegistrantCreate(
        full_name="Leyla Yilmaz",
        email="leyla@example.com",
        phone="+905557778899",
        country="Turkey",
        city="Izmir",
        interested_major="comp sci",
        consent_accepted=True,
        utm_medium="social",
    ))


def test_registration_fans_out_to_every_consumer(db, make_event, wired):
    bus, consumers = wired
    event = make_event(zoho_lead_source="Fair Istanbul", zoho_campaign_id="camp-9")
    registration = register_student(db, bus, event)

    email = consumers.mailer.sent[0]
    assert email["to_email"] == "leyla@example.com"
    assert email["token"] == registration.token
    assert email["event_venue"] == "Congress Center, Istanbul"

    whatsapp = consumers.whatsapp.sent[0]
    assert whatsapp["to"] == "+905557778899"
    assert whatsapp["language"] == "ar"

    lead = consumers.crm.leads[0]
    assert lead.lead_source == "Fair Istanbul"
    assert lead.campaign_id == "camp-9"
    assert lead.utm_medium == "social"
    assert lead.event_title == event.title


def test_deliveries_are_logged_per_channel(db, make_event, wired):
    bus, _ = wired
    registration = register_student(db, bus, make_event())

    logs = {log.channel: log for log in crud.message_log.get_for_registration(db, registration_id=registration.id)}
    assert logs["EMAIL"].status == "SENT"
    assert logs["EMAIL"].provider_message_id == "<msg-1@fairpass>"
    assert logs["EMAIL"].sent_at is not None
    assert logs["WHATSAPP"].status == "FAILED"
    assert logs["WHATSAPP"].error_text == "Twilio WhatsApp not configured"
    assert logs["WHATSAPP"].sent_at is None


def test_enrichment_updates_registrant(db, make_event, wired):
    bus, _ = wired
    registration = register_student(db, bus, make_event())

    db.expire_all()
    registrant = db.get(Registrant, registration.registrant_id)
    assert registrant.standardized_major == "Computer Science"
    assert registrant.major_category == "Engineering"
    assert registrant.gender == "Female"


def test_failing_enrichment_leaves_registration_and_messages_intact(db, make_event, session_factory):
    consumers = RegistrationConsumers(
        session_factory=session_factory,
        mailer=FakeMailer(DeliveryResult(success=True, message_id="m")),
        whatsapp=FakeWhatsApp(DeliveryResult(success=True, message_id="n8n-queued")),
        crm=FakeCRM(),
        enricher=BrokenEnricher(),
    )
    bus = RegistrationEventBus()
    consumers.register(bus)

    registration = register_student(db, bus, make_event())
    assert registration.id is not None
    assert db.query(MessageLog).filter_by(registration_id=registration.id).count() == 2


def test_ticket_recovery_only_resends_messages(db, make_event, wired):
    bus, consumers = wired
    registration = register_student(db, bus, make_event())
    consumers.crm.leads.clear()

    bus.publish(RegistrationCreated(
        registration_id=registration.id,
        event_id=registration.event_id,
        registrant_id=registration.registrant_id,
        token=registration.token,
        source=RegistrationSource.TICKET_RECOVERY,
    ))

    assert len(consumers.mailer.sent) == 2
    assert consumers.crm.leads == []
