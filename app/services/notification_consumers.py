# File: app/services/notification_consumers.py
"""
Subscribers that react to RegistrationCreated: confirmation email and
WhatsApp message, CRM lead and profile enrichment.

Each handler opens its own database session; the request that published
the event may already have finished.
"""
import logging
from contextlib import contextmanager
from typing import Callable, Optional
from sqlalchemy.orm import Session
from app import crud
from app.core.email_service import EmailService, email_service
from app.db.database import SessionLocal
from app.models.message_log import MessageChannel
from app.models.registration import Registration
from app.services.enrichment_service import EnrichmentService, enrichment_service
from app.services.registration_events import RegistrationCreated, RegistrationEventBus, RegistrationSource
from app.services.whatsapp_service import WhatsAppService, whatsapp_service
from app.services.zoho_crm import ZohoCRMService, ZohoLeadData, zoho_crm_service

logger = logging.getLogger(__name__)

CONFIRMATION_TEMPLATE = "confirmation"

# Resends only repeat the messages; the lead and profile already exist
MESSAGE_ONLY_SOURCES = (RegistrationSource.TICKET_RECOVERY,)


def format_event_date(value) -> str:
    return value.strftime("%B %d, %Y %I:%M %p")


class RegistrationConsumers:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        mailer: EmailService = email_service,
        whatsapp: WhatsAppService = whatsapp_service,
        crm: ZohoCRMService = zoho_crm_service,
        enricher: EnrichmentService = enrichment_service,
    ):
        self.session_factory = session_factory
        self.mailer = mailer
        self.whatsapp = whatsapp
        self.crm = crm
        self.enricher = enricher

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def _load(self, db: Session, event: RegistrationCreated) -> Optional[Registration]:
        registration = crud.registration.get(db, id=event.registration_id)
        if registration is None:
            logger.warning(f"Registration {event.registration_id} vanished before {event.source} consumers ran")
        return registration

    def send_confirmation_email(self, event: RegistrationCreated) -> None:
        with self._session() as db:
            registration = self._load(db, event)
            if registration is None:
                return
            result = self.mailer.send_confirmation_email(
                to_email=registration.registrant.email,
                student_name=registration.registrant.full_name,
                event_title=registration.event.title,
                event_date=format_event_date(registration.event.start_date_time),
                event_venue=registration.event.venue_label,
                token=registration.token,
            )
            crud.message_log.record_delivery(
                db,
                event_id=event.event_id,
                registration_id=registration.id,
                channel=MessageChannel.EMAIL.value,
                template_name=CONFIRMATION_TEMPLATE,
                result=result,
            )

    def send_whatsapp_confirmation(self, event: RegistrationCreated) -> None:
        with self._session() as db:
            registration = self._load(db, event)
            if registration is None:
                return
            result = self.whatsapp.send_confirmation(
                to=registration.registrant.phone,
                student_name=registration.registrant.full_name,
                event_title=registration.event.title,
                event_date=format_event_date(registration.event.start_date_time),
                token=registration.token,
                language=event.locale,
            )
            crud.message_log.record_delivery(
                db,
                event_id=event.event_id,
                registration_id=registration.id,
                channel=MessageChannel.WHATSAPP.value,
                template_name=CONFIRMATION_TEMPLATE,
                result=result,
            )

    def create_crm_lead(self, event: RegistrationCreated) -> None:
        if event.source in MESSAGE_ONLY_SOURCES:
            return
        with self._session() as db:
            registration = self._load(db, event)
            if registration is None:
                return
            registrant = registration.registrant
            target = registration.event
            result = self.crm.create_lead(ZohoLeadData(
                full_name=registrant.full_name,
                email=registrant.email,
                phone=registrant.phone,
                country=registrant.country,
                city=registrant.city,
                lead_source=target.zoho_lead_source or target.title,
                campaign_id=target.zoho_campaign_id,
                utm_medium=registrant.utm_medium,
                utm_campaign=registrant.utm_campaign,
                event_title=target.title,
            ))
            if not result.success:
                logger.warning(f"CRM lead for registration {registration.id} not created: {result.error}")

    def enrich_registrant(self, event: RegistrationCreated) -> None:
        if event.source in MESSAGE_ONLY_SOURCES:
            return
        with self._session() as db:
            registrant = crud.registrant.get(db, id=event.registrant_id)
            if registrant is None:
                return
            enrichment = self.enricher.enrich(registrant.full_name, registrant.interested_major)
            if enrichment.gender or enrichment.standardized_major:
                crud.registrant.update(db, db_obj=registrant, obj_in={
                    "gender": enrichment.gender,
                    "standardized_major": enrichment.standardized_major,
                    "major_category": enrichment.major_category,
                })
                logger.info(f"Enriched registrant {registrant.id}")

    def register(self, bus: RegistrationEventBus) -> None:
        bus.subscribe(self.send_confirmation_email)
        bus.subscribe(self.send_whatsapp_confirmation)
        bus.subscribe(self.create_crm_lead)
        bus.subscribe(self.enrich_registrant)


def register_default_subscribers(
    bus: RegistrationEventBus, session_factory: Callable[[], Session] = SessionLocal
) -> RegistrationConsumers:
    consumers = RegistrationConsumers(session_factory=session_factory)
    consumers.register(bus)
    logger.info(f"Registered {len(bus.subscribers)} registration subscribers")
    return consumers
