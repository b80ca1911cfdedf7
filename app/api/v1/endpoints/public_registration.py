# File: app/api/v1/endpoints/public_registration.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from app import crud
from app.core.deps import registration_rate_limit
from app.core.exceptions import EventUnavailable
from app.db.database import get_db
from app.schemas.event import PublicEvent
from app.schemas.registrant import RegistrantCreate
from app.schemas.registration import (
    PublicRegistrationRequest,
    RegistrationResponse,
    TicketRecoveryRequest,
    TicketRecoveryResponse,
)
from app.services import admission, ticket_recovery
from app.services.registration_events import RegistrationEventBus, get_event_bus
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_registrant(data: PublicRegistrationRequest) -> RegistrantCreate:
    return RegistrantCreate(
        full_name=data.fullName.strip(),
        email=str(data.email).strip().lower(),
        phone="".join(data.phone.split()),
        country=data.country,
        city=data.city,
        nationality=data.nationality,
        level_of_study=data.levelOfStudy,
        interested_major=data.interestedMajor,
        consent_accepted=data.consent,
        utm_source=data.utmSource,
        utm_medium=data.utmMedium,
        utm_campaign=data.utmCampaign,
    )


@router.get("/{event_id}/public", response_model=PublicEvent)
def get_public_event(event_id: int, db: Session = Depends(get_db)):
    """Event details for the public registration page"""
    event = crud.event.get(db, event_id)
    if not event or not event.is_published:
        raise EventUnavailable(event_id)

    result = PublicEvent.model_validate(event)
    result.registered_count = crud.registration.count_active_for_event(db, event_id=event_id)
    return result


@router.post(
    "/{event_id}/register",
    response_model=RegistrationResponse,
    dependencies=[Depends(registration_rate_limit)],
)
def register_for_event(
    event_id: int,
    data: PublicRegistrationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    bus: RegistrationEventBus = Depends(get_event_bus),
):
    """Register a visitor for an event and issue their entry credential"""
    logger.info(f"Registration request for event {event_id} from {data.email}")

    registration = admission.register(
        db,
        event_id=event_id,
        registrant_in=_to_registrant(data),
        bus=bus,
        locale=data.locale,
        background_tasks=background_tasks,
    )

    logger.info(f"Registration {registration.id} created for event {event_id}")
    return RegistrationResponse(registrationId=registration.id, credentialToken=registration.token)


@router.post("/{event_id}/recover-ticket", response_model=TicketRecoveryResponse)
def recover_ticket(
    event_id: int,
    data: TicketRecoveryRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    bus: RegistrationEventBus = Depends(get_event_bus),
):
    """Kiosk lookup: resend the confirmation for an existing registration"""
    registration = ticket_recovery.recover_ticket(
        db,
        event_id=event_id,
        email_or_phone=data.emailOrPhone,
        bus=bus,
        background_tasks=background_tasks,
    )
    return TicketRecoveryResponse(
        success=True,
        credentialToken=registration.token,
        studentName=registration.registrant.full_name,
    )
