# File: app/services/admission.py
import logging
from datetime import datetime
from typing import Optional
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import (
    EventUnavailable,
    RegistrationNotOpen,
    RegistrationClosed,
    EventEnded,
    CapacityExceeded,
    DuplicateRegistration,
    ValidationFailed,
)
from app.models.event import Event
from app.models.registration import Registration
from app.schemas.registrant import RegistrantCreate
from app.services.registration_events import (
    RegistrationCreated,
    RegistrationEventBus,
    RegistrationSource,
)
from app.services.registration_ledger import create_registration
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


def check_event_accepts_registrations(db: Session, *, event_id: int, now: datetime) -> Event:
    """Status, registration window and end time"""
    event = crud.event.get(db, event_id)
    if not event or not event.is_published:
        raise EventUnavailable(event_id)

    if event.registration_open_at and now < event.registration_open_at:
        raise RegistrationNotOpen(event.registration_open_at)

    if event.registration_close_at and now > event.registration_close_at:
        raise RegistrationClosed(event.registration_close_at)

    if now > event.end_date_time:
        raise EventEnded(event.end_date_time)

    return event


def check_capacity(db: Session, *, event: Event) -> None:
    if event.capacity is None:
        return
    # Soft limit: concurrent admissions may overshoot slightly
    registered = crud.registration.count_active_for_event(db, event_id=event.id)
    if registered >= event.capacity:
        raise CapacityExceeded(event.capacity)


def register(
    db: Session,
    *,
    event_id: int,
    registrant_in: RegistrantCreate,
    bus: RegistrationEventBus,
    locale: str = "en",
    background_tasks: Optional[BackgroundTasks] = None,
    now: Optional[datetime] = None,
) -> Registration:
    """
    Admit one person to one event.

    Rejections happen before any row is written, so a refused attempt never
    leaves a registrant or registration behind. Someone already registered
    is told so even when the event has since filled up. The (event,
    registrant) unique constraint decides concurrent attempts for the same
    person.
    """
    if not registrant_in.consent_accepted:
        raise ValidationFailed("consent", "You must agree to the terms and privacy policy")

    now = now or utcnow()
    event = check_event_accepts_registrations(db, event_id=event_id, now=now)

    existing = crud.registration.get_for_event_by_identity(
        db, event_id=event_id, email=registrant_in.email, phone=registrant_in.phone
    )
    if existing:
        logger.info(f"Duplicate registration attempt for event {event_id} by registrant {existing.registrant_id}")
        raise DuplicateRegistration(event_id, existing.id)

    check_capacity(db, event=event)

    if registrant_in.consent_accepted and registrant_in.consent_timestamp is None:
        registrant_in = registrant_in.model_copy(update={"consent_timestamp": now})
    registrant = crud.registrant.find_or_create(db, obj_in=registrant_in)

    registration, created = create_registration(
        db, event_id=event_id, registrant_id=registrant.id, source=RegistrationSource.PUBLIC_FORM
    )
    if not created:
        raise DuplicateRegistration(event_id, registration.id)

    bus.publish(RegistrationCreated(
        registration_id=registration.id,
        event_id=event_id,
        registrant_id=registrant.id,
        token=registration.token,
        locale=locale,
        source=RegistrationSource.PUBLIC_FORM,
    ), background_tasks)
    return registration
