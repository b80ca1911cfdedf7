# File: app/services/ticket_recovery.py
import logging
from typing import Optional
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import RegistrationNotFound
from app.models.registration import Registration
from app.services.registration_events import (
    RegistrationCreated,
    RegistrationEventBus,
    RegistrationSource,
)

logger = logging.getLogger(__name__)


def recover_ticket(
    db: Session,
    *,
    event_id: int,
    email_or_phone: str,
    bus: RegistrationEventBus,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Registration:
    """Find a person's registration for an event and resend the confirmation"""
    registration = crud.registration.get_for_event_by_contact(
        db, event_id=event_id, email_or_phone=email_or_phone
    )
    if not registration:
        raise RegistrationNotFound("No registration found for this event.")

    logger.info(f"Resending ticket for registration {registration.id} at event {event_id}")
    bus.publish(RegistrationCreated(
        registration_id=registration.id,
        event_id=registration.event_id,
        registrant_id=registration.registrant_id,
        token=registration.token,
        source=RegistrationSource.TICKET_RECOVERY,
    ), background_tasks)
    return registration
