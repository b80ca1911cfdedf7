# File: app/services/registration_ledger.py
import logging
from typing import Tuple
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import StorageError
from app.models.registration import Registration, RegistrationStatus
from app.schemas.registration import RegistrationCreate
from app.services.credentials import generate_token

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 3


def create_registration(
    db: Session, *, event_id: int, registrant_id: int, source: str
) -> Tuple[Registration, bool]:
    """
    Insert the (event, registrant) registration with a freshly minted token.

    Returns ``(registration, True)`` when this call created the row and
    ``(existing, False)`` when another writer already holds the pair. A
    conflict with no row for the pair can only be a token collision, which
    is retried with a new token.
    """
    for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
        result = crud.registration.insert(db, obj_in=RegistrationCreate(
            event_id=event_id,
            registrant_id=registrant_id,
            token=generate_token(),
            status=RegistrationStatus.REGISTERED.value,
            source=source,
        ))
        if result.inserted:
            logger.info(
                f"Registration {result.obj.id} created for registrant {registrant_id} "
                f"at event {event_id} (source={source})"
            )
            return result.obj, True

        existing = crud.registration.get_by_event_and_registrant(
            db, event_id=event_id, registrant_id=registrant_id
        )
        if existing:
            logger.info(f"Registrant {registrant_id} already holds registration {existing.id} for event {event_id}")
            return existing, False

        logger.warning(f"Credential token collision on attempt {attempt} for event {event_id}, retrying")

    raise StorageError("create registration", f"no unique token after {MAX_TOKEN_ATTEMPTS} attempts")
