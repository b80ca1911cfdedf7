# File: app/services/checkin_recorder.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import RegistrationCancelled, StorageError
from app.models.checkin import CheckInMethod
from app.models.registration import Registration
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass
class CheckInOutcome:
    first_time: bool
    checked_in_at: datetime
    operator_id: str
    method: str


def check_in(
    db: Session,
    *,
    registration: Registration,
    operator_id: str,
    method: str = CheckInMethod.QR.value,
    now: Optional[datetime] = None,
) -> CheckInOutcome:
    """
    Record that the holder of ``registration`` arrived.

    Repeat scans return the original check-in with ``first_time=False``.
    When two scans race, the unique constraint on registration_id lets one
    insert win; the loser reads the winner's row and reports it the same
    way instead of failing.
    """
    if registration.is_cancelled:
        raise RegistrationCancelled(registration.id)

    existing = crud.checkin.get_by_registration(db, registration_id=registration.id)
    if existing:
        return CheckInOutcome(
            first_time=False,
            checked_in_at=existing.checked_in_at,
            operator_id=existing.operator_id,
            method=existing.method,
        )

    now = now or utcnow()
    result = crud.checkin.insert(
        db,
        registration_id=registration.id,
        operator_id=operator_id,
        method=method,
        checked_in_at=now,
    )
    if result.inserted:
        logger.info(f"Registration {registration.id} checked in by {operator_id} via {method}")
        return CheckInOutcome(first_time=True, checked_in_at=now, operator_id=operator_id, method=method)

    winner = crud.checkin.get_by_registration(db, registration_id=registration.id)
    if winner is None:
        raise StorageError("check in", "insert conflicted but no check-in exists")
    logger.info(f"Registration {registration.id} was checked in concurrently by {winner.operator_id}")
    return CheckInOutcome(
        first_time=False,
        checked_in_at=winner.checked_in_at,
        operator_id=winner.operator_id,
        method=winner.method,
    )
