# File: app/services/scan_resolver.py
import logging
from dataclasses import dataclass
from typing import Optional
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session
from app import crud
from app.core.config import settings
from app.core.exceptions import RegistrationNotFound
from app.models.checkin import CheckIn
from app.models.registration import Registration
from app.services.registration_events import (
    RegistrationCreated,
    RegistrationEventBus,
    RegistrationSource,
)
from app.services.registration_ledger import create_registration

logger = logging.getLogger(__name__)


class ResolutionKind:
    SAME_EVENT = "same_event"
    CROSS_EVENT_EXISTING = "cross_event_existing"
    CROSS_EVENT_CREATED = "cross_event_created"
    SEARCH = "search"


@dataclass
class ScanResolution:
    registration: Registration
    check_in: Optional[CheckIn]
    kind: str
    scanned_registration_id: Optional[int] = None

    @property
    def cross_event(self) -> bool:
        return self.kind in (ResolutionKind.CROSS_EVENT_EXISTING, ResolutionKind.CROSS_EVENT_CREATED)


def _with_check_in(db: Session, registration: Registration, kind: str, scanned_id: Optional[int] = None) -> ScanResolution:
    check_in = crud.checkin.get_by_registration(db, registration_id=registration.id)
    return ScanResolution(
        registration=registration,
        check_in=check_in,
        kind=kind,
        scanned_registration_id=scanned_id,
    )


def resolve(
    db: Session,
    *,
    target_event_id: int,
    token: str,
    bus: Optional[RegistrationEventBus] = None,
    background_tasks: Optional[BackgroundTasks] = None,
    auto_register: Optional[bool] = None,
) -> ScanResolution:
    """
    Work out which registration a scanned token refers to at ``target_event_id``.

    1. A registration for the target event carrying the token.
    2. Otherwise the token's registration at any event (tokens are
       globally unique); unknown tokens raise RegistrationNotFound.
    3. For a cross-event token, the same registrant's own registration at
       the target event, matched by registrant rather than token.
    4. Failing that, a new registration at the target event with a fresh
       token. Re-scanning the original token later lands on it via step 3.
    """
    token = (token or "").strip()
    if not token:
        raise RegistrationNotFound("Invalid QR code")

    registration = crud.registration.get_by_event_and_token(db, event_id=target_event_id, token=token)
    if registration:
        return _with_check_in(db, registration, ResolutionKind.SAME_EVENT)

    scanned = crud.registration.get_by_token(db, token=token)
    if not scanned:
        logger.info(f"Scan at event {target_event_id}: token not recognised")
        raise RegistrationNotFound("Invalid QR code")

    logger.info(
        f"Scan at event {target_event_id}: token belongs to event {scanned.event_id} "
        f"(registration {scanned.id}, registrant {scanned.registrant_id})"
    )
    same_event = crud.registration.get_by_event_and_registrant(
        db, event_id=target_event_id, registrant_id=scanned.registrant_id
    )
    if same_event:
        return _with_check_in(db, same_event, ResolutionKind.CROSS_EVENT_EXISTING, scanned.id)

    if auto_register is None:
        auto_register = settings.CROSS_EVENT_AUTO_REGISTRATION
    if not auto_register:
        raise RegistrationNotFound("This QR code belongs to a different event")

    registration, created = create_registration(
        db,
        event_id=target_event_id,
        registrant_id=scanned.registrant_id,
        source=RegistrationSource.CROSS_EVENT_SCAN,
    )
    if not created:
        # A concurrent scan created it first
        return _with_check_in(db, registration, ResolutionKind.CROSS_EVENT_EXISTING, scanned.id)

    logger.info(
        f"Auto-registered registrant {scanned.registrant_id} for event {target_event_id} "
        f"from cross-event token (new registration {registration.id})"
    )
    if bus is not None and settings.NOTIFY_ON_CROSS_EVENT_REGISTRATION:
        bus.publish(RegistrationCreated(
            registration_id=registration.id,
            event_id=target_event_id,
            registrant_id=scanned.registrant_id,
            token=registration.token,
            source=RegistrationSource.CROSS_EVENT_SCAN,
        ), background_tasks)
    return ScanResolution(
        registration=registration,
        check_in=None,
        kind=ResolutionKind.CROSS_EVENT_CREATED,
        scanned_registration_id=scanned.id,
    )


def resolve_search(db: Session, *, target_event_id: int, search: str) -> ScanResolution:
    """Manual lookup by email or phone fragment, limited to the target event"""
    search = (search or "").strip()
    if not search:
        raise RegistrationNotFound()
    registration = crud.registration.search_for_event(db, event_id=target_event_id, search=search)
    if not registration:
        raise RegistrationNotFound()
    return _with_check_in(db, registration, ResolutionKind.SEARCH)
