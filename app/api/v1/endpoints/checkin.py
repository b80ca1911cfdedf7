# File: app/api/v1/endpoints/checkin.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from app import crud
from app.core.deps import get_current_scanner
from app.core.exceptions import EventUnavailable, ScannerEventMismatch
from app.db.database import get_db
from app.models.checkin import CheckInMethod
from app.schemas.checkin import CheckInRegistrationInfo, CheckInRequest, CheckInResponse, CheckInStats
from app.schemas.scanner import ScannerContext
from app.services import scan_resolver
from app.services.checkin_recorder import check_in
from app.services.registration_events import RegistrationEventBus, get_event_bus
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


def _ensure_scanner_event(scanner: ScannerContext, event_id: int) -> None:
    if scanner.event_id != event_id:
        logger.warning(
            f"Scanner {scanner.operator_id} bound to event {scanner.event_id} "
            f"tried to act on event {event_id}"
        )
        raise ScannerEventMismatch(scanner.event_id, event_id)


@router.post("", response_model=CheckInResponse)
def check_in_attendee(
    data: CheckInRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    bus: RegistrationEventBus = Depends(get_event_bus),
    scanner: ScannerContext = Depends(get_current_scanner),
):
    """Check in by scanned credential token, or by email/phone search at the desk"""
    _ensure_scanner_event(scanner, data.eventId)

    if data.token and data.token.strip():
        method = CheckInMethod.QR.value
        resolution = scan_resolver.resolve(
            db,
            target_event_id=data.eventId,
            token=data.token,
            bus=bus,
            background_tasks=background_tasks,
        )
    else:
        method = CheckInMethod.MANUAL.value
        resolution = scan_resolver.resolve_search(db, target_event_id=data.eventId, search=data.search)

    registration = resolution.registration
    outcome = check_in(db, registration=registration, operator_id=scanner.operator_id, method=method)

    if outcome.first_time:
        message = "Checked in successfully"
    else:
        message = f"Already checked in at {outcome.checked_in_at.strftime('%H:%M')}"

    return CheckInResponse(
        success=True,
        message=message,
        registration=CheckInRegistrationInfo(
            registrationId=registration.id,
            studentName=registration.registrant.full_name,
            email=registration.registrant.email,
            alreadyCheckedIn=not outcome.first_time,
            checkedInAt=outcome.checked_in_at,
            crossEvent=resolution.cross_event,
        ),
    )


@router.get("/events/{event_id}/stats", response_model=CheckInStats)
def get_checkin_stats(
    event_id: int,
    db: Session = Depends(get_db),
    scanner: ScannerContext = Depends(get_current_scanner),
):
    """Live counter for the scanner screen"""
    _ensure_scanner_event(scanner, event_id)
    if not crud.event.get(db, event_id):
        raise EventUnavailable(event_id)

    return CheckInStats(
        eventId=event_id,
        checkInCount=crud.checkin.count_for_event(db, event_id=event_id),
        registrationCount=crud.registration.count_active_for_event(db, event_id=event_id),
    )
