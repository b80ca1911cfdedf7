# File: app/api/v1/endpoints/registrations_import.py
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from app.core.deps import require_admin_key
from app.db.database import get_db
from app.schemas.registration import BulkImportRequest, BulkImportResult
from app.services.bulk_import import import_leads
from app.services.registration_events import RegistrationEventBus, get_event_bus

router = APIRouter()


@router.post("/import", response_model=BulkImportResult, dependencies=[Depends(require_admin_key)])
def import_registrations(
    data: BulkImportRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    bus: RegistrationEventBus = Depends(get_event_bus),
):
    """Register a batch of leads for one event; per-lead failures are reported, not raised"""
    return import_leads(
        db,
        event_id=data.eventId,
        leads=data.leads,
        bus=bus,
        background_tasks=background_tasks,
    )
