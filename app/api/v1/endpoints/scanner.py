# File: app/api/v1/endpoints/scanner.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import crud
from app.core.deps import require_admin_key
from app.core.exceptions import EventUnavailable
from app.core.security import create_scanner_token
from app.db.database import get_db
from app.schemas.scanner import ScannerSessionCreate, ScannerSessionResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sessions", response_model=ScannerSessionResponse, dependencies=[Depends(require_admin_key)])
def create_scanner_session(data: ScannerSessionCreate, db: Session = Depends(get_db)):
    """Issue a scanner token bound to one event for one operator"""
    if not crud.event.get(db, data.eventId):
        raise EventUnavailable(data.eventId)

    token = create_scanner_token(data.operatorId, data.eventId)
    logger.info(f"Scanner session issued to {data.operatorId} for event {data.eventId}")
    return ScannerSessionResponse(
        accessToken=token["access_token"],
        eventId=data.eventId,
        expiresAt=token["expires_at"],
    )
