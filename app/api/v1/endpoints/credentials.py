# File: app/api/v1/endpoints/credentials.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import RegistrationNotFound
from app.db.database import get_db
from app.schemas.credential import CredentialAttendee, CredentialEvent, CredentialView, QRCodeResponse
from app.services.credentials import credential_url, qr_data_url

router = APIRouter()


@router.get("/r/{token}", response_model=CredentialView)
def view_credential(token: str, db: Session = Depends(get_db)):
    """Read-only entry pass. Viewing it never checks anyone in."""
    registration = crud.registration.get_by_token(db, token=token)
    if not registration:
        raise RegistrationNotFound("Entry pass not found")

    event = registration.event
    check_in = registration.check_in
    return CredentialView(
        token=registration.token,
        status=registration.status,
        event=CredentialEvent(
            id=event.id,
            title=event.title,
            startDateTime=event.start_date_time,
            endDateTime=event.end_date_time,
            venue=event.venue_label,
        ),
        attendee=CredentialAttendee(
            fullName=registration.registrant.full_name,
            email=registration.registrant.email,
        ),
        checkedIn=check_in is not None,
        checkedInAt=check_in.checked_in_at if check_in else None,
        credentialUrl=credential_url(registration.token),
    )


@router.get("/qr/{token}", response_model=QRCodeResponse)
def get_qr_code(token: str, db: Session = Depends(get_db)):
    """QR image for a credential, as a data URL"""
    if not crud.registration.get_by_token(db, token=token):
        raise RegistrationNotFound("Entry pass not found")
    return QRCodeResponse(qrDataUrl=qr_data_url(token))
