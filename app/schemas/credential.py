from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class CredentialEvent(BaseModel):
    id: int
    title: str
    startDateTime: datetime
    endDateTime: datetime
    venue: str


class CredentialAttendee(BaseModel):
    fullName: str
    email: str


class CredentialView(BaseModel):
    token: str
    status: str
    event: CredentialEvent
    attendee: CredentialAttendee
    checkedIn: bool
    checkedInAt: Optional[datetime] = None
    credentialUrl: str


class QRCodeResponse(BaseModel):
    qrDataUrl: str
