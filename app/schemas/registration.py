from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime


class PublicRegistrationRequest(BaseModel):
    # Profile
    fullName: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    country: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    nationality: Optional[str] = None
    levelOfStudy: Optional[str] = None
    interestedMajor: Optional[str] = None
    consent: bool

    # Attribution
    utmSource: Optional[str] = None
    utmMedium: Optional[str] = None
    utmCampaign: Optional[str] = None
    locale: str = "en"

    @field_validator("consent")
    @classmethod
    def consent_must_be_given(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must agree to the terms and privacy policy")
        return value


class RegistrationResponse(BaseModel):
    success: bool = True
    registrationId: int
    credentialToken: str


class RegistrationCreate(BaseModel):
    event_id: int
    registrant_id: int
    token: str
    status: str = "REGISTERED"
    source: str = "public_form"


class Registration(BaseModel):
    id: int
    event_id: int
    registrant_id: int
    token: str
    status: str
    source: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ---------------------------
# Ticket recovery
# ---------------------------

class TicketRecoveryRequest(BaseModel):
    emailOrPhone: str = Field(..., min_length=3)


class TicketRecoveryResponse(BaseModel):
    success: bool = True
    credentialToken: str
    studentName: str


# ---------------------------
# Bulk import
# ---------------------------

# Attribution recorded for imported leads that name no source
DEFAULT_LEAD_SOURCE = "Import"


class BulkLead(BaseModel):
    fullName: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=5)
    country: str = "Unknown"
    city: str = "Unknown"
    language: str = "en"
    source: str = DEFAULT_LEAD_SOURCE

    @field_validator("language")
    @classmethod
    def supported_language(cls, value: str) -> str:
        if value not in ("en", "tr", "ar"):
            raise ValueError("language must be one of en, tr, ar")
        return value


class BulkImportRequest(BaseModel):
    eventId: int
    leads: List[BulkLead]


class BulkImportDetail(BaseModel):
    email: str
    status: str  # success | updated | error
    message: Optional[str] = None
    credentialToken: Optional[str] = None


class BulkImportResult(BaseModel):
    total: int = 0
    success: int = 0
    updated: int = 0
    errors: int = 0
    details: List[BulkImportDetail] = []
