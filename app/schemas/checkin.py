from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import datetime


class CheckInRequest(BaseModel):
    eventId: int
    token: Optional[str] = None
    search: Optional[str] = None

    @model_validator(mode="after")
    def token_or_search(self):
        if not (self.token and self.token.strip()) and not (self.search and self.search.strip()):
            raise ValueError("Either a scanned token or a search string is required")
        return self


class CheckInRegistrationInfo(BaseModel):
    registrationId: int
    studentName: str
    email: str
    alreadyCheckedIn: bool
    checkedInAt: Optional[datetime] = None
    crossEvent: bool = False


class CheckInResponse(BaseModel):
    success: bool
    message: str
    registration: Optional[CheckInRegistrationInfo] = None


class CheckInStats(BaseModel):
    eventId: int
    checkInCount: int
    registrationCount: int
