from pydantic import BaseModel, Field
from datetime import datetime


class ScannerSessionCreate(BaseModel):
    operatorId: str = Field(..., min_length=1)
    eventId: int


class ScannerSessionResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    eventId: int
    expiresAt: datetime


class ScannerContext(BaseModel):
    operator_id: str
    event_id: int
