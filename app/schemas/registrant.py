from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RegistrantProfile(BaseModel):
    """Personal data as stored; request schemas validate it on the way in"""
    full_name: str
    email: str
    phone: str
    country: Optional[str] = None
    city: Optional[str] = None
    nationality: Optional[str] = None
    level_of_study: Optional[str] = None
    interested_major: Optional[str] = None


class Attribution(BaseModel):
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None


class RegistrantCreate(RegistrantProfile, Attribution):
    consent_accepted: bool = False
    consent_timestamp: Optional[datetime] = None


class RegistrantUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None


class Registrant(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str
    country: Optional[str] = None
    city: Optional[str] = None
    consent_accepted: bool
    created_at: datetime

    class Config:
        from_attributes = True
