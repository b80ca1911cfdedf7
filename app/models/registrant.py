# File: app/models/registrant.py
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Registrant(BaseModel):
    __tablename__ = "registrants"

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # Stored lower-cased
    phone = Column(String(50), nullable=False, index=True)

    # Location
    country = Column(String(100))
    city = Column(String(100))
    nationality = Column(String(100), nullable=True)

    # Interests
    level_of_study = Column(String(100), nullable=True)
    interested_major = Column(String(255), nullable=True)

    # Consent
    consent_accepted = Column(Boolean, default=False, nullable=False)
    consent_timestamp = Column(DateTime, nullable=True)

    # Attribution
    utm_source = Column(String(255), nullable=True)
    utm_medium = Column(String(255), nullable=True)
    utm_campaign = Column(String(255), nullable=True)

    # Enrichment (filled in after registration)
    gender = Column(String(20), nullable=True)
    standardized_major = Column(String(255), nullable=True)
    major_category = Column(String(255), nullable=True)

    # Relationships
    registrations = relationship("Registration", back_populates="registrant")
