# File: app/models/event.py
import enum
from sqlalchemy import Column, String, Text, Integer, DateTime
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class EventStatus(enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    FINISHED = "FINISHED"


class Event(BaseModel):
    __tablename__ = "events"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)

    # Schedule
    start_date_time = Column(DateTime, nullable=False)
    end_date_time = Column(DateTime, nullable=False)
    timezone = Column(String(64), default="UTC")

    # Venue
    country = Column(String(100))
    city = Column(String(100))
    venue_name = Column(String(255))
    venue_address = Column(Text)

    # Registration window / capacity
    registration_open_at = Column(DateTime, nullable=True)
    registration_close_at = Column(DateTime, nullable=True)
    capacity = Column(Integer, nullable=True)

    # CRM attribution
    zoho_lead_source = Column(String(255), nullable=True)
    zoho_campaign_id = Column(String(255), nullable=True)

    # Relationships
    registrations = relationship("Registration", back_populates="event")

    @property
    def is_published(self) -> bool:
        return self.status == EventStatus.PUBLISHED.value

    @property
    def venue_label(self) -> str:
        parts = [p for p in (self.venue_name, self.city) if p]
        return ", ".join(parts) if parts else "TBA"
