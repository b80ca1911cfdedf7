# File: app/models/registration.py
import enum
from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class RegistrationStatus(enum.Enum):
    REGISTERED = "REGISTERED"
    CANCELLED = "CANCELLED"


class Registration(BaseModel):
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "registrant_id", name="uq_registration_event_registrant"),
    )

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    registrant_id = Column(Integer, ForeignKey("registrants.id"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default=RegistrationStatus.REGISTERED.value)
    source = Column(String(50), default="public_form")

    # Relationships
    event = relationship("Event", back_populates="registrations")
    registrant = relationship("Registrant", back_populates="registrations")
    check_in = relationship("CheckIn", back_populates="registration", uselist=False)

    @property
    def is_cancelled(self) -> bool:
        return self.status == RegistrationStatus.CANCELLED.value
