# File: app/models/checkin.py
import enum
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class CheckInMethod(enum.Enum):
    QR = "QR"
    MANUAL = "MANUAL"


class CheckIn(BaseModel):
    __tablename__ = "check_ins"

    registration_id = Column(Integer, ForeignKey("registrations.id"), nullable=False, unique=True)
    checked_in_at = Column(DateTime, nullable=False)
    method = Column(String(20), nullable=False, default=CheckInMethod.QR.value)
    operator_id = Column(String(255), nullable=False)  # Scanner who admitted the holder

    # Relationships
    registration = relationship("Registration", back_populates="check_in")
