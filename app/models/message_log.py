# File: app/models/message_log.py
import enum
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Text
from app.models.base import BaseModel


class MessageChannel(enum.Enum):
    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"


class MessageStatus(enum.Enum):
    SENT = "SENT"
    FAILED = "FAILED"


class MessageLog(BaseModel):
    __tablename__ = "message_logs"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    registration_id = Column(Integer, ForeignKey("registrations.id"), nullable=False, index=True)
    channel = Column(String(20), nullable=False)
    template_name = Column(String(100), nullable=False)
    provider_message_id = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False)
    error_text = Column(Text, nullable=True)
    sent_at = Column(DateTime, nullable=True)
