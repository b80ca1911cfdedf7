from .base import BaseModel
from .event import Event, EventStatus
from .registrant import Registrant
from .registration import Registration, RegistrationStatus
from .checkin import CheckIn, CheckInMethod
from .message_log import MessageLog, MessageChannel, MessageStatus

__all__ = [
    "BaseModel", "Event", "EventStatus", "Registrant",
    "Registration", "RegistrationStatus", "CheckIn", "CheckInMethod",
    "MessageLog", "MessageChannel", "MessageStatus"
]
