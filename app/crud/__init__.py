from .event import event
from .registrant import registrant
from .registration import registration
from .checkin import checkin
from .message_log import message_log

__all__ = ["event", "registrant", "registration", "checkin", "message_log"]
