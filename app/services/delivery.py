from dataclasses import dataclass
from typing import Optional


@dataclass
class DeliveryResult:
    """What an outbound channel reports back for one message"""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
