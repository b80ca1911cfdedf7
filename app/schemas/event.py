from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PublicEvent(BaseModel):
    id: int
    title: str
    slug: str
    description: Optional[str] = None
    status: str
    start_date_time: datetime
    end_date_time: datetime
    city: Optional[str] = None
    venue_name: Optional[str] = None
    registration_open_at: Optional[datetime] = None
    registration_close_at: Optional[datetime] = None
    capacity: Optional[int] = None
    registered_count: int = 0

    class Config:
        from_attributes = True
