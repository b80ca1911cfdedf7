# File: app/crud/event.py
from app.crud.base import CRUDBase
from app.models.event import Event


class CRUDEvent(CRUDBase[Event, None, None]):
    pass


event = CRUDEvent(Event)
