# File: app/services/registration_events.py
"""
Publish/subscribe for "a registration was created".

Registration only publishes; notification, CRM and enrichment consumers
subscribe and fail independently. With FastAPI ``BackgroundTasks`` the
deliveries run after the response is sent, otherwise inline.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from fastapi import BackgroundTasks

logger = logging.getLogger(__name__)


class RegistrationSource:
    PUBLIC_FORM = "public_form"
    CROSS_EVENT_SCAN = "cross_event_scan"
    BULK_IMPORT = "bulk_import"
    TICKET_RECOVERY = "ticket_recovery"


@dataclass(frozen=True)
class RegistrationCreated:
    registration_id: int
    event_id: int
    registrant_id: int
    token: str
    locale: str = "en"
    source: str = RegistrationSource.PUBLIC_FORM


Subscriber = Callable[[RegistrationCreated], None]


class RegistrationEventBus:
    def __init__(self):
        self._subscribers: List[Subscriber] = []

    @property
    def subscribers(self) -> List[Subscriber]:
        return list(self._subscribers)

    def subscribe(self, handler: Subscriber) -> Subscriber:
        if handler not in self._subscribers:
            self._subscribers.append(handler)
        return handler

    def clear(self) -> None:
        self._subscribers.clear()

    def publish(self, event: RegistrationCreated, background_tasks: Optional[BackgroundTasks] = None) -> None:
        logger.info(
            f"Publishing RegistrationCreated for registration {event.registration_id} "
            f"(source={event.source}) to {len(self._subscribers)} subscribers"
        )
        for handler in self._subscribers:
            if background_tasks is not None:
                background_tasks.add_task(self._deliver, handler, event)
            else:
                self._deliver(handler, event)

    @staticmethod
    def _deliver(handler: Subscriber, event: RegistrationCreated) -> None:
        name = getattr(handler, "__name__", repr(handler))
        try:
            handler(event)
        except Exception:
            # A failing consumer never affects the registration or the other consumers
            logger.exception(f"Subscriber {name} failed for registration {event.registration_id}")


# Process-wide bus; consumers are attached in app.main at startup
event_bus = RegistrationEventBus()


def get_event_bus() -> RegistrationEventBus:
    return event_bus
