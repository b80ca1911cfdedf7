# File: app/services/bulk_import.py
import logging
from typing import List, Optional
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import EventUnavailable, RegistrationServiceError
from app.schemas.registrant import RegistrantCreate
from app.schemas.registration import BulkLead, BulkImportDetail, BulkImportResult
from app.services.registration_events import (
    RegistrationCreated,
    RegistrationEventBus,
    RegistrationSource,
)
from app.services.registration_ledger import create_registration
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


def _registrant_from_lead(lead: BulkLead) -> RegistrantCreate:
    return RegistrantCreate(
        full_name=lead.fullName,
        email=lead.email,
        phone=lead.phone,
        country=lead.country,
        city=lead.city,
        consent_accepted=True,  # Admin imported
        consent_timestamp=utcnow(),
        # A lead carries one attribution value, its source list or campaign
        utm_source=lead.source,
    )


def import_leads(
    db: Session,
    *,
    event_id: int,
    leads: List[BulkLead],
    bus: RegistrationEventBus,
    background_tasks: Optional[BackgroundTasks] = None,
) -> BulkImportResult:
    """
    Register a list of leads for one event, one at a time.

    Leads are processed sequentially so two rows for the same person in
    one batch cannot race each other into two registrants. A failing lead
    is reported and the batch continues.
    """
    event = crud.event.get(db, event_id)
    if not event:
        raise EventUnavailable(event_id)

    results = BulkImportResult(total=len(leads))

    for lead in leads:
        try:
            registrant = crud.registrant.find_or_create(db, obj_in=_registrant_from_lead(lead))
            registration, created = create_registration(
                db, event_id=event.id, registrant_id=registrant.id, source=RegistrationSource.BULK_IMPORT
            )
            if not created:
                results.updated += 1
                results.details.append(BulkImportDetail(
                    email=lead.email,
                    status="updated",
                    message="Lead details updated",
                    credentialToken=registration.token,
                ))
                continue

            bus.publish(RegistrationCreated(
                registration_id=registration.id,
                event_id=event.id,
                registrant_id=registrant.id,
                token=registration.token,
                locale=lead.language,
                source=RegistrationSource.BULK_IMPORT,
            ), background_tasks)
            results.success += 1
            results.details.append(BulkImportDetail(
                email=lead.email,
                status="success",
                credentialToken=registration.token,
            ))
        except RegistrationServiceError as e:
            logger.error(f"Failed to import {lead.email}: {e}")
            results.errors += 1
            results.details.append(BulkImportDetail(email=lead.email, status="error", message=e.message))

    logger.info(
        f"Bulk import for event {event.id}: {results.success} created, "
        f"{results.updated} updated, {results.errors} failed of {results.total}"
    )
    return results
