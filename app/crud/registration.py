# File: app/crud/registration.py
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, InsertResult, storage_errors
from app.crud.registrant import normalize_email, normalize_phone
from app.models.registrant import Registrant
from app.models.registration import Registration, RegistrationStatus
from app.schemas.registration import RegistrationCreate


class CRUDRegistration(CRUDBase[Registration, RegistrationCreate, RegistrationCreate]):

    def get_by_token(self, db: Session, *, token: str) -> Optional[Registration]:
        with storage_errors(db, "find registration by token"):
            return db.query(Registration).filter(Registration.token == token).first()

    def get_by_event_and_token(self, db: Session, *, event_id: int, token: str) -> Optional[Registration]:
        with storage_errors(db, "find registration by event and token"):
            return db.query(Registration).filter(
                Registration.event_id == event_id,
                Registration.token == token
            ).first()

    def get_by_event_and_registrant(
        self, db: Session, *, event_id: int, registrant_id: int
    ) -> Optional[Registration]:
        with storage_errors(db, "find registration by event and registrant"):
            return db.query(Registration).filter(
                Registration.event_id == event_id,
                Registration.registrant_id == registrant_id
            ).first()

    def get_for_event_by_identity(
        self, db: Session, *, event_id: int, email: str, phone: Optional[str]
    ) -> Optional[Registration]:
        """Registration at this event held by any registrant matching the email or the phone"""
        conditions = [func.lower(Registrant.email) == normalize_email(email)]
        if phone:
            conditions.append(Registrant.phone == normalize_phone(phone))
        with storage_errors(db, "find registration by identity"):
            return (
                db.query(Registration)
                .join(Registrant, Registration.registrant_id == Registrant.id)
                .filter(Registration.event_id == event_id, or_(*conditions))
                .order_by(Registration.id)
                .first()
            )

    def count_active_for_event(self, db: Session, *, event_id: int) -> int:
        with storage_errors(db, "count registrations"):
            return db.query(func.count(Registration.id)).filter(
                Registration.event_id == event_id,
                Registration.status == RegistrationStatus.REGISTERED.value
            ).scalar() or 0

    def get_for_event_by_contact(
        self, db: Session, *, event_id: int, email_or_phone: str
    ) -> Optional[Registration]:
        """Exact email-or-phone match within one event"""
        value = email_or_phone.strip()
        with storage_errors(db, "find registration by contact"):
            return (
                db.query(Registration)
                .join(Registrant, Registration.registrant_id == Registrant.id)
                .filter(
                    Registration.event_id == event_id,
                    or_(
                        func.lower(Registrant.email) == value.lower(),
                        Registrant.phone == "".join(value.split())
                    )
                )
                .first()
            )

    def search_for_event(self, db: Session, *, event_id: int, search: str) -> Optional[Registration]:
        """Case-insensitive substring match on email or phone within one event"""
        pattern = f"%{search.strip()}%"
        with storage_errors(db, "search registrations"):
            return (
                db.query(Registration)
                .join(Registrant, Registration.registrant_id == Registrant.id)
                .filter(
                    Registration.event_id == event_id,
                    or_(Registrant.email.ilike(pattern), Registrant.phone.ilike(pattern))
                )
                .order_by(Registration.id)
                .first()
            )

    def insert(self, db: Session, *, obj_in: RegistrationCreate) -> InsertResult[Registration]:
        return self.insert_or_conflict(db, db_obj=Registration(**obj_in.model_dump()))


registration = CRUDRegistration(Registration)
