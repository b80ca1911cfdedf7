# File: app/crud/checkin.py
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, InsertResult, storage_errors
from app.models.checkin import CheckIn
from app.models.registration import Registration


class CRUDCheckIn(CRUDBase[CheckIn, None, None]):

    def get_by_registration(self, db: Session, *, registration_id: int) -> Optional[CheckIn]:
        with storage_errors(db, "find check-in"):
            return db.query(CheckIn).filter(CheckIn.registration_id == registration_id).first()

    def insert(
        self, db: Session, *, registration_id: int, operator_id: str, method: str, checked_in_at: datetime
    ) -> InsertResult[CheckIn]:
        return self.insert_or_conflict(db, db_obj=CheckIn(
            registration_id=registration_id,
            operator_id=operator_id,
            method=method,
            checked_in_at=checked_in_at
        ))

    def count_for_event(self, db: Session, *, event_id: int) -> int:
        with storage_errors(db, "count check-ins"):
            return (
                db.query(func.count(CheckIn.id))
                .join(Registration, CheckIn.registration_id == Registration.id)
                .filter(Registration.event_id == event_id)
                .scalar()
            ) or 0


checkin = CRUDCheckIn(CheckIn)
