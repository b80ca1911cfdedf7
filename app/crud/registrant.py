# File: app/crud/registrant.py
import logging
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.core.exceptions import StorageError
from app.crud.base import CRUDBase, storage_errors
from app.models.registrant import Registrant
from app.schemas.registrant import RegistrantCreate, RegistrantUpdate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return "".join(phone.split())


class CRUDRegistrant(CRUDBase[Registrant, RegistrantCreate, RegistrantUpdate]):

    def get_by_email_or_phone(self, db: Session, *, email: str, phone: Optional[str]) -> Optional[Registrant]:
        conditions = [func.lower(Registrant.email) == normalize_email(email)]
        if phone:
            conditions.append(Registrant.phone == normalize_phone(phone))
        with storage_errors(db, "find registrant"):
            return (
                db.query(Registrant)
                .filter(or_(*conditions))
                .order_by(Registrant.id)
                .first()
            )

    def refresh_profile(self, db: Session, *, db_obj: Registrant, obj_in: RegistrantCreate) -> Registrant:
        """Overwrite the mutable profile fields with the latest contact data"""
        return self.update(db, db_obj=db_obj, obj_in={
            "full_name": obj_in.full_name,
            "phone": normalize_phone(obj_in.phone),
            "country": obj_in.country,
            "city": obj_in.city,
        })

    def find_or_create(self, db: Session, *, obj_in: RegistrantCreate) -> Registrant:
        """
        Resolve a natural person to one Registrant row.

        A row matching the email OR the phone is reused and its profile
        refreshed; otherwise a new row is created with consent and
        attribution. A concurrent creator for the same email makes our
        insert conflict, in which case the winner's row is returned.
        """
        existing = self.get_by_email_or_phone(db, email=obj_in.email, phone=obj_in.phone)
        if existing:
            return self.refresh_profile(db, db_obj=existing, obj_in=obj_in)

        data = obj_in.model_dump()
        data["email"] = normalize_email(obj_in.email)
        data["phone"] = normalize_phone(obj_in.phone)
        result = self.insert_or_conflict(db, db_obj=Registrant(**data))
        if result.inserted:
            logger.info(f"Created registrant {result.obj.id} for {result.obj.email}")
            return result.obj

        existing = self.get_by_email_or_phone(db, email=obj_in.email, phone=obj_in.phone)
        if existing is None:
            raise StorageError("create registrant", "insert conflicted but no matching registrant exists")
        return self.refresh_profile(db, db_obj=existing, obj_in=obj_in)


registrant = CRUDRegistrant(Registrant)
