# File: app/crud/base.py
import enum
import logging
from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.exceptions import StorageError
from app.db.database import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class InsertOutcome(enum.Enum):
    INSERTED = "inserted"
    CONFLICT = "conflict"


class InsertResult(Generic[ModelType]):
    """Outcome of an insert guarded by a uniqueness constraint"""

    def __init__(self, outcome: InsertOutcome, obj: Optional[ModelType] = None):
        self.outcome = outcome
        self.obj = obj

    @property
    def inserted(self) -> bool:
        return self.outcome is InsertOutcome.INSERTED

    @property
    def conflict(self) -> bool:
        return self.outcome is InsertOutcome.CONFLICT

    def __repr__(self) -> str:
        return f"<InsertResult {self.outcome.value}>"


@contextmanager
def storage_errors(db: Session, operation: str):
    """Roll back and re-raise store failures as StorageError"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {operation}: {e}")
        raise StorageError(operation, str(e)) from e


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with default methods to Create, Read, Update.

        **Parameters**

        * `model`: A SQLAlchemy model class
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        with storage_errors(db, f"get {self.model.__tablename__}"):
            return db.query(self.model).filter(self.model.id == id).first()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_in_data)
        with storage_errors(db, f"create {self.model.__tablename__}"):
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        return db_obj

    def update(
        self, db: Session, *, db_obj: ModelType, obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        with storage_errors(db, f"update {self.model.__tablename__}"):
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        return db_obj

    def insert_or_conflict(self, db: Session, *, db_obj: ModelType) -> InsertResult[ModelType]:
        """
        Insert a row and report a uniqueness violation as CONFLICT.

        The store's unique constraints are the only guard against
        concurrent writers, so a violation here is an expected outcome
        rather than an error.
        """
        with storage_errors(db, f"insert {self.model.__tablename__}"):
            try:
                db.add(db_obj)
                db.commit()
            except IntegrityError as e:
                db.rollback()
                logger.info(f"Insert into {self.model.__tablename__} hit a unique constraint: {e.orig}")
                return InsertResult(InsertOutcome.CONFLICT)
            db.refresh(db_obj)
        return InsertResult(InsertOutcome.INSERTED, db_obj)
