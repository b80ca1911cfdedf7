# File: app/crud/message_log.py
from typing import List
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, storage_errors
from app.models.message_log import MessageLog, MessageStatus
from app.services.delivery import DeliveryResult
from app.utils.time import utcnow


class CRUDMessageLog(CRUDBase[MessageLog, None, None]):

    def record_delivery(
        self, db: Session, *, event_id: int, registration_id: int, channel: str,
        template_name: str, result: DeliveryResult
    ) -> MessageLog:
        return self.create(db, obj_in={
            "event_id": event_id,
            "registration_id": registration_id,
            "channel": channel,
            "template_name": template_name,
            "provider_message_id": result.message_id,
            "status": MessageStatus.SENT.value if result.success else MessageStatus.FAILED.value,
            "error_text": result.error,
            "sent_at": utcnow() if result.success else None,
        })

    def get_for_registration(self, db: Session, *, registration_id: int) -> List[MessageLog]:
        with storage_errors(db, "list message logs"):
            return (
                db.query(MessageLog)
                .filter(MessageLog.registration_id == registration_id)
                .order_by(MessageLog.id)
                .all()
            )


message_log = CRUDMessageLog(MessageLog)
