import logging
from typing import Dict, List, Optional, Tuple

from prometheus_client import Counter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import ContactMessage
from ..errors import NotFound, PersistenceError
from .catalog import apply_sort

logger = logging.getLogger(__name__)

CONTACT_COUNTER = Counter("contact_messages_total", "Contact form submissions stored")

MESSAGE_SORT_COLUMNS = {
    "created_at": ContactMessage.created_at,
    "name": ContactMessage.name,
    "email": ContactMessage.email,
    "subject": ContactMessage.subject,
}


class ContactService:
    """Inbox for the public contact form."""

    def create(self, session: Session, fields: Dict) -> ContactMessage:
        fields = dict(fields, email=fields["email"].strip().lower())
        message = ContactMessage(**fields)
        session.add(message)
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to store contact message")
            raise PersistenceError("Could not send message") from exc
        CONTACT_COUNTER.inc()
        logger.info("stored contact message %s", message.id)
        return message

    def list_messages(
        self,
        session: Session,
        email: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Tuple[List[ContactMessage], int]:
        query = session.query(ContactMessage)
        if email:
            query = query.filter(ContactMessage.email == email.strip().lower())
        query = apply_sort(
            query,
            MESSAGE_SORT_COLUMNS,
            ContactMessage.created_at,
            ContactMessage.id,
            sort,
            order,
        )
        items = query.all()
        return items, len(items)

    def delete(self, session: Session, message_id: int) -> None:
        message = session.get(ContactMessage, message_id)
        if message is None:
            raise NotFound("Message not found")
        session.delete(message)
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to delete contact message %s", message_id)
            raise PersistenceError("Could not delete message") from exc
        logger.info("deleted contact message %s", message_id)
