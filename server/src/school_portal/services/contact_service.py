"""Contact form submissions and the dashboard contact log"""

import logging
from typing import Any, Dict, List

from pydantic import BaseModel, EmailStr, field_validator

from school_portal.errors import ContentStoreError
from school_portal.models.contact_message import ContactMessage
from school_portal.models.contact_subject import ContactSubject, subject_label
from school_portal.services.content_store import ContentStore

logger = logging.getLogger(__name__)


class ContactMessageCreate(BaseModel):
    """Public contact form payload"""

    name: str
    email: EmailStr
    subject: ContactSubject
    message: str

    @field_validator("name", "message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


def contact_payload(message: ContactMessage) -> Dict[str, Any]:
    payload = message.model_dump(mode="json")
    payload["subject_label"] = subject_label(message.subject)
    return payload


class ContactService:
    """Service for contact messages"""

    def __init__(self, store: ContentStore):
        self.store = store

    def submit(self, payload: ContactMessageCreate) -> ContactMessage:
        """Store a public submission. Store failures propagate to the caller."""
        message = self.store.insert(
            ContactMessage,
            {
                "name": payload.name,
                "email": payload.email,
                "subject": payload.subject.value,
                "message": payload.message,
            },
        )
        logger.info(f"Contact message {message.id} received ({message.subject})")
        return message

    def list_messages(self) -> List[ContactMessage]:
        try:
            return self.store.select(
                ContactMessage, order_by=ContactMessage.created_at.desc()
            )
        except ContentStoreError as e:
            logger.error(f"Error loading messages: {e}")
            return []

    def delete_message(self, message_id) -> Dict[str, Any]:
        try:
            deleted = self.store.delete(ContactMessage, message_id)
        except ContentStoreError as e:
            logger.error(f"Error deleting message {message_id}: {e}")
            return {"success": False, "error": "Error al eliminar el mensaje"}

        if not deleted:
            return {"success": False, "error": "Message not found"}
        return {"success": True, "message": "Message deleted successfully"}
