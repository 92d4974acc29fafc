"""
Persistence records for users, contacts and messages.

Field names follow the store's column names; `to_event` builds the
camelCase wire shape.
"""

from typing import Any, Optional
from pydantic import BaseModel


class UserRecord(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    language: Optional[str] = None
    last_seen: Optional[int] = None


class ContactRecord(BaseModel):
    user_id: str
    contact_email: str


class Message(BaseModel):
    """A direct message. Immutable apart from `is_read`."""
    id: str
    sender_id: str
    receiver_id: str
    text: Optional[str] = None
    image_data: Optional[str] = None
    sender_lang: Optional[str] = None
    timestamp: int
    is_read: bool = False

    model_config = {"frozen": True}

    def to_event(self, sender_name: str) -> dict[str, Any]:
        """receive_private_message payload."""
        return {
            "id": self.id,
            "senderId": self.sender_id,
            "senderName": sender_name,
            "text": self.text,
            "imageData": self.image_data,
            "senderLang": self.sender_lang,
            "timestamp": self.timestamp,
        }


class ContactSummary(UserRecord):
    """Contact list entry — the user plus the latest message of the pair."""
    last_message: Optional[str] = None
    last_message_time: Optional[int] = None
