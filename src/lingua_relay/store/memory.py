"""
Process-local store. Default backend; contents vanish on restart.
"""

from typing import Optional

from lingua_relay.errors import StoreError
from lingua_relay.models.records import ContactRecord, Message, UserRecord
from lingua_relay.store.base import Store


class MemoryStore(Store):
    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._contacts: list[ContactRecord] = []
        self._messages: list[Message] = []

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    async def save_user(self, user: UserRecord) -> UserRecord:
        self._users[user.id] = user
        return user

    async def update_last_seen(self, user_id: str, last_seen: int) -> None:
        user = self._users.get(user_id)
        if user is not None:
            self._users[user_id] = user.model_copy(update={"last_seen": last_seen})

    async def add_contact(self, user_id: str, contact_email: str) -> None:
        contact = ContactRecord(user_id=user_id, contact_email=contact_email)
        if contact in self._contacts:
            raise StoreError(
                f"{contact_email} is already a contact of {user_id}",
                code="duplicate_contact",
            )
        self._contacts.append(contact)

    async def list_contacts(self, user_id: str) -> list[UserRecord]:
        emails = [c.contact_email for c in self._contacts if c.user_id == user_id]
        return [u for u in self._users.values() if u.email in emails]

    async def insert_message(self, message: Message) -> None:
        if any(m.id == message.id for m in self._messages):
            raise StoreError(f"Duplicate message id {message.id}", code="duplicate_message")
        self._messages.append(message)

    def _pair(self, user_id: str, other_id: str) -> list[Message]:
        pair = {(user_id, other_id), (other_id, user_id)}
        return [m for m in self._messages if (m.sender_id, m.receiver_id) in pair]

    async def conversation(self, user_id: str, other_id: str) -> list[Message]:
        return sorted(self._pair(user_id, other_id), key=lambda m: m.timestamp)

    async def last_message(self, user_id: str, other_id: str) -> Optional[Message]:
        messages = self._pair(user_id, other_id)
        if not messages:
            return None
        return max(messages, key=lambda m: m.timestamp)

    async def mark_read(self, reader_id: str, sender_id: str) -> int:
        changed = 0
        for i, m in enumerate(self._messages):
            if m.sender_id == sender_id and m.receiver_id == reader_id and not m.is_read:
                self._messages[i] = m.model_copy(update={"is_read": True})
                changed += 1
        return changed
