"""
Read side of the persistence store, used by the REST routes.
"""

from __future__ import annotations

from typing import Any

from lingua_relay.models.records import ContactSummary, Message
from lingua_relay.store.base import Store


class ConversationsAPI:
    def __init__(self, store: Store):
        self._store = store

    async def history(self, user_id: str, other_id: str, mark_read: bool = True) -> list[Message]:
        """Both directions, oldest first. Opening a conversation marks what `other_id` sent as read."""
        messages = await self._store.conversation(user_id, other_id)
        if mark_read:
            await self._store.mark_read(user_id, other_id)
        return messages

    async def contacts(self, user_id: str) -> list[ContactSummary]:
        summaries = []
        for user in await self._store.list_contacts(user_id):
            last = await self._store.last_message(user.id, user_id)
            summaries.append(ContactSummary(
                **user.model_dump(),
                last_message=last.text if last else None,
                last_message_time=last.timestamp if last else None,
            ))
        return summaries

    async def add_contact(self, user_id: str, contact_email: str) -> dict[str, Any]:
        """Returns the contact's user record, or a pending marker for unknown emails."""
        await self._store.add_contact(user_id, contact_email)
        contact = await self._store.get_user_by_email(contact_email)
        if contact is None:
            return {"email": contact_email, "status": "pending"}
        return contact.model_dump()
