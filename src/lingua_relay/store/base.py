"""
Contract for the persistence collaborator.

The relay only needs insert_message, mark_read and update_last_seen; the
remaining queries back the REST history/contacts routes.
"""

from abc import ABC, abstractmethod
from typing import Optional

from lingua_relay.models.records import Message, UserRecord


class Store(ABC):
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    async def save_user(self, user: UserRecord) -> UserRecord:
        """Insert or replace a user by id."""

    @abstractmethod
    async def update_last_seen(self, user_id: str, last_seen: int) -> None: ...

    @abstractmethod
    async def add_contact(self, user_id: str, contact_email: str) -> None:
        """Raises StoreError if the pair already exists."""

    @abstractmethod
    async def list_contacts(self, user_id: str) -> list[UserRecord]:
        """Known users among `user_id`'s contact emails."""

    @abstractmethod
    async def insert_message(self, message: Message) -> None: ...

    @abstractmethod
    async def conversation(self, user_id: str, other_id: str) -> list[Message]:
        """Messages in both directions, oldest first."""

    @abstractmethod
    async def last_message(self, user_id: str, other_id: str) -> Optional[Message]: ...

    @abstractmethod
    async def mark_read(self, reader_id: str, sender_id: str) -> int:
        """Flag every sender → reader message read. Returns how many changed."""

    async def close(self) -> None:
        pass
