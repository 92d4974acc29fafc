"""
Direct message relay: chat messages, read receipts and typing indicators.

Persistence and delivery are two independent side effects: the store write
is scheduled as a background task and the live emit happens right away, so
a receiver may see a message before it is queryable from the store. Offline
receivers get nothing; their copy is only reachable through history.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from lingua_relay.models.events import S2CEvent
from lingua_relay.models.records import Message
from lingua_relay.presence import PresenceRegistry
from lingua_relay.store.base import Store
from lingua_relay.tasks import BackgroundTasks
from lingua_relay.transport.emitter import Emitter, send_to

logger = logging.getLogger(__name__)


class MessageClock:
    """Wall-clock epoch milliseconds that never step backwards within a process."""

    def __init__(self, now: Callable[[], float] = time.time) -> None:
        self._now = now
        self._last = 0

    def __call__(self) -> int:
        now = int(self._now() * 1000)
        if now < self._last:
            now = self._last
        self._last = now
        return now


class MessageRelay:
    def __init__(
        self,
        presence: PresenceRegistry,
        emitter: Emitter,
        store: Optional[Store] = None,
        tasks: Optional[BackgroundTasks] = None,
        clock: Optional[MessageClock] = None,
    ):
        self._presence = presence
        self._emitter = emitter
        self._store = store
        self._tasks = tasks or BackgroundTasks()
        self._clock = clock or MessageClock()

    async def send_direct_message(
        self,
        sender: str,
        receiver: str,
        *,
        text: Optional[str] = None,
        image_data: Optional[str] = None,
        sender_lang: Optional[str] = None,
        sender_name: Optional[str] = None,
    ) -> Message:
        message = Message(
            id=uuid.uuid4().hex,
            sender_id=sender,
            receiver_id=receiver,
            text=text,
            image_data=image_data,
            sender_lang=sender_lang,
            timestamp=self._clock(),
        )

        if self._store is not None:
            # empty text/image are stored as null but relayed as sent
            stored = message.model_copy(update={"text": text or None, "image_data": image_data or None})
            self._tasks.spawn(self._store.insert_message(stored), f"persist message {message.id}")

        target = self._presence.resolve(receiver)
        if target is None:
            logger.debug(f"Message {message.id}: {receiver} offline, not delivered")
            return message

        await send_to(
            self._emitter,
            S2CEvent.RECEIVE_PRIVATE_MESSAGE,
            message.to_event(sender_name or sender),
            target.sid,
        )
        logger.debug(f"Message {message.id} delivered {sender} -> {receiver}")
        return message

    async def mark_read(self, reader: str, other_party: str) -> None:
        """Flag other_party → reader messages read and tell other_party once."""
        if self._store is not None:
            self._tasks.spawn(
                self._store.mark_read(reader, other_party),
                f"mark read {other_party} -> {reader}",
            )

        target = self._presence.resolve(other_party)
        if target is None:
            return
        await send_to(self._emitter, S2CEvent.MESSAGES_READ, {"readerId": reader}, target.sid)

    async def typing(self, sender: str, receiver: str, is_typing: bool) -> None:
        target = self._presence.resolve(receiver)
        if target is None:
            return
        await send_to(
            self._emitter,
            S2CEvent.TYPING_STATUS,
            {"senderId": sender, "isTyping": is_typing},
            target.sid,
        )
