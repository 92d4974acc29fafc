"""Shared fakes for relay tests."""

from typing import Any, Optional

import pytest

from lingua_relay.errors import StoreError
from lingua_relay.models.records import Message
from lingua_relay.store.memory import MemoryStore


class RecordingEmitter:
    """Stands in for socketio.AsyncServer: records emits and bound handlers."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, Any, Optional[str]]] = []
        self.handlers: dict[str, Any] = {}

    def on(self, event: str, handler: Any = None) -> None:
        self.handlers[event] = handler

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None) -> None:
        self.sent.append((event, data, to))

    def received(self, sid: str, event: Optional[str] = None) -> list[tuple[str, Any]]:
        return [(e, d) for e, d, t in self.sent if t == sid and (event is None or e == event)]

    def broadcasts(self, event: Optional[str] = None) -> list[Any]:
        return [d for e, d, t in self.sent if t is None and (event is None or e == event)]

    def clear(self) -> None:
        self.sent.clear()


class FailingStore(MemoryStore):
    """Every write fails, as if the store were unreachable."""

    async def insert_message(self, message: Message) -> None:
        raise StoreError("store unavailable", code="store_unavailable")

    async def mark_read(self, reader_id: str, sender_id: str) -> int:
        raise StoreError("store unavailable", code="store_unavailable")

    async def update_last_seen(self, user_id: str, last_seen: int) -> None:
        raise StoreError("store unavailable", code="store_unavailable")


class BrokenEmitter(RecordingEmitter):
    async def emit(self, event: str, data: Any = None, to: Optional[str] = None) -> None:
        raise RuntimeError("transport closed")


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
