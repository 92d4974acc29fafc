"""
Outbound event delivery.

Anything with python-socketio's `emit(event, data=None, to=None)` signature
works as an emitter: the real `socketio.AsyncServer` in production, a
recording fake in tests. A failed emit is logged and absorbed.
"""

import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class Emitter(Protocol):
    async def emit(self, event: str, data: Any = None, to: Optional[str] = None) -> Any: ...


async def send_to(emitter: Emitter, event: str, data: Any, sid: str) -> bool:
    try:
        await emitter.emit(event, data, to=sid)
    except Exception as e:
        logger.error(f"Emit {event} to {sid} failed: {e}")
        return False
    return True


async def broadcast(emitter: Emitter, event: str, data: Any) -> bool:
    try:
        await emitter.emit(event, data)
    except Exception as e:
        logger.error(f"Broadcast {event} failed: {e}")
        return False
    return True
