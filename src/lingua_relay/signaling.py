"""
Call signaling relay.

Offers, answers and ICE candidates are forwarded untouched. Nothing about a
call is tracked here: ringing/connected live only on the clients, and an
unreachable callee is discovered by the caller timing out.
"""

import logging
from typing import Any, Optional

from lingua_relay.models.events import CallType, S2CEvent
from lingua_relay.presence import PresenceRegistry
from lingua_relay.transport.emitter import Emitter, send_to

logger = logging.getLogger(__name__)


class CallSignalingRelay:
    def __init__(self, presence: PresenceRegistry, emitter: Emitter):
        self._presence = presence
        self._emitter = emitter

    async def _forward(self, to: str, event: str, data: Any = None) -> bool:
        target = self._presence.resolve(to)
        if target is None:
            logger.debug(f"Dropped {event}: {to} not connected")
            return False
        return await send_to(self._emitter, event, data, target.sid)

    async def call(
        self,
        offer: Any,
        to: str,
        from_: str,
        from_name: Optional[str] = None,
        call_type: str = CallType.AUDIO,
    ) -> bool:
        return await self._forward(to, S2CEvent.INCOMING_CALL, {
            "offer": offer,
            "from": from_,
            "fromName": from_name,
            "type": call_type,
        })

    async def answer(self, answer: Any, to: str) -> bool:
        return await self._forward(to, S2CEvent.CALL_ACCEPTED, {"answer": answer})

    async def ice_candidate(self, candidate: Any, to: str) -> bool:
        return await self._forward(to, S2CEvent.ICE_CANDIDATE, {"candidate": candidate})

    async def end_call(self, to: str) -> bool:
        return await self._forward(to, S2CEvent.CALL_ENDED)
