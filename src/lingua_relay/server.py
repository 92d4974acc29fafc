"""
Socket.IO relay server — binds client events to the lifecycle manager, the
message relay and the call signaling relay.

Handlers never raise back into python-socketio: malformed payloads and
refused registrations are logged and dropped, and nothing is reported to
the originating connection.
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import socketio
from pydantic import BaseModel, ValidationError

from lingua_relay.errors import PayloadError, RelayError
from lingua_relay.lifecycle import ConnectionLifecycleManager
from lingua_relay.models.events import C2SEvent
from lingua_relay.models.payloads import (
    AnswerCallPayload,
    CallUserPayload,
    EndCallPayload,
    IceCandidatePayload,
    MarkReadPayload,
    PrivateMessagePayload,
    RegisterPayload,
    TypingPayload,
)
from lingua_relay.presence import PresenceRegistry
from lingua_relay.relay import MessageRelay
from lingua_relay.signaling import CallSignalingRelay
from lingua_relay.store.base import Store
from lingua_relay.tasks import BackgroundTasks

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Handler = Callable[..., Awaitable[None]]


def parse_payload(model: type[M], raw: Any, event: str) -> M:
    """Validate an inbound payload; PayloadError names the offending fields."""
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise PayloadError(f"Malformed {event} payload: {', '.join(fields)}", details={"fields": fields}) from e


def _register_payload(raw: Union[str, dict[str, Any], None]) -> Any:
    if isinstance(raw, str):
        return {"identity": raw}
    if isinstance(raw, dict) and "identity" not in raw:
        return {"identity": raw.get("userId")}
    return raw


def guarded(event: str) -> Callable[[Handler], Handler]:
    def decorator(fn: Handler) -> Handler:
        @functools.wraps(fn)
        async def wrapper(self: "RelayServer", sid: str, *args: Any) -> None:
            try:
                await fn(self, sid, *args)
            except RelayError as e:
                logger.warning(f"{event} from {sid} refused: [{e.code}] {e}")
            except Exception:
                logger.exception(f"Unhandled error in {event} handler for {sid}")
        return wrapper
    return decorator


class RelayServer:
    def __init__(
        self,
        store: Optional[Store] = None,
        sio: Optional[Any] = None,
        cors_origins: Union[str, list[str]] = "*",
        max_http_buffer_size: int = 100_000_000,
    ):
        self.sio = sio if sio is not None else socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=cors_origins,
            max_http_buffer_size=max_http_buffer_size,
        )
        self.store = store
        self.presence = PresenceRegistry()
        self.tasks = BackgroundTasks()
        self.lifecycle = ConnectionLifecycleManager(self.presence, self.sio, store, self.tasks)
        self.messages = MessageRelay(self.presence, self.sio, store, self.tasks)
        self.signaling = CallSignalingRelay(self.presence, self.sio)
        self._bind()

    def _bind(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("disconnect", self.on_disconnect)
        self.sio.on(C2SEvent.REGISTER, self.on_register)
        self.sio.on(C2SEvent.SEND_PRIVATE_MESSAGE, self.on_send_private_message)
        self.sio.on(C2SEvent.TYPING, self.on_typing)
        self.sio.on(C2SEvent.MARK_READ, self.on_mark_read)
        self.sio.on(C2SEvent.CALL_USER, self.on_call_user)
        self.sio.on(C2SEvent.ANSWER_CALL, self.on_answer_call)
        self.sio.on(C2SEvent.ICE_CANDIDATE, self.on_ice_candidate)
        self.sio.on(C2SEvent.END_CALL, self.on_end_call)

    # Lifecycle

    async def on_connect(self, sid: str, environ: Any = None, auth: Any = None) -> None:
        self.lifecycle.connect(sid)

    @guarded("disconnect")
    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        await self.lifecycle.disconnect(sid)

    @guarded(C2SEvent.REGISTER)
    async def on_register(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(RegisterPayload, _register_payload(data), C2SEvent.REGISTER)
        await self.lifecycle.register(sid, payload.identity)

    # Messages

    @guarded(C2SEvent.SEND_PRIVATE_MESSAGE)
    async def on_send_private_message(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(PrivateMessagePayload, data, C2SEvent.SEND_PRIVATE_MESSAGE)
        await self.messages.send_direct_message(
            payload.sender_id,
            payload.receiver_id,
            text=payload.text,
            image_data=payload.image_data,
            sender_lang=payload.sender_lang,
            sender_name=payload.sender_name,
        )

    @guarded(C2SEvent.TYPING)
    async def on_typing(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(TypingPayload, data, C2SEvent.TYPING)
        await self.messages.typing(payload.sender_id, payload.receiver_id, payload.is_typing)

    @guarded(C2SEvent.MARK_READ)
    async def on_mark_read(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(MarkReadPayload, data, C2SEvent.MARK_READ)
        await self.messages.mark_read(payload.user_id, payload.other_id)

    # Call signaling

    @guarded(C2SEvent.CALL_USER)
    async def on_call_user(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(CallUserPayload, data, C2SEvent.CALL_USER)
        await self.signaling.call(payload.offer, payload.to, payload.from_, payload.from_name, payload.type)

    @guarded(C2SEvent.ANSWER_CALL)
    async def on_answer_call(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(AnswerCallPayload, data, C2SEvent.ANSWER_CALL)
        await self.signaling.answer(payload.answer, payload.to)

    @guarded(C2SEvent.ICE_CANDIDATE)
    async def on_ice_candidate(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(IceCandidatePayload, data, C2SEvent.ICE_CANDIDATE)
        await self.signaling.ice_candidate(payload.candidate, payload.to)

    @guarded(C2SEvent.END_CALL)
    async def on_end_call(self, sid: str, data: Any = None) -> None:
        payload = parse_payload(EndCallPayload, data, C2SEvent.END_CALL)
        await self.signaling.end_call(payload.to)

    async def shutdown(self) -> None:
        """Let in-flight persistence finish, then release the store."""
        await self.tasks.drain()
        if self.store is not None:
            await self.store.close()
