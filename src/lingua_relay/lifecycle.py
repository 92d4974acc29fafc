"""
Connection lifecycle — Unregistered → Registered → Closed.

Owns every ConnectionHandle, keeps the presence registry in step with it and
broadcasts `user_status` on presence changes.
"""

import logging
import time
from typing import Callable, Optional

from lingua_relay.errors import RegistrationError
from lingua_relay.models.events import PresenceStatus, S2CEvent
from lingua_relay.presence import ConnectionHandle, ConnectionState, PresenceRegistry
from lingua_relay.store.base import Store
from lingua_relay.tasks import BackgroundTasks
from lingua_relay.transport.emitter import Emitter, broadcast

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class ConnectionLifecycleManager:
    def __init__(
        self,
        presence: PresenceRegistry,
        emitter: Emitter,
        store: Optional[Store] = None,
        tasks: Optional[BackgroundTasks] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self._presence = presence
        self._emitter = emitter
        self._store = store
        self._tasks = tasks or BackgroundTasks()
        self._clock = clock
        self._connections: dict[str, ConnectionHandle] = {}

    def connect(self, sid: str) -> ConnectionHandle:
        handle = ConnectionHandle(sid)
        self._connections[sid] = handle
        logger.debug(f"Connection {sid} opened")
        return handle

    def get(self, sid: str) -> Optional[ConnectionHandle]:
        return self._connections.get(sid)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def register(self, sid: str, identity: str) -> ConnectionHandle:
        """Bind `identity` to the connection and announce it online.

        Repeating the same identity on a registered connection is a no-op
        unless a newer connection took the identity over meanwhile; then this
        connection becomes current again.
        A different identity, or an unknown/closed connection, raises
        RegistrationError.
        """
        handle = self._connections.get(sid)
        if handle is None or handle.state is ConnectionState.CLOSED:
            raise RegistrationError(f"Connection {sid} is not open", details={"sid": sid})
        if not identity:
            raise RegistrationError("identity must be a non-empty string", details={"sid": sid})
        if handle.state is ConnectionState.REGISTERED:
            if handle.identity == identity:
                if self._presence.resolve(identity) is handle:
                    logger.debug(f"Connection {sid} re-registered as {identity}, ignoring")
                    return handle
                self._presence.register(identity, handle)
                logger.info(f"User {identity} reclaimed presence on {sid}")
                await broadcast(self._emitter, S2CEvent.USER_STATUS, {"userId": identity, "status": PresenceStatus.ONLINE})
                return handle
            raise RegistrationError(
                f"Connection {sid} is registered as {handle.identity!r}, refusing {identity!r}",
                code="identity_conflict",
                details={"sid": sid, "identity": handle.identity, "requested": identity},
            )

        handle.bind(identity)
        self._presence.register(identity, handle)
        handle.state = ConnectionState.REGISTERED
        logger.info(f"User {identity} registered on {sid}")
        await broadcast(self._emitter, S2CEvent.USER_STATUS, {"userId": identity, "status": PresenceStatus.ONLINE})
        return handle

    async def disconnect(self, sid: str) -> None:
        handle = self._connections.pop(sid, None)
        if handle is None:
            return
        was_registered = handle.state is ConnectionState.REGISTERED
        handle.state = ConnectionState.CLOSED
        if not was_registered:
            logger.debug(f"Connection {sid} closed before registering")
            return

        identity = handle.identity
        if not self._presence.remove(handle):
            logger.info(f"Stale disconnect for {identity} on {sid}; newer connection kept")
            return

        last_seen = self._clock()
        logger.info(f"User {identity} disconnected from {sid}")
        await broadcast(self._emitter, S2CEvent.USER_STATUS, {
            "userId": identity,
            "status": PresenceStatus.OFFLINE,
            "lastSeen": last_seen,
        })
        if self._store is not None:
            self._tasks.spawn(
                self._store.update_last_seen(identity, last_seen),
                f"update last_seen for {identity}",
            )
