"""
Presence registry — identity → live connection handle.

Every mutation is synchronous, so under one asyncio loop the registry never
changes across an await.
"""

import logging
import time
from enum import Enum
from typing import Iterator, Optional

from lingua_relay.errors import RegistrationError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    CLOSED = "closed"


class ConnectionHandle:
    """One live transport session. `identity` is set once, at registration."""

    __slots__ = ("sid", "created_at", "state", "_identity")

    def __init__(self, sid: str, created_at: Optional[float] = None):
        self.sid = sid
        self.created_at = created_at if created_at is not None else time.time()
        self.state = ConnectionState.UNREGISTERED
        self._identity: Optional[str] = None

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    def bind(self, identity: str) -> None:
        if self._identity is not None and self._identity != identity:
            raise RegistrationError(
                f"Connection {self.sid} is already bound to {self._identity!r}",
                details={"sid": self.sid, "identity": self._identity, "requested": identity},
            )
        self._identity = identity

    def __repr__(self) -> str:
        return f"ConnectionHandle(sid={self.sid!r}, identity={self._identity!r}, state={self.state.value!r})"


class PresenceRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, ConnectionHandle] = {}

    def register(self, identity: str, connection: ConnectionHandle) -> Optional[ConnectionHandle]:
        """Map `identity` to `connection`. Returns the superseded handle, if any.

        The superseded connection is not told; its later disconnect is a no-op
        for this identity.
        """
        if not identity:
            raise RegistrationError("identity must be a non-empty string")
        previous = self._entries.get(identity)
        self._entries[identity] = connection
        if previous is not None and previous is not connection:
            logger.info(f"Presence for {identity} moved from {previous.sid} to {connection.sid}")
            return previous
        return None

    def resolve(self, identity: str) -> Optional[ConnectionHandle]:
        return self._entries.get(identity)

    def remove(self, connection: ConnectionHandle) -> bool:
        """Drop the entry only if it still points at exactly this connection."""
        identity = connection.identity
        if identity is None:
            return False
        if self._entries.get(identity) is not connection:
            return False
        del self._entries[identity]
        return True

    def online_identities(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
