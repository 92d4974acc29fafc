"""
lingua-relay — presence-aware chat and call signaling relay.

Socket.IO relay for direct messages, typing/read/online state and WebRTC
call signaling, with a thin REST surface over the message store.
"""

__version__ = "0.1.0"

from lingua_relay.errors import RelayError, RegistrationError, PayloadError, StoreError
from lingua_relay.models.events import C2SEvent, S2CEvent, PresenceStatus, CallType
from lingua_relay.presence import PresenceRegistry, ConnectionHandle, ConnectionState
from lingua_relay.lifecycle import ConnectionLifecycleManager
from lingua_relay.relay import MessageRelay
from lingua_relay.signaling import CallSignalingRelay
from lingua_relay.server import RelayServer
from lingua_relay.client import RelayClient

__all__ = [
    "RelayError",
    "RegistrationError",
    "PayloadError",
    "StoreError",
    "C2SEvent",
    "S2CEvent",
    "PresenceStatus",
    "CallType",
    "PresenceRegistry",
    "ConnectionHandle",
    "ConnectionState",
    "ConnectionLifecycleManager",
    "MessageRelay",
    "CallSignalingRelay",
    "RelayServer",
    "RelayClient",
]
