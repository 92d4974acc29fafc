"""
Relay error types.

None of these are sent back to a connection; they are raised inside the
relay and logged at the Socket.IO boundary.
"""

from typing import Any, Optional


class RelayError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class RegistrationError(RelayError):
    def __init__(self, message: str, code: str = "registration_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class PayloadError(RelayError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_payload", message, details)


class StoreError(RelayError):
    def __init__(self, message: str, code: str = "store_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)
