"""Error kinds raised while resolving room signaling parameters."""
from __future__ import annotations


class SignalingError(RuntimeError):
    """Base class for failures that end a room join attempt."""

    prefix = "Room error"

    def describe(self) -> str:
        """Return the description handed to the caller."""

        return f"{self.prefix}: {self}"


class ProtocolError(SignalingError):
    """Raised when the room server answers with a non-SUCCESS result."""

    prefix = "Room response error"

    def __init__(self, result: str) -> None:
        super().__init__(result)
        self.result = result


class ParseError(SignalingError):
    """Raised when a JSON document or one of its fields is malformed or missing."""

    prefix = "Room JSON parsing error"


class NetworkError(SignalingError):
    """Raised on connection failures, timeouts and non-200 responses."""

    prefix = "Room IO error"


class ConfigError(SignalingError):
    """Raised when TURN credentials cannot be obtained by policy."""

    prefix = "Room configuration error"
