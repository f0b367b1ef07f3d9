"""Error types raised by the attach client."""

from __future__ import annotations


class AttachError(RuntimeError):
    """Base class for all attach failures."""


class UsageError(AttachError):
    """Raised for a malformed invocation."""


class ActivationError(AttachError):
    """Raised when the target could not be made to open its attach channel.

    ``signal_delivered`` is ``False`` when the failure happened before the
    signal reached the target (marker creation or ``kill`` failed) and
    ``True`` when the target received it but never created the channel.
    """

    signal_delivered: bool

    def __init__(self, message: str, signal_delivered: bool = False) -> None:
        self.signal_delivered = signal_delivered
        super().__init__(message)


class ConnectError(AttachError):
    """Raised when the attach channel is unreachable or refuses the connection."""


class SessionIOError(AttachError):
    """Raised when writing the request or reading the response fails.

    ``bytes_relayed`` counts response bytes already written to the caller's
    output before the failure.
    """

    bytes_relayed: int

    def __init__(self, message: str, bytes_relayed: int = 0) -> None:
        self.bytes_relayed = bytes_relayed
        super().__init__(message)
