"""Event system for observable attach operations."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional

from vmattach.bridge.types import AttachState


class AttachEventType(Enum):
    """Types of events emitted during an attach invocation."""

    STATE_CHANGE = "state_change"
    POLL = "poll"
    FAILED = "failed"


class AttachEvent:
    """Lightweight event emitted on state transitions and activation polls."""

    __slots__ = (
        "event_type",
        "state",
        "pid",
        "attempt",
        "message",
        "metadata",
    )

    def __init__(
        self,
        event_type: AttachEventType,
        state: AttachState,
        pid: int,
        attempt: int = 0,
        message: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.event_type = event_type
        self.state = state
        self.pid = pid
        self.attempt = attempt
        self.message = message
        self.metadata = metadata or {}

    def __repr__(self) -> str:
        return (
            f"AttachEvent({self.event_type.value}, {self.state.name}, "
            f"pid={self.pid}, attempt={self.attempt})"
        )


AttachEventCallback = Callable[[AttachEvent], None]
