from __future__ import annotations

from pydantic import BaseModel

from vmattach.bridge.types import AttachState


class AttachResult(BaseModel):
    """Outcome of one completed attach invocation."""

    pid: int
    command: str

    activated: bool = False
    """Whether the attach listener had to be started by this invocation."""

    poll_attempts: int = 0
    """Polls performed while waiting for the listener; 0 if none were needed."""

    bytes_relayed: int = 0
    state: AttachState = AttachState.DONE
