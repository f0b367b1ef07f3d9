"""vmattach -- send diagnostic commands to a running JVM without prior instrumentation."""

from __future__ import annotations

from vmattach.core.attach import Attacher
from vmattach.core.events import AttachEvent, AttachEventCallback, AttachEventType
from vmattach.core.types.config import AttachConfig, load_config
from vmattach.core.types.result import AttachResult

__all__ = [
    "Attacher",
    "AttachConfig",
    "AttachEvent",
    "AttachEventCallback",
    "AttachEventType",
    "AttachResult",
    "load_config",
]
