from __future__ import annotations

from vmattach.core.types.config import (
    ActivationConfig,
    AttachConfig,
    ChannelConfig,
    SessionConfig,
    load_config,
)
from vmattach.core.types.result import AttachResult

__all__ = [
    # config
    "ActivationConfig",
    "AttachConfig",
    "ChannelConfig",
    "SessionConfig",
    "load_config",
    # results
    "AttachResult",
]
