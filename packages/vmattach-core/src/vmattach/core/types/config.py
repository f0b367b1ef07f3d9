from __future__ import annotations

import signal
import sys
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ChannelConfig(BaseModel):
    """Where rendezvous files are looked up."""

    tmp_dir: str = "/tmp"
    proc_root: str = "/proc"


class ActivationConfig(BaseModel):
    """Attach-listener activation configuration."""

    max_attempts: int = Field(default=10, ge=1)
    poll_interval: float = Field(default=1.0, ge=0.0)
    signal: str = "SIGQUIT"

    @field_validator("signal")
    @classmethod
    def _known_signal(cls, value: str) -> str:
        name = value.upper()
        if not name.startswith("SIG"):
            name = f"SIG{name}"
        if name not in signal.Signals.__members__:
            raise ValueError(f"Unknown signal: {value}")
        return name

    @property
    def signum(self) -> int:
        return int(signal.Signals[self.signal])


class SessionConfig(BaseModel):
    """Socket session configuration."""

    # None blocks until the target closes its end.
    read_timeout: Optional[float] = Field(default=None, gt=0.0)
    chunk_size: int = Field(default=1024, ge=1)


class AttachConfig(BaseModel):
    """Top-level vmattach configuration."""

    channel: ChannelConfig = ChannelConfig()
    activation: ActivationConfig = ActivationConfig()
    session: SessionConfig = SessionConfig()
    verbose: bool = False


def load_config(path: Optional[str] = None) -> AttachConfig:
    """Load configuration from a vmattach.toml file, falling back to defaults.

    Uses ``tomllib`` on Python 3.11+ and ``tomli`` on older versions.
    """

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib  # type: ignore[no-redef]

    config_path = Path(path) if path else Path("vmattach.toml")

    if not config_path.exists():
        return AttachConfig()

    with open(config_path, "rb") as f:
        raw = tomllib.load(f)

    return AttachConfig(**raw)
