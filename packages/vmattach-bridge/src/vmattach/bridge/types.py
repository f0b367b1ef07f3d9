"""Bridge-level types for the attach client.

Provides enums and dataclasses that map attach-protocol concepts to clean
Python types.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Tuple

PROTOCOL_VERSION = "1"
"""Version marker sent ahead of every request."""

MAX_ARGS = 3
"""Argument slots carried by one request after the command name."""


class ChannelStatus(Enum):
    """What the locator found at a target's channel path."""

    READY = auto()
    ABSENT = auto()
    WRONG_KIND = auto()


class AttachState(Enum):
    """Stages of one attach invocation."""

    INIT = auto()
    READY = auto()
    NOT_READY = auto()
    ACTIVATING = auto()
    CONNECTED = auto()
    SENT = auto()
    RELAYING = auto()
    DONE = auto()
    FAILED = auto()


@dataclass(frozen=True)
class Request:
    """A single attach request: one command plus up to three arguments.

    The wire shape is fixed regardless of how many arguments were given:
    the version marker, the command, then exactly three argument slots,
    with unset slots sent as empty strings.
    """

    command: str
    args: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.args) > MAX_ARGS:
            raise ValueError(
                f"At most {MAX_ARGS} arguments are supported, got {len(self.args)}"
            )
        for value in (self.command, *self.args):
            if "\0" in value:
                raise ValueError(f"Request fields cannot contain null bytes: {value!r}")

    def fields(self) -> List[str]:
        """Return the wire fields in send order, version marker first."""
        padded = list(self.args) + [""] * (MAX_ARGS - len(self.args))
        return [PROTOCOL_VERSION, self.command, *padded]

    def encode(self) -> List[bytes]:
        """Return each field as bytes with its terminating null byte.

        Fields go through :func:`os.fsencode` so command-line arguments that
        were decoded with ``surrogateescape`` come back as their raw bytes.
        """
        return [os.fsencode(value) + b"\0" for value in self.fields()]
