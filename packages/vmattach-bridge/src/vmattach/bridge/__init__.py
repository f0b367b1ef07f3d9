"""vmattach.bridge -- low-level pieces of the HotSpot dynamic attach protocol.

This package wraps the OS primitives the protocol is built on: the
``/tmp/.java_pid<pid>`` UNIX socket, the ``.attach_pid<pid>`` marker file,
the ``SIGQUIT`` activation signal and the null-terminated request format.
It does no printing and reads no configuration.

Example::

    from vmattach.bridge import Activator, AttachSession, ChannelLocator, Request

    locator = ChannelLocator()
    if not locator.is_ready(pid) and not Activator(locator).request(pid):
        raise SystemExit("attach listener did not start")
    with AttachSession.connect(locator, pid) as session:
        session.send(Request("threaddump"))
        session.relay(sys.stdout.buffer)
"""

from __future__ import annotations

from .activator import MAX_ACTIVATION_ATTEMPTS, POLL_INTERVAL_SECONDS, Activator
from .errors import (
    ActivationError,
    AttachError,
    ConnectError,
    SessionIOError,
    UsageError,
)
from .locator import ChannelLocator
from .relay import relay_response
from .session import AttachSession
from .types import AttachState, ChannelStatus, Request

__all__ = [
    # Core classes
    "ChannelLocator",
    "Activator",
    "AttachSession",
    "relay_response",
    # Types
    "AttachState",
    "ChannelStatus",
    "Request",
    # Errors
    "AttachError",
    "UsageError",
    "ActivationError",
    "ConnectError",
    "SessionIOError",
    # Constants
    "MAX_ACTIVATION_ATTEMPTS",
    "POLL_INTERVAL_SECONDS",
]
