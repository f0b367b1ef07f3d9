"""Attacher -- top-level orchestrator for one attach invocation."""

from __future__ import annotations

import logging
import sys
from typing import BinaryIO, Optional, Sequence

from vmattach.bridge.activator import Activator
from vmattach.bridge.errors import (
    ActivationError,
    AttachError,
    ConnectError,
    SessionIOError,
)
from vmattach.bridge.locator import ChannelLocator
from vmattach.bridge.session import AttachSession
from vmattach.bridge.types import MAX_ARGS, AttachState, ChannelStatus, Request
from vmattach.core.events import AttachEvent, AttachEventCallback, AttachEventType
from vmattach.core.types.config import AttachConfig
from vmattach.core.types.result import AttachResult

logger = logging.getLogger(__name__)

ACTIVATION_FAILED_MESSAGE = "Could not start attach mechanism"
CONNECT_FAILED_MESSAGE = "Could not connect to socket"


class Attacher:
    """Runs locate, activate, connect, send and relay against one target.

    Usage::

        attacher = Attacher(load_config())
        result = attacher.attach(pid, "threaddump")

    The sequence runs once per call: ``INIT`` then ``READY`` or
    ``NOT_READY``/``ACTIVATING``, then ``CONNECTED``, ``SENT``, ``RELAYING``
    and ``DONE``. Any failure emits a ``FAILED`` event and raises the
    matching :class:`~vmattach.bridge.errors.AttachError`; nothing is
    retried apart from the activation polls.
    """

    def __init__(
        self,
        config: Optional[AttachConfig] = None,
        event_callback: Optional[AttachEventCallback] = None,
        locator: Optional[ChannelLocator] = None,
        activator: Optional[Activator] = None,
    ):
        self.config = config if config is not None else AttachConfig()
        self._event_callback = event_callback
        self.locator = locator or ChannelLocator(
            tmp_dir=self.config.channel.tmp_dir,
            proc_root=self.config.channel.proc_root,
        )
        self.activator = activator or Activator(
            self.locator,
            max_attempts=self.config.activation.max_attempts,
            poll_interval=self.config.activation.poll_interval,
            sig=self.config.activation.signum,
        )
        self._pid = 0
        self._state = AttachState.INIT

    @property
    def state(self) -> AttachState:
        """Return the state reached by the most recent :meth:`attach` call."""
        return self._state

    def attach(
        self,
        pid: int,
        command: str,
        args: Sequence[str] = (),
        out: Optional[BinaryIO] = None,
    ) -> AttachResult:
        """Send *command* to *pid* and stream the response into *out*.

        *out* defaults to ``sys.stdout.buffer``. Arguments past the third
        do not fit the request and are dropped with a warning.
        """
        if out is None:
            out = sys.stdout.buffer
        if len(args) > MAX_ARGS:
            logger.warning(
                "Ignoring %d extra argument(s): %s",
                len(args) - MAX_ARGS,
                " ".join(args[MAX_ARGS:]),
            )
        request = Request(command, tuple(args[:MAX_ARGS]))

        self._pid = pid
        self._state = AttachState.INIT
        result = AttachResult(pid=pid, command=command)
        try:
            result.activated = self._ensure_channel(pid)
            result.poll_attempts = self.activator.last_attempts if result.activated else 0
            result.bytes_relayed = self._run_session(pid, request, out)
        except AttachError as exc:
            self._fail(exc)
            raise

        self._transition(AttachState.DONE)
        result.state = self._state
        return result

    # -- stages ------------------------------------------------------------

    def _ensure_channel(self, pid: int) -> bool:
        """Make sure the channel exists; return whether activation was needed."""
        if pid <= 0:
            raise ActivationError(
                f"{ACTIVATION_FAILED_MESSAGE}: invalid PID {pid}",
                signal_delivered=False,
            )
        status = self.locator.status(pid)
        if status is ChannelStatus.READY:
            self._transition(AttachState.READY)
            return False

        if status is ChannelStatus.WRONG_KIND:
            logger.warning(
                "%s exists but is not a socket", self.locator.channel_path(pid)
            )
        self._transition(AttachState.NOT_READY, status=status.name)
        self._transition(AttachState.ACTIVATING)

        self.activator.on_poll = self._on_poll
        try:
            ready = self.activator.request(pid)
        except ActivationError as exc:
            raise ActivationError(
                f"{ACTIVATION_FAILED_MESSAGE}: {exc}",
                signal_delivered=exc.signal_delivered,
            ) from exc
        finally:
            self.activator.on_poll = None

        if not ready:
            raise ActivationError(
                f"{ACTIVATION_FAILED_MESSAGE}: no attach socket after "
                f"{self.activator.last_attempts} attempt(s)",
                signal_delivered=True,
            )
        return True

    def _run_session(self, pid: int, request: Request, out: BinaryIO) -> int:
        try:
            session = AttachSession.connect(
                self.locator, pid, timeout=self.config.session.read_timeout
            )
        except ConnectError as exc:
            raise ConnectError(f"{CONNECT_FAILED_MESSAGE}: {exc}") from exc

        with session:
            self._transition(AttachState.CONNECTED)
            session.send(request)
            self._transition(AttachState.SENT)
            self._transition(AttachState.RELAYING)
            return session.relay(out, chunk_size=self.config.session.chunk_size)

    # -- events ------------------------------------------------------------

    def _emit(self, event: AttachEvent) -> None:
        if self._event_callback is not None:
            self._event_callback(event)

    def _transition(self, state: AttachState, **metadata) -> None:
        logger.debug("PID %d: %s -> %s", self._pid, self._state.name, state.name)
        self._state = state
        self._emit(
            AttachEvent(AttachEventType.STATE_CHANGE, state, self._pid, metadata=metadata)
        )

    def _on_poll(self, attempt: int, status: ChannelStatus) -> None:
        self._emit(
            AttachEvent(
                AttachEventType.POLL,
                self._state,
                self._pid,
                attempt=attempt,
                metadata={"status": status.name},
            )
        )

    def _fail(self, exc: AttachError) -> None:
        failed_in = self._state
        self._state = AttachState.FAILED
        metadata = {"failed_in": failed_in.name}
        if isinstance(exc, SessionIOError):
            metadata["bytes_relayed"] = exc.bytes_relayed
        self._emit(
            AttachEvent(
                AttachEventType.FAILED,
                AttachState.FAILED,
                self._pid,
                message=str(exc),
                metadata=metadata,
            )
        )
