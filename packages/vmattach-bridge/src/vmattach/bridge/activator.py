"""Forces a target to start its attach listener.

HotSpot opens its attach socket in response to ``SIGQUIT`` if it finds an
``.attach_pid<pid>`` file in its working directory or in the temp directory.
Nothing acknowledges the request, so the activator polls the channel path
for a bounded number of intervals.
"""

from __future__ import annotations

import logging
import os
import signal
import time
from pathlib import Path
from typing import Callable, Optional

from .errors import ActivationError
from .locator import ChannelLocator
from .types import ChannelStatus

logger = logging.getLogger(__name__)

MAX_ACTIVATION_ATTEMPTS = 10
POLL_INTERVAL_SECONDS = 1.0
MARKER_MODE = 0o660

PollCallback = Callable[[int, ChannelStatus], None]


class Activator:
    """Creates the activation marker, signals the target and waits.

    ``sleep`` and ``send_signal`` default to :func:`time.sleep` and
    :func:`os.kill`; tests pass their own to control timing and delivery.
    """

    def __init__(
        self,
        locator: ChannelLocator,
        max_attempts: int = MAX_ACTIVATION_ATTEMPTS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        sig: int = signal.SIGQUIT,
        sleep: Callable[[float], None] = time.sleep,
        send_signal: Callable[[int, int], None] = os.kill,
        on_poll: Optional[PollCallback] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.locator = locator
        self.max_attempts = max_attempts
        self.poll_interval = poll_interval
        self.sig = sig
        self.on_poll = on_poll
        self._sleep = sleep
        self._send_signal = send_signal
        self.last_attempts = 0

    # -- public API --------------------------------------------------------

    def request(self, pid: int) -> bool:
        """Ask *pid* to open its attach socket.

        Returns
        -------
        bool
            ``True`` once the channel is ready, ``False`` if it never
            appeared within ``max_attempts`` polls.

        Raises
        ------
        ActivationError
            If no marker location is writable or the signal could not be
            delivered.
        """
        self.last_attempts = 0
        # kill() treats 0 and negative pids as process groups.
        if pid <= 0:
            raise ActivationError(f"Invalid PID {pid}: must be a positive integer")
        marker = self._create_marker(pid)
        try:
            self._signal(pid)
            return self._wait(pid)
        finally:
            self._remove_marker(marker)

    # -- internals ---------------------------------------------------------

    def _create_marker(self, pid: int) -> Path:
        for path in self.locator.marker_candidates(pid):
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, MARKER_MODE)
            except OSError as exc:
                logger.debug("Cannot create marker %s: %s", path, exc)
                continue
            os.close(fd)
            logger.debug("Created attach marker %s", path)
            return path
        raise ActivationError(f"Could not create attach marker for PID {pid}")

    def _signal(self, pid: int) -> None:
        try:
            self._send_signal(pid, self.sig)
        except OSError as exc:
            raise ActivationError(
                f"Failed to signal PID {pid}: {exc.strerror or exc}"
            ) from exc
        logger.info("Sent %s to PID %d", signal.Signals(self.sig).name, pid)

    def _wait(self, pid: int) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            self._sleep(self.poll_interval)
            self.last_attempts = attempt
            status = self.locator.status(pid)
            logger.debug("Poll %d/%d for PID %d: %s", attempt, self.max_attempts, pid, status.name)
            if self.on_poll is not None:
                self.on_poll(attempt, status)
            if status is ChannelStatus.READY:
                return True
        return False

    @staticmethod
    def _remove_marker(path: Path) -> None:
        try:
            os.unlink(path)
        except OSError:
            logger.warning("Failed to remove attach marker %s", path)
