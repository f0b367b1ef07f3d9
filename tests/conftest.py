"""Root conftest — shared fixtures for the entire test suite."""

from __future__ import annotations

import socket
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from vmattach.bridge.locator import ChannelLocator
from vmattach.core.types.config import ActivationConfig, AttachConfig, ChannelConfig

# Version marker plus four argument fields.
REQUEST_FIELDS = 5

# An unused stub notices stop() within one accept poll.
ACCEPT_POLL_SECONDS = 0.05
ACCEPT_DEADLINE_SECONDS = 5.0


# ---------------------------------------------------------------------------
# Stub attach listener
# ---------------------------------------------------------------------------

class StubTarget:
    """A UNIX socket server standing in for a JVM's attach listener.

    Accepts a single connection, reads one request, writes the configured
    response chunks and closes its end.
    """

    def __init__(self, path: Path, response_chunks: Sequence[bytes] = ()) -> None:
        self.path = path
        self.response_chunks = list(response_chunks)
        self.received = b""
        self.connections = 0
        self._server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server.bind(str(path))
        self._server.listen(1)
        self._server.settimeout(ACCEPT_POLL_SECONDS)
        self._stopping = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> StubTarget:
        self._thread.start()
        return self

    def _serve(self) -> None:
        deadline = time.monotonic() + ACCEPT_DEADLINE_SECONDS
        while True:
            try:
                conn, _ = self._server.accept()
                break
            except socket.timeout:
                if self._stopping.is_set() or time.monotonic() > deadline:
                    return
            except OSError:
                return
        self.connections += 1
        with conn:
            while self.received.count(b"\0") < REQUEST_FIELDS:
                data = conn.recv(1024)
                if not data:
                    break
                self.received += data
            try:
                for chunk in self.response_chunks:
                    conn.sendall(chunk)
            except OSError:
                # Client went away early.
                pass

    @property
    def received_fields(self) -> List[bytes]:
        """Split the request on null bytes, dropping the empty tail."""
        return self.received.split(b"\0")[:-1]

    def stop(self) -> None:
        self._stopping.set()
        self._thread.join(timeout=ACCEPT_DEADLINE_SECONDS)
        self._server.close()


# ---------------------------------------------------------------------------
# Stand-ins for time.sleep and os.kill
# ---------------------------------------------------------------------------

class RecordingSleep:
    """Replacement for ``time.sleep`` that records calls and never blocks.

    ``on_call`` runs after each recorded call with the 1-based call number.
    """

    def __init__(self, on_call: Optional[Callable[[int], None]] = None) -> None:
        self.calls: List[float] = []
        self.on_call = on_call

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.on_call is not None:
            self.on_call(len(self.calls))


class RecordingKill:
    """Replacement for ``os.kill``; optionally raises ``error``."""

    def __init__(self, error: Optional[OSError] = None) -> None:
        self.calls: List[Tuple[int, int]] = []
        self.error = error
        self.on_call: Optional[Callable[[int, int], None]] = None

    def __call__(self, pid: int, sig: int) -> None:
        self.calls.append((pid, sig))
        if self.on_call is not None:
            self.on_call(pid, sig)
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def recording_sleep():
    return RecordingSleep()


@pytest.fixture()
def recording_kill():
    return RecordingKill()


@pytest.fixture()
def locator(tmp_path):
    """A locator rooted in a private temp dir with an empty fake procfs."""
    proc_root = tmp_path / "proc"
    proc_root.mkdir()
    return ChannelLocator(tmp_dir=tmp_path, proc_root=proc_root)


@pytest.fixture()
def attach_config(locator):
    """An AttachConfig pointing at the same directories as ``locator``."""
    return AttachConfig(
        channel=ChannelConfig(
            tmp_dir=str(locator.tmp_dir), proc_root=str(locator.proc_root)
        ),
        activation=ActivationConfig(poll_interval=0.0),
    )


@pytest.fixture()
def stub_target(locator):
    """Factory starting a :class:`StubTarget` on a pid's channel path."""
    targets: List[StubTarget] = []

    def _start(pid: int, response_chunks: Sequence[bytes] = ()) -> StubTarget:
        target = StubTarget(locator.channel_path(pid), response_chunks).start()
        targets.append(target)
        return target

    yield _start

    for target in targets:
        target.stop()
