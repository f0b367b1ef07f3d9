"""One connect/send/receive/close cycle against an attach socket."""

from __future__ import annotations

import logging
import socket
from typing import BinaryIO, Optional

from .errors import ConnectError, SessionIOError
from .locator import ChannelLocator
from .relay import DEFAULT_CHUNK_SIZE, relay_response
from .types import Request

logger = logging.getLogger(__name__)


class AttachSession:
    """Wrapper around a connected attach socket.

    Usage::

        with AttachSession.connect(locator, pid) as session:
            session.send(Request("threaddump"))
            session.relay(sys.stdout.buffer)
    """

    def __init__(self, sock: socket.socket, pid: int) -> None:
        self._sock: Optional[socket.socket] = sock
        self.pid = pid

    @classmethod
    def connect(
        cls,
        locator: ChannelLocator,
        pid: int,
        timeout: Optional[float] = None,
    ) -> AttachSession:
        """Connect to the attach socket of *pid*.

        The path is derived from the pid on every call rather than reused
        from an earlier lookup.

        Raises
        ------
        ConnectError
            If the socket is missing or refuses the connection.
        """
        path = locator.channel_path(pid)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(timeout)
            sock.connect(str(path))
        except OSError as exc:
            sock.close()
            raise ConnectError(f"Could not connect to {path}: {exc}") from exc
        logger.info("Connected to %s", path)
        return cls(sock, pid)

    # -- context manager ---------------------------------------------------

    def __enter__(self) -> AttachSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # -- public API --------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._sock is None

    def send(self, request: Request) -> None:
        """Write *request*, one ``sendall`` per null-terminated field.

        The receiver reads null-terminated strings, so each field goes out
        as its own write.
        """
        sock = self._require_open()
        for data in request.encode():
            try:
                sock.sendall(data)
            except OSError as exc:
                raise SessionIOError(f"Failed to send request: {exc}") from exc
        logger.debug("Sent request %r to PID %d", request.fields(), self.pid)

    def relay(self, out: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Copy the response to *out* until the target closes the socket."""
        return relay_response(self._require_open(), out, chunk_size)

    def close(self) -> None:
        """Close the socket; safe to call more than once."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _require_open(self) -> socket.socket:
        if self._sock is None:
            raise SessionIOError("Session is closed")
        return self._sock
