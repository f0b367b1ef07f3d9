"""Copies a target's response to the caller's output."""

from __future__ import annotations

import socket
from typing import BinaryIO

from .errors import SessionIOError

DEFAULT_CHUNK_SIZE = 1024


def relay_response(
    sock: socket.socket, out: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> int:
    """Stream everything *sock* sends into *out* until the peer closes.

    The protocol has no length prefix or terminator, so end-of-stream is
    the only completion signal and a truncated response looks the same as
    a complete one.

    Parameters
    ----------
    sock:
        Connected attach socket.
    out:
        Binary stream receiving each chunk as soon as it arrives.
    chunk_size:
        Maximum bytes per ``recv`` call.

    Returns
    -------
    int
        Total bytes relayed.

    Raises
    ------
    SessionIOError
        If reading fails; output already written stays written.
    """
    total = 0
    while True:
        try:
            chunk = sock.recv(chunk_size)
        except OSError as exc:
            raise SessionIOError(
                f"Failed to read response after {total} bytes: {exc}",
                bytes_relayed=total,
            ) from exc
        if not chunk:
            return total
        out.write(chunk)
        out.flush()
        total += len(chunk)
