"""Bridge test fixtures — mock socket objects."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest


@pytest.fixture()
def mock_socket():
    sock = MagicMock(name="socket")
    sock.sendall.return_value = None
    sock.recv.return_value = b""
    return sock
