"""Filesystem rendezvous paths for a target process."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import List, Union

from .types import ChannelStatus

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = ".java_pid"
MARKER_PREFIX = ".attach_pid"


class ChannelLocator:
    """Computes where a target's attach socket and activation marker live.

    Parameters
    ----------
    tmp_dir:
        Shared temp directory the target creates its socket in.
    proc_root:
        Mount point of procfs, used to reach the target's working directory.
    """

    def __init__(
        self,
        tmp_dir: Union[str, Path] = "/tmp",
        proc_root: Union[str, Path] = "/proc",
    ) -> None:
        self.tmp_dir = Path(tmp_dir)
        self.proc_root = Path(proc_root)

    def channel_path(self, pid: int) -> Path:
        """Return the path of the target's attach socket."""
        return self.tmp_dir / f"{CHANNEL_PREFIX}{pid}"

    def marker_candidates(self, pid: int) -> List[Path]:
        """Return marker locations in the order they should be tried.

        The first lives in the target's own working directory so it is
        visible from the target's mount namespace; the second is the shared
        temp directory.
        """
        name = f"{MARKER_PREFIX}{pid}"
        return [
            self.proc_root / str(pid) / "cwd" / name,
            self.tmp_dir / name,
        ]

    def status(self, pid: int) -> ChannelStatus:
        """Report what currently exists at the channel path."""
        path = self.channel_path(pid)
        try:
            st = os.stat(path)
        except OSError:
            return ChannelStatus.ABSENT
        if stat.S_ISSOCK(st.st_mode):
            return ChannelStatus.READY
        logger.debug("%s exists but is not a socket", path)
        return ChannelStatus.WRONG_KIND

    def is_ready(self, pid: int) -> bool:
        """Return whether the target has a live attach socket."""
        return self.status(pid) is ChannelStatus.READY
