# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/models.py

"""Records exchanged between the walker and its consumers."""

from enum import Enum
from typing import NamedTuple, Optional


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"
    OTHER = "other"  # device files, sockets, fifos


class ErrorKind(str, Enum):
    STAT = "stat"  # path inaccessible or vanished mid-walk
    OPEN = "open"  # directory not readable
    READDIR = "readdir"  # listing failed part way through


class Result(NamedTuple):
    """Size accounted to one path.

    For a directory, ``size`` is its local total: immediate regular files
    (and immediate symlinks when they are shown), never its descendants.
    """
    is_dir: bool
    path: str
    size: int
    device: Optional[int] = None
    inode: Optional[int] = None


class WalkError(NamedTuple):
    """A per-path failure; the walk continues without this subtree."""
    kind: ErrorKind
    path: str
    cause: OSError

    def __str__(self) -> str:
        reason = self.cause.strerror or str(self.cause)
        return f"{self.kind.value} {self.path}: {reason}"


class WalkSetupError(Exception):
    """Raised when a walk cannot be started at all."""
