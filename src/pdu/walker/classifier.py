# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/classifier.py

"""Classify filesystem entries from their stat metadata."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from typing import Optional

from .models import EntryKind


@dataclass(frozen=True, slots=True)
class ExtendedMetadata:
    """The parts of a stat result the walker cares about.

    ``device``, ``inode`` and ``nlink`` are None where the platform does not
    report inode numbers; hardlink dedup and one-filesystem checks then
    have nothing to go on and let the entry through.
    """
    kind: EntryKind
    size: int
    device: Optional[int] = None
    inode: Optional[int] = None
    nlink: Optional[int] = None

    @classmethod
    def from_stat(cls, st: os.stat_result) -> ExtendedMetadata:
        if not st.st_ino:
            return cls(kind=classify(st.st_mode), size=st.st_size)
        return cls(
            kind=classify(st.st_mode),
            size=st.st_size,
            device=st.st_dev,
            inode=st.st_ino,
            nlink=st.st_nlink,
        )

    @property
    def is_multiply_linked(self) -> bool:
        return self.inode is not None and self.nlink is not None and self.nlink > 1

    @property
    def link_key(self) -> tuple[Optional[int], int]:
        # Inode numbers are only unique within one device
        return (self.device, self.inode)


def classify(mode: int) -> EntryKind:
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    return EntryKind.OTHER


def read_metadata(path: str, follow_symlinks: bool) -> ExtendedMetadata:
    """stat() or lstat() a path. Raises OSError."""
    st = os.stat(path) if follow_symlinks else os.lstat(path)
    return ExtendedMetadata.from_stat(st)


def entry_metadata(entry: os.DirEntry) -> ExtendedMetadata:
    """Metadata for a directory listing entry, without following links."""
    return ExtendedMetadata.from_stat(entry.stat(follow_symlinks=False))
