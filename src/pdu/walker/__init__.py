# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/__init__.py

"""Concurrent filesystem walker."""

from .models import EntryKind, ErrorKind, Result, WalkError, WalkSetupError
from .orchestrator import Walk, start_walk

__all__ = [
    "EntryKind",
    "ErrorKind",
    "Result",
    "Walk",
    "WalkError",
    "WalkSetupError",
    "start_walk",
]
