# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/__init__.py

"""pdu: parallel disk usage calculator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pdu")
except PackageNotFoundError:
    __version__ = "unknown (package not installed)"
