# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/logging/setup.py

"""Logging configuration for pdu."""

import sys

from loguru import logger


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru for console output.

    Logs go to stderr; stdout carries the usage report.
    """
    logger.remove()  # Remove default handler
    if verbose:
        # Verbose mode: include module and line number
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                   "{thread.name} | {name}:{line} | <level>{message}</level>",
        )
    else:
        logger.add(
            sys.stderr,
            level="WARNING",
            format="<level>{level: <8}</level> | <level>{message}</level>",
        )
