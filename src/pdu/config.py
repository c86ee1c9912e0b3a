# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/config.py

"""Walk options and config-file loading."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Final

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

# Worker count is a multiple of the CPU count: the walk is I/O bound
PARALLELISM_FACTOR: Final = 2
RESULT_BUFFER_SIZE: Final = 65536
ERROR_BUFFER_SIZE: Final = 8
CONFIG_TABLE: Final = "walk"


def default_concurrency() -> int:
    return (os.cpu_count() or 1) * PARALLELISM_FACTOR


class WalkOptions(BaseModel):
    """Options recognized by the walker."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    follow_symlinks: bool = False  # stat() instead of lstat() for classification
    show_all: bool = False  # emit a Result for every counted file and symlink
    one_filesystem: bool = False  # stay on the device(s) of the root arguments
    concurrency: int = Field(default_factory=default_concurrency, ge=1)
    result_buffer: int = Field(default=RESULT_BUFFER_SIZE, ge=1)
    error_buffer: int = Field(default=ERROR_BUFFER_SIZE, ge=1)


def load_options(path: Path | None = None, **overrides: object) -> WalkOptions:
    """Build WalkOptions from an optional TOML file plus overrides.

    The file's ``[walk]`` table supplies defaults; overrides that are not
    None (typically command-line flags) take precedence.

    Raises:
        FileNotFoundError: if ``path`` is given but does not exist
        pydantic.ValidationError: on unknown keys or invalid values
    """
    values: dict[str, object] = {}

    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("rb") as f:
            raw = tomllib.load(f)
        table = raw.get(CONFIG_TABLE, {})
        if not isinstance(table, dict):
            raise TypeError(f"[{CONFIG_TABLE}] in {path} must be a table, got {table!r}")
        values.update(table)
        logger.debug(f"Loaded {len(table)} option(s) from {path}")

    values.update({k: v for k, v in overrides.items() if v is not None})
    return WalkOptions.model_validate(values)
