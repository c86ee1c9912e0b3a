# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/report/format.py

"""Size formatting and report lines."""

from enum import Enum
from typing import Iterable, List, Optional, Tuple

import humanize


class SizeUnit(str, Enum):
    BYTE = "byte"
    KILO = "kilo"
    HUMAN = "human"


def format_size(size: int, unit: SizeUnit = SizeUnit.BYTE) -> str:
    if unit is SizeUnit.HUMAN:
        return humanize.naturalsize(size, binary=True)
    if unit is SizeUnit.KILO:
        return str(size // 1024)
    return str(size)


def render(
    rows: Iterable[Tuple[int, str]],
    unit: SizeUnit = SizeUnit.BYTE,
    total: Optional[int] = None,
) -> List[str]:
    """Right-aligned ``size path`` lines, with a TOTAL line if given."""
    lines = [f"{format_size(size, unit):>12} {path}" for size, path in rows]
    if total is not None:
        lines.append(f"{format_size(total, unit):>12} TOTAL")
    return lines
