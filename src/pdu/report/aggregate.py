# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/report/aggregate.py

"""Consume a walk's streams and accumulate per-root totals."""

import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from loguru import logger

from pdu.walker import Result, Walk, WalkError


def is_under(path: str, root: str) -> bool:
    """True if ``path`` is ``root`` or lies beneath it, by whole components."""
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


@dataclass
class Summary:
    """Totals gathered from one walk."""
    roots: List[str]
    root_totals: Dict[str, int] = field(default_factory=dict)
    entries: List[Result] = field(default_factory=list)
    errors: List[WalkError] = field(default_factory=list)

    @property
    def grand_total(self) -> int:
        return sum(self.root_totals.values())

    def add(self, result: Result) -> None:
        if result.is_dir:
            # Directory sizes are local; every enclosing root collects them
            for root in self.roots:
                if is_under(result.path, root):
                    self.root_totals[root] = self.root_totals.get(root, 0) + result.size
        elif result.path in self.roots:
            self.root_totals[result.path] = self.root_totals.get(result.path, 0) + result.size
        else:
            # Already part of its parent directory's local total
            self.entries.append(result)

    def rows(self, show_all: bool = False) -> List[Tuple[int, str]]:
        """(size, path) pairs, largest first.

        Per-root totals, plus every individually reported file and symlink
        when ``show_all`` is set.
        """
        sizes: Dict[str, int] = {}
        if show_all:
            for entry in self.entries:
                sizes[entry.path] = entry.size
        sizes.update(self.root_totals)
        return sorted(((size, path) for path, size in sizes.items()),
                      key=lambda row: (-row[0], row[1]))


def summarize(roots: Sequence[str], walk: Walk) -> Summary:
    """Drain both of a walk's streams until they close.

    Errors are collected on a helper thread while results are consumed
    here, so neither stream can stall the other.
    """
    summary = Summary(roots=list(dict.fromkeys(str(r) for r in roots)))

    def harvest_errors() -> None:
        for error in walk.errors:
            summary.errors.append(error)

    harvester = threading.Thread(target=harvest_errors, name="ErrorHarvester", daemon=True)
    harvester.start()

    count = 0
    for result in walk.results:
        summary.add(result)
        count += 1

    harvester.join()
    # Results arrive in any order; report roots in argument order
    summary.root_totals = {root: summary.root_totals[root]
                           for root in summary.roots if root in summary.root_totals}
    logger.debug(f"Aggregated {count:,} results and {len(summary.errors):,} errors")
    return summary
