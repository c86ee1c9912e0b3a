# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/pool.py

"""
Worker pool that expands directories in parallel.

Architecture:
- One shared, unbounded work queue of directory paths
- A fixed set of worker threads; each takes a directory, totals its
  immediate files, emits results, and queues its subdirectories
- A WorkCounter tracks in-flight directories so the orchestrator can tell
  when the tree is exhausted; a worker's own item is only marked done
  after all of its children have been counted and queued
"""

import os
import queue
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from loguru import logger

from pdu.config import WalkOptions

from . import classifier
from .classifier import ExtendedMetadata
from .counter import WorkCounter
from .models import EntryKind, ErrorKind, Result, WalkError
from .streams import Stream
from .tracker import DeviceTracker, HardlinkTracker


@dataclass
class WalkState:
    """Everything the workers of one walk share."""
    options: WalkOptions
    results: Stream[Result]
    errors: Stream[WalkError]
    devices: DeviceTracker
    hardlinks: HardlinkTracker = field(default_factory=HardlinkTracker)
    counter: WorkCounter = field(default_factory=WorkCounter)
    work_queue: queue.Queue = field(default_factory=queue.Queue)
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def enqueue(self, paths: Iterable[str]) -> int:
        """Queue directories, counting them before they become visible."""
        paths = list(paths)
        if not paths:
            return 0
        self.counter.add(len(paths))
        for path in paths:
            self.work_queue.put(path)
        return len(paths)

    def report(self, kind: ErrorKind, path: str, cause: OSError) -> None:
        logger.debug(f"{kind.value} failure on {path}: {cause}")
        self.errors.put(WalkError(kind=kind, path=path, cause=cause))

    def should_count(self, meta: ExtendedMetadata, path: str, check_device: bool = True) -> bool:
        """Device and hardlink checks shared by every counted entry."""
        if check_device and not self.devices.is_allowed(meta.device):
            logger.debug(f"Skipping {path}: device {meta.device} is outside the walk")
            return False
        if meta.is_multiply_linked and self.hardlinks.try_claim(meta.link_key, path):
            logger.debug(f"Skipping {path}: hardlink already counted "
                         f"at {self.hardlinks.owner(meta.link_key)}")
            return False
        return True


class Worker(threading.Thread):
    """Pulls directory paths off the work queue until a poison pill arrives."""

    def __init__(self, state: WalkState, worker_id: int):
        super().__init__(name=f"Walker-{worker_id}", daemon=True)
        self.state = state
        self.worker_id = worker_id

    def run(self):
        """Main worker loop."""
        logger.debug(f"{self.name} started")
        state = self.state
        processed = 0

        while True:
            path = state.work_queue.get()
            if path is None:  # Poison pill
                break
            try:
                if not state.cancelled:
                    self.process_directory(path)
                    processed += 1
            except Exception:
                # Never leave an item uncounted, or the walk would hang
                logger.exception(f"{self.name} failed on {path}")
            finally:
                state.counter.done()

        logger.debug(f"{self.name} stopped after {processed:,} directories")

    def process_directory(self, path: str) -> None:
        """Total one directory's immediate files and queue its subdirectories.

        A directory that cannot be stat'ed, opened, fully listed or searched
        reports one error and contributes nothing. An entry that disappears
        after listing is reported on its own and its siblings still count.
        """
        state = self.state
        options = state.options
        if state.cancelled:
            return

        try:
            meta = classifier.read_metadata(path, options.follow_symlinks)
        except OSError as e:
            state.report(ErrorKind.STAT, path, e)
            return

        if meta.kind is not EntryKind.DIRECTORY:
            logger.debug(f"Skipping {path}: no longer a directory")
            return

        if not state.devices.is_allowed(meta.device):
            logger.debug(f"Pruning {path}: device {meta.device} is outside the walk")
            return

        entries = self._list(path)
        if entries is None:
            return

        subdirs: List[str] = []
        total = 0
        for entry in entries:
            try:
                entry_meta = classifier.entry_metadata(entry)
            except FileNotFoundError as e:
                # Removed since the listing was read
                state.report(ErrorKind.STAT, entry.path, e)
                continue
            except OSError as e:
                # Listable but not searchable: the directory as a whole fails
                state.report(ErrorKind.READDIR, path, e)
                return

            if entry_meta.kind is EntryKind.DIRECTORY:
                subdirs.append(entry.path)
            elif entry_meta.kind is EntryKind.FILE:
                total += self._count(entry.path, entry_meta)
            elif entry_meta.kind is EntryKind.SYMLINK and options.show_all:
                total += self._count_symlink(entry.path, entry_meta)

        state.results.put(Result(
            is_dir=True,
            path=path,
            size=total,
            device=meta.device,
            inode=meta.inode,
        ))

        state.enqueue(subdirs)

    def _list(self, path: str) -> Optional[List[os.DirEntry]]:
        """Read a whole directory listing, or report why it could not be read."""
        try:
            it = os.scandir(path)
        except OSError as e:
            self.state.report(ErrorKind.OPEN, path, e)
            return None

        with it:
            try:
                return list(it)
            except OSError as e:
                self.state.report(ErrorKind.READDIR, path, e)
                return None

    def _count(self, path: str, meta: ExtendedMetadata) -> int:
        state = self.state
        if not state.should_count(meta, path):
            return 0
        if state.options.show_all:
            state.results.put(Result(
                is_dir=False,
                path=path,
                size=meta.size,
                device=meta.device,
                inode=meta.inode,
            ))
        return meta.size

    def _count_symlink(self, path: str, meta: ExtendedMetadata) -> int:
        if self.state.options.follow_symlinks:
            try:
                meta = classifier.read_metadata(path, follow_symlinks=True)
            except OSError as e:
                # Dangling or unreadable target: skip just this link
                self.state.report(ErrorKind.STAT, path, e)
                return 0
            if meta.kind is not EntryKind.FILE:
                logger.debug(f"Skipping {path}: link target is a {meta.kind.value}")
                return 0
        return self._count(path, meta)


class WorkerPool:
    """Fixed-size set of walker threads sharing one WalkState."""

    def __init__(self, state: WalkState, size: int):
        self.state = state
        self.size = size
        self.workers: List[Worker] = []

    def start(self) -> None:
        for i in range(self.size):
            worker = Worker(self.state, i)
            worker.start()
            self.workers.append(worker)
        logger.debug(f"Started {self.size} walker threads")

    def stop(self) -> None:
        """Send one poison pill per worker."""
        for _ in self.workers:
            self.state.work_queue.put(None)

    def join(self, timeout: Optional[float] = None) -> None:
        for worker in self.workers:
            worker.join(timeout=timeout)

    def alive(self) -> int:
        return sum(1 for w in self.workers if w.is_alive())
