# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/orchestrator.py

"""
Start a walk: seed the roots, run the worker pool, close the streams.

The walk runs on background threads. Callers drain ``results`` and
``errors`` (concurrently; either may block the other if left alone) until
both are closed. Closure is the only end-of-walk signal.
"""

import threading
import time
from typing import Iterator, List, NamedTuple, Optional, Sequence

from loguru import logger

from pdu.config import WalkOptions

from . import classifier
from .classifier import ExtendedMetadata
from .models import EntryKind, ErrorKind, Result, WalkError, WalkSetupError
from .pool import WalkState, WorkerPool
from .streams import Stream
from .tracker import DeviceTracker


class SeededRoot(NamedTuple):
    """A root argument after its metadata has been read."""
    path: str
    meta: Optional[ExtendedMetadata] = None
    link_meta: Optional[ExtendedMetadata] = None  # the link itself, for symlink roots
    error: Optional[OSError] = None

    @property
    def followed_link(self) -> bool:
        """A symlink root whose target was stat'ed in its place."""
        return (self.link_meta is not None
                and self.link_meta is not self.meta
                and self.link_meta.kind is EntryKind.SYMLINK)

    def device_anchor(self) -> Optional[ExtendedMetadata]:
        """Metadata whose device joins the one-filesystem set, if any."""
        if self.meta.kind is EntryKind.DIRECTORY:
            return self.meta
        if self.followed_link:
            # Anchors on the link, not its target
            return self.link_meta
        return None


class Walk:
    """Handle on a running walk.

    Unpacks as ``results, errors = start_walk(...)``.
    """

    def __init__(self, state: WalkState, pool: WorkerPool, roots: List[str]):
        self.state = state
        self.pool = pool
        self.roots = roots
        self.results: Stream[Result] = state.results
        self.errors: Stream[WalkError] = state.errors
        self._threads: List[threading.Thread] = []

    def __iter__(self) -> Iterator[Stream]:
        yield self.results
        yield self.errors

    def cancel(self) -> None:
        """Stop expanding directories; the streams still close normally."""
        if not self.state.cancelled:
            logger.info("Walk cancelled")
        self.state.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.state.cancelled

    @property
    def done(self) -> bool:
        return self.results.closed and self.errors.closed

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the background threads; streams must be drained meanwhile."""
        for thread in self._threads:
            thread.join(timeout=timeout)
        self.pool.join(timeout=timeout)


def _read_root(path: str, follow_symlinks: bool) -> SeededRoot:
    try:
        meta = classifier.read_metadata(path, follow_symlinks)
    except OSError as e:
        return SeededRoot(path=path, error=e)

    link_meta = meta
    if follow_symlinks:
        try:
            link_meta = classifier.read_metadata(path, follow_symlinks=False)
        except OSError:
            pass
    return SeededRoot(path=path, meta=meta, link_meta=link_meta)


def _seed(state: WalkState, seeded: List[SeededRoot]) -> None:
    """Emit root-level results and queue root directories.

    Runs on its own thread holding one unit of outstanding work, so the
    completion watcher cannot see zero before every root is queued.
    """
    try:
        dirs: List[str] = []
        for root in seeded:
            if state.cancelled:
                break
            if root.error is not None:
                state.report(ErrorKind.STAT, root.path, root.error)
                continue

            meta = root.meta
            if meta.kind is EntryKind.DIRECTORY:
                dirs.append(root.path)
            elif meta.kind in (EntryKind.FILE, EntryKind.SYMLINK):
                # Plain file roots are never tracked, so only links face the device check
                if state.should_count(meta, root.path, check_device=root.followed_link):
                    state.results.put(Result(
                        is_dir=False,
                        path=root.path,
                        size=meta.size,
                        device=meta.device,
                        inode=meta.inode,
                    ))
            else:
                logger.debug(f"Ignoring {root.path}: {meta.kind.value}")

        if not state.cancelled:
            state.enqueue(dirs)
    finally:
        state.counter.done()


def _watch(state: WalkState, pool: WorkerPool, started: float) -> None:
    """Close both streams once all outstanding work has drained."""
    state.counter.wait()
    pool.stop()
    state.results.close()
    state.errors.close()
    logger.info(f"Walk finished in {time.time() - started:.2f}s "
                f"({len(state.hardlinks):,} hardlinked inodes seen)")


def start_walk(roots: Sequence[str], options: Optional[WalkOptions] = None) -> Walk:
    """Walk ``roots`` in parallel and stream per-path sizes.

    Args:
        roots: Starting paths; directories are walked, files and symlinks
            are reported as they are, anything else is ignored
        options: Walk options; defaults to ``WalkOptions()``

    Returns:
        A Walk whose ``results`` and ``errors`` streams close when the walk
        is complete

    Raises:
        WalkSetupError: if there is nothing to walk
    """
    options = options or WalkOptions()
    roots = list(dict.fromkeys(str(r) for r in roots))
    if not roots:
        raise WalkSetupError("No root paths to walk")

    started = time.time()
    logger.info(f"Walking {len(roots)} root(s) with {options.concurrency} workers")

    state = WalkState(
        options=options,
        results=Stream(options.result_buffer, name="results"),
        errors=Stream(options.error_buffer, name="errors"),
        devices=DeviceTracker(enabled=options.one_filesystem),
    )

    # Root devices are registered before any worker can look at them
    seeded = [_read_root(r, options.follow_symlinks) for r in roots]
    if options.one_filesystem:
        for root in seeded:
            if root.error is not None:
                continue
            anchor = root.device_anchor()
            if anchor is not None:
                state.devices.track(anchor.device, root.path)
    state.devices.freeze()

    pool = WorkerPool(state, options.concurrency)
    pool.start()

    walk = Walk(state, pool, roots)
    state.counter.add(1)  # held by the seeder
    seeder = threading.Thread(target=_seed, args=(state, seeded), name="Seeder", daemon=True)
    watcher = threading.Thread(target=_watch, args=(state, pool, started), name="Watcher", daemon=True)
    walk._threads = [seeder, watcher]
    seeder.start()
    watcher.start()

    return walk
