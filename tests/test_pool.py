# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# pdu/tests/test_pool.py

import os
import queue
from dataclasses import replace

import pytest

from pdu.config import WalkOptions
from pdu.walker import classifier
from pdu.walker import pool as pool_module
from pdu.walker.models import EntryKind, ErrorKind
from pdu.walker.pool import WalkState, Worker, WorkerPool
from pdu.walker.streams import Stream
from pdu.walker.tracker import DeviceTracker


def make_state(one_filesystem=False, **opts):
    options = WalkOptions(concurrency=1, one_filesystem=one_filesystem, **opts)
    state = WalkState(
        options=options,
        results=Stream(10000),
        errors=Stream(10000),
        devices=DeviceTracker(enabled=one_filesystem),
    )
    return state


def collect(state):
    """Close the streams and return (results, errors, queued paths)."""
    state.results.close()
    state.errors.close()
    queued = []
    while True:
        try:
            queued.append(state.work_queue.get_nowait())
        except queue.Empty:
            break
    return list(state.results), list(state.errors), queued


class TestProcessDirectory:
    """One directory: local total, per-entry results, queued children."""

    def test_local_total_and_children(self, example_tree):
        state = make_state()
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert errors == []
        assert len(results) == 1
        assert results[0].is_dir
        assert results[0].path == str(example_tree)
        assert results[0].size == 150
        assert queued == [str(example_tree / "b")]
        assert state.counter.value == 1  # the child, not yet processed

    def test_show_all_emits_each_file(self, example_tree):
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, _, _ = collect(state)

        files = {r.path: r.size for r in results if not r.is_dir}
        assert files == {str(example_tree / "x"): 100, str(example_tree / "y"): 50}
        dirs = [r for r in results if r.is_dir]
        assert dirs[0].size == 150

    def test_symlinks_ignored_without_show_all(self, example_tree):
        (example_tree / "link").symlink_to(example_tree / "x")
        state = make_state()
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, _ = collect(state)
        assert errors == []
        assert [r.size for r in results] == [150]

    def test_shown_symlink_counts_link_size(self, example_tree):
        (example_tree / "link").symlink_to("x")
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, _, _ = collect(state)

        link = [r for r in results if r.path == str(example_tree / "link")]
        assert len(link) == 1
        assert link[0].size == len("x")
        assert [r.size for r in results if r.is_dir] == [150 + len("x")]

    def test_shown_symlink_followed_counts_target(self, example_tree):
        (example_tree / "link").symlink_to("x")
        state = make_state(show_all=True, follow_symlinks=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, _, _ = collect(state)

        link = [r for r in results if r.path == str(example_tree / "link")]
        assert link[0].size == 100
        assert [r.size for r in results if r.is_dir] == [250]

    def test_dangling_symlink_skips_only_that_entry(self, example_tree):
        (example_tree / "dangling").symlink_to(example_tree / "missing")
        state = make_state(show_all=True, follow_symlinks=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.STAT
        assert errors[0].path == str(example_tree / "dangling")
        assert [r.size for r in results if r.is_dir] == [150]
        assert queued == [str(example_tree / "b")]

    def test_symlink_to_directory_is_not_traversed(self, example_tree):
        (example_tree / "dirlink").symlink_to(example_tree / "b")
        state = make_state(show_all=True, follow_symlinks=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert errors == []
        assert queued == [str(example_tree / "b")]
        assert str(example_tree / "dirlink") not in {r.path for r in results}

    def test_other_entries_ignored(self, tmp_path):
        os.mkfifo(tmp_path / "fifo")
        (tmp_path / "f").write_bytes(b"abc")
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(tmp_path))
        results, errors, _ = collect(state)

        assert errors == []
        assert {r.path for r in results} == {str(tmp_path), str(tmp_path / "f")}

    def test_missing_directory_reports_stat_failure(self, tmp_path):
        state = make_state()
        Worker(state, 0).process_directory(str(tmp_path / "gone"))
        results, errors, queued = collect(state)

        assert results == []
        assert queued == []
        assert [e.kind for e in errors] == [ErrorKind.STAT]

    def test_open_failure(self, example_tree, monkeypatch):
        real_scandir = os.scandir

        def denied(path="."):
            if str(path) == str(example_tree):
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        monkeypatch.setattr(pool_module.os, "scandir", denied)
        state = make_state()
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert results == []
        assert queued == []
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.OPEN
        assert errors[0].path == str(example_tree)
        assert "Permission denied" in str(errors[0])

    def test_readdir_failure_gives_no_partial_results(self, example_tree, monkeypatch):
        real_scandir = os.scandir

        class BrokenListing:
            def __init__(self, path):
                self._it = real_scandir(path)

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._it.close()

            def __iter__(self):
                yield next(iter(self._it))
                raise OSError(5, "Input/output error")

        monkeypatch.setattr(pool_module.os, "scandir", BrokenListing)
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert results == []
        assert queued == []
        assert [e.kind for e in errors] == [ErrorKind.READDIR]

    def test_unsearchable_directory_fails_as_a_whole(self, example_tree, monkeypatch):
        """Listing works but no entry can be stat'ed, as with mode 0o600."""
        real_entry_metadata = classifier.entry_metadata

        def no_search(entry):
            if os.path.dirname(entry.path) == str(example_tree):
                raise PermissionError(13, "Permission denied", entry.path)
            return real_entry_metadata(entry)

        monkeypatch.setattr(classifier, "entry_metadata", no_search)
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert results == []
        assert queued == []
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.READDIR
        assert errors[0].path == str(example_tree)

    def test_entry_vanishing_after_listing_skips_only_that_entry(self, example_tree, monkeypatch):
        real_entry_metadata = classifier.entry_metadata
        gone = str(example_tree / "y")

        def vanish(entry):
            if entry.path == gone:
                raise FileNotFoundError(2, "No such file or directory", entry.path)
            return real_entry_metadata(entry)

        monkeypatch.setattr(classifier, "entry_metadata", vanish)
        state = make_state()
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert [(e.kind, e.path) for e in errors] == [(ErrorKind.STAT, gone)]
        assert [r.size for r in results] == [100]
        assert queued == [str(example_tree / "b")]

    def test_cancelled_walk_does_nothing(self, example_tree, monkeypatch):
        calls = []
        real_read = classifier.read_metadata
        monkeypatch.setattr(classifier, "read_metadata",
                            lambda *a, **kw: calls.append(a) or real_read(*a, **kw))
        state = make_state()
        state.cancel_event.set()
        Worker(state, 0).process_directory(str(example_tree))
        results, errors, queued = collect(state)

        assert calls == []
        assert (results, errors, queued) == ([], [], [])


class TestHardlinksInDirectory:
    """A multiply-linked inode is counted once per walk."""

    def test_two_links_in_one_directory(self, tmp_path):
        (tmp_path / "one").write_bytes(b"h" * 40)
        os.link(tmp_path / "one", tmp_path / "two")
        state = make_state(show_all=True)
        Worker(state, 0).process_directory(str(tmp_path))
        results, _, _ = collect(state)

        files = [r for r in results if not r.is_dir]
        assert len(files) == 1
        assert files[0].size == 40
        assert [r.size for r in results if r.is_dir] == [40]

    def test_links_in_different_directories(self, tmp_path):
        (tmp_path / "d1").mkdir()
        (tmp_path / "d2").mkdir()
        (tmp_path / "d1" / "f").write_bytes(b"h" * 40)
        os.link(tmp_path / "d1" / "f", tmp_path / "d2" / "f")
        state = make_state()
        worker = Worker(state, 0)
        worker.process_directory(str(tmp_path / "d1"))
        worker.process_directory(str(tmp_path / "d2"))
        results, _, _ = collect(state)

        assert sorted(r.size for r in results) == [0, 40]


class TestOneFilesystem:
    """Directories and files on untracked devices contribute nothing."""

    def test_foreign_directory_is_pruned(self, example_tree, monkeypatch):
        real_read = classifier.read_metadata
        home_device = os.stat(example_tree).st_dev

        def fake_read(path, follow_symlinks):
            meta = real_read(path, follow_symlinks)
            if path == str(example_tree / "b"):
                return replace(meta, device=home_device + 1)
            return meta

        monkeypatch.setattr(classifier, "read_metadata", fake_read)
        state = make_state(one_filesystem=True)
        state.devices.track(home_device, str(example_tree))
        state.devices.freeze()

        worker = Worker(state, 0)
        worker.process_directory(str(example_tree))
        worker.process_directory(str(example_tree / "b"))
        results, errors, queued = collect(state)

        assert errors == []
        assert [(r.path, r.size) for r in results] == [(str(example_tree), 150)]
        assert queued == [str(example_tree / "b")]

    def test_should_count_rejects_foreign_file(self):
        state = make_state(one_filesystem=True)
        state.devices.track(1, "/root")
        state.devices.freeze()
        home = classifier.ExtendedMetadata(kind=EntryKind.FILE, size=5, device=1, inode=10, nlink=1)
        away = replace(home, device=2)
        assert state.should_count(home, "/root/f")
        assert not state.should_count(away, "/root/mnt/f")


class TestWorkerPool:
    """Thread lifecycle."""

    def test_workers_process_queue_and_stop_on_poison_pill(self, example_tree):
        state = make_state()
        state.devices.freeze()
        workers = WorkerPool(state, size=3)
        workers.start()
        assert workers.alive() == 3

        state.enqueue([str(example_tree)])
        assert state.counter.wait(timeout=10)

        workers.stop()
        workers.join(timeout=5)
        assert workers.alive() == 0

        results, errors, _ = collect(state)
        assert errors == []
        assert sorted(r.size for r in results) == [25, 150]

    def test_unexpected_failure_still_marks_item_done(self, example_tree, monkeypatch):
        def explode(self, path):
            raise RuntimeError("boom")

        monkeypatch.setattr(Worker, "process_directory", explode)
        state = make_state()
        workers = WorkerPool(state, size=1)
        workers.start()
        state.enqueue([str(example_tree)])
        assert state.counter.wait(timeout=10)
        workers.stop()
        workers.join(timeout=5)

    @pytest.mark.parametrize("paths", [[], ["a", "b", "c"]])
    def test_enqueue_counts_before_queueing(self, paths):
        state = make_state()
        assert state.enqueue(paths) == len(paths)
        assert state.counter.value == len(paths)
        assert state.work_queue.qsize() == len(paths)
