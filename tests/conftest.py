# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# pdu/tests/conftest.py

import threading

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def quiet_logging():
    """Drop any sinks a test (or the CLI) installed."""
    yield
    logger.remove()


@pytest.fixture
def drain():
    """Consume both streams of a walk concurrently; returns (results, errors)."""
    def _drain(walk):
        errors = []
        harvester = threading.Thread(target=lambda: errors.extend(walk.errors))
        harvester.start()
        results = list(walk.results)
        harvester.join(timeout=30)
        assert not harvester.is_alive(), "error stream never closed"
        return results, errors
    return _drain


@pytest.fixture
def example_tree(tmp_path):
    """a/{x: 100 bytes, y: 50 bytes, b/{z: 25 bytes}}"""
    a = tmp_path / "a"
    b = a / "b"
    b.mkdir(parents=True)
    (a / "x").write_bytes(b"x" * 100)
    (a / "y").write_bytes(b"y" * 50)
    (b / "z").write_bytes(b"z" * 25)
    return a
