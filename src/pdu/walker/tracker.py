# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/pdu/walker/tracker.py

"""Device and hardlink bookkeeping shared by all workers."""

from threading import Lock
from typing import Dict, Hashable, Optional

from loguru import logger


class DeviceTracker:
    """Devices of the root arguments, for one-filesystem mode.

    Written only while the roots are seeded, then frozen; workers read it
    without locking.
    """

    def __init__(self, enabled: bool):
        self.enabled = enabled
        self._devices: Dict[int, str] = {}
        self._frozen = False

    def track(self, device: Optional[int], path: str) -> None:
        """Record an allowed device; the first path seen for it is kept."""
        if self._frozen:
            raise RuntimeError(f"Device tracker is frozen, cannot track {path}")
        if device is None:
            return
        if device not in self._devices:
            self._devices[device] = path
            logger.debug(f"Tracking device {device} from {path}")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_allowed(self, device: Optional[int]) -> bool:
        if not self.enabled or device is None:
            return True
        return device in self._devices

    def first_path(self, device: int) -> Optional[str]:
        return self._devices.get(device)

    def __len__(self) -> int:
        return len(self._devices)


class HardlinkTracker:
    """Multiply-linked files that have already been counted."""

    def __init__(self):
        self._claims: Dict[Hashable, str] = {}
        self._lock = Lock()

    def try_claim(self, key: Hashable, path: str) -> bool:
        """Atomically claim ``key`` for ``path``.

        Returns:
            True if another path already holds the claim (skip this one),
            False if this call made the claim (count this one).
        """
        with self._lock:
            if key in self._claims:
                return True
            self._claims[key] = path
            return False

    def owner(self, key: Hashable) -> Optional[str]:
        with self._lock:
            return self._claims.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._claims)
