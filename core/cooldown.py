from __future__ import annotations

import threading
from typing import Dict


class CooldownGate:
    """
    Per-wallet alert cooldown. In-memory only: it resets on restart and is
    not shared between instances. Entries are never evicted.
    """

    def __init__(self, window_seconds: float):
        self.window = float(window_seconds)
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _suppressed(self, address: str, now: float) -> bool:
        if self.window <= 0:
            return False
        last = self._last.get(address)
        if last is None:
            return False
        return (now - last) < self.window

    def is_suppressed(self, address: str, now: float) -> bool:
        with self._lock:
            return self._suppressed(address, now)

    def record(self, address: str, now: float) -> None:
        with self._lock:
            self._last[address] = now

    def claim(self, address: str, now: float) -> bool:
        """Atomic check-and-record. False if another alert got there first."""
        with self._lock:
            if self._suppressed(address, now):
                return False
            self._last[address] = now
            return True

    def last_alert(self, address: str):
        with self._lock:
            return self._last.get(address)

    def __len__(self) -> int:
        return len(self._last)
