from __future__ import annotations

import json
import threading
import time
from typing import Any, Dict, Iterable, Iterator, Optional

from core.models import TrackedEntity
from log import get_logger

log = get_logger(__name__)

DEFAULT_NAME = "Unnamed"
DEFAULT_ICON = "🟣"


class WatchListUnavailable(RuntimeError):
    """The tracked-wallet list could not be loaded; nothing can be filtered."""


def _first_str(record: Dict[str, Any], *keys: str) -> str:
    for k in keys:
        v = record.get(k)
        if isinstance(v, str) and v:
            return v
    return ""


def entity_from_record(record: Dict[str, Any]) -> Optional[TrackedEntity]:
    address = _first_str(record, "trackedWalletAddress", "address", "wallet")
    if not address:
        return None
    return TrackedEntity(
        address=address,
        display_name=_first_str(record, "name", "displayName", "display_name") or DEFAULT_NAME,
        icon=_first_str(record, "emoji", "icon") or DEFAULT_ICON,
    )


class WatchList:
    """
    Address -> TrackedEntity lookup. Addresses are compared exactly, no case
    or whitespace folding. On duplicate addresses the last record wins.
    """

    def __init__(self, entities: Iterable[TrackedEntity] = ()):
        self._by_address: Dict[str, TrackedEntity] = {}
        for e in entities:
            self._by_address[e.address] = e
        self._addresses = frozenset(self._by_address)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "WatchList":
        entities = []
        for r in records:
            if not isinstance(r, dict):
                continue
            e = entity_from_record(r)
            if e:
                entities.append(e)
        return cls(entities)

    def resolve(self, address: str) -> Optional[TrackedEntity]:
        return self._by_address.get(address)

    def __contains__(self, address: object) -> bool:
        return address in self._addresses

    def __len__(self) -> int:
        return len(self._by_address)

    def __iter__(self) -> Iterator[TrackedEntity]:
        return iter(self._by_address.values())


def load_watchlist(path: str) -> WatchList:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise WatchListUnavailable(f"cannot read watch list {path}: {e}") from e

    if not isinstance(data, list):
        raise WatchListUnavailable(f"watch list {path} must be a JSON array")

    wl = WatchList.from_records(data)
    log.info("watchlist_loaded", path=path, wallets=len(wl))
    return wl


class WatchListProvider:
    """
    Loads the list once and keeps it. With ttl_seconds > 0 the file is
    re-read after the TTL expires.
    """

    def __init__(self, path: str, ttl_seconds: float = 0.0, clock=time.time):
        self.path = path
        self.ttl = float(ttl_seconds)
        self.clock = clock
        self._lock = threading.Lock()
        self._cached: Optional[WatchList] = None
        self._loaded_at = 0.0

    def get(self) -> WatchList:
        with self._lock:
            now = self.clock()
            stale = self.ttl > 0 and (now - self._loaded_at) > self.ttl
            if self._cached is None or stale:
                self._cached = load_watchlist(self.path)
                self._loaded_at = now
            return self._cached
