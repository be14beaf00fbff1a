from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Mapping, Optional


@dataclass(frozen=True)
class CacheConfig:
    ttl_seconds: float = 300.0
    max_items: int = 256


class TtlCache:
    """In-memory response cache; entries expire after `ttl_seconds`.

    Guarded by a lock: dashboards and reports read through it from a thread pool.
    """

    def __init__(self, cfg: CacheConfig | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._cfg = cfg or CacheConfig()
        self._clock = clock
        self._store: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if key in self._store:
                self._store.pop(key)
            self._store[key] = (self._clock() + self._cfg.ttl_seconds, value)
            if len(self._store) > self._cfg.max_items:
                self._store.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def build_request_key(tenant: str, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> tuple:
    """Deterministic key for a GET: tenant + endpoint + sorted params."""
    normalized = json.dumps(dict(params or {}), sort_keys=True, default=str)
    return (tenant, endpoint, normalized)
