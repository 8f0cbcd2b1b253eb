"""
services/report_cache.py

In-process TTL + LRU cache for generated reports.
- Keys come from make_cache_key(): canonical JSON (sorted keys, no whitespace, None dropped)
  encoded with urlsafe base64, so a key can be decoded back to the request that produced it.
- Expired entries are swept lazily on every write; the oldest entry is evicted past max_entries.
"""

import base64
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from config.settings import settings

logger = logging.getLogger(__name__)


def _drop_none(value):
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


def make_cache_key(filters: Dict[str, Any], pagination: Optional[Dict[str, Any]] = None,
                   sort: Optional[Dict[str, Any]] = None) -> str:
    payload = _drop_none({"filters": filters or {}, "pagination": pagination, "sort": sort})
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return base64.urlsafe_b64encode(canonical.encode("utf-8")).decode("ascii")


def decode_cache_key(key: str) -> Dict[str, Any]:
    return json.loads(base64.urlsafe_b64decode(key.encode("ascii")).decode("utf-8"))


class ReportCache:
    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 50,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries[key] = (now + self.ttl_seconds, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("report cache evicted %s", evicted[:16])

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]


# ✅ process-wide instance shared by the report service and attendance writes
report_cache = ReportCache(
    ttl_seconds=settings.REPORT_CACHE_TTL_SECONDS,
    max_entries=settings.REPORT_CACHE_MAX_ENTRIES,
)
