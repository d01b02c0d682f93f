"""
Process-local TTL cache with single-flight population.

Each call site owns one ``SingleFlightCache``. A read returns the fresh value
when there is one; otherwise exactly one caller runs ``populate()`` for the key
while every concurrent caller for that key waits on the same result. A failed
population never evicts anything: waiters get the last good value, or the
cache's default when nothing was ever fetched.
"""

import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Hashable, NamedTuple, Optional

from cachetools import TTLCache


class CacheResult(NamedTuple):
    value: Any
    outcome: str                     # "hit" | "miss" | "wait" | "stale" | "default"
    error: Optional[BaseException] = None
    computed_at: Optional[float] = None

    @property
    def failed(self):
        return self.outcome in ("stale", "default")


class SingleFlightCache:
    """TTL cache where concurrent misses for a key share one population."""

    def __init__(
        self,
        name: str,
        ttl: float,
        default_factory: Callable[[], Any] = list,
        maxsize: int = 64,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl = ttl
        self._default_factory = default_factory
        self._timer = timer
        # Fresh values only; cachetools drops them lazily once ttl has elapsed
        self._fresh = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        # key -> (value, computed_at), kept past expiry as the stale fallback
        self._last_good = {}
        self._in_flight = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, populate: Callable[[], Any]) -> Any:
        """Return the value for ``key``, populating it at most once per miss."""
        return self.lookup(key, populate).value

    def lookup(self, key: Hashable, populate: Callable[[], Any]) -> CacheResult:
        """Like ``get`` but also reports how the value was obtained."""
        with self._lock:
            try:
                value = self._fresh[key]
            except KeyError:
                pass
            else:
                return CacheResult(value, "hit", computed_at=self._last_good[key][1])

            pending = self._in_flight.get(key)
            leader = pending is None
            if leader:
                pending = Future()
                self._in_flight[key] = pending

        if not leader:
            result = pending.result()
            if result.outcome == "miss":
                return result._replace(outcome="wait")
            return result

        try:
            value = populate()
        except Exception as e:
            with self._lock:
                previous = self._last_good.get(key)
                del self._in_flight[key]
            if previous is not None:
                result = CacheResult(previous[0], "stale", e, previous[1])
            else:
                result = CacheResult(self._default_factory(), "default", e)
            pending.set_result(result)
            return result
        except BaseException as e:
            # KeyboardInterrupt and friends: release waiters, then propagate
            with self._lock:
                del self._in_flight[key]
            pending.set_exception(e)
            raise

        computed_at = self._timer()
        with self._lock:
            self._fresh[key] = value
            self._last_good[key] = (value, computed_at)
            del self._in_flight[key]
        result = CacheResult(value, "miss", computed_at=computed_at)
        pending.set_result(result)
        return result

    def peek(self, key: Hashable) -> Any:
        """Last good value for ``key`` without triggering a population."""
        with self._lock:
            entry = self._last_good.get(key)
        return entry[0] if entry is not None else None

    def status(self) -> dict:
        """Per-key freshness summary for the status endpoint."""
        now = self._timer()
        with self._lock:
            keys = {}
            for key, (value, computed_at) in self._last_good.items():
                keys[str(key)] = {
                    "fresh": key in self._fresh,
                    "ageSeconds": round(now - computed_at, 1),
                    "size": len(value) if hasattr(value, "__len__") else None,
                    "populating": key in self._in_flight,
                }
            for key in self._in_flight:
                if key not in self._last_good:
                    keys[str(key)] = {"fresh": False, "ageSeconds": None, "size": None, "populating": True}
        return {"name": self.name, "ttlSeconds": self.ttl, "keys": keys}

    def expire(self, key: Optional[Hashable] = None) -> None:
        """Mark ``key`` (or every key) stale. The last good value stays as fallback."""
        with self._lock:
            if key is None:
                self._fresh.clear()
            else:
                self._fresh.pop(key, None)

    def clear(self) -> None:
        """Forget every stored value. In-flight populations still complete."""
        with self._lock:
            self._fresh.clear()
            self._last_good.clear()
