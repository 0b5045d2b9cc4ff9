"""
Two-tier response cache.

Each tier is a single slot holding the last successful payload for its whole
data set: content-only responses live 10 minutes, stock-only responses 2
minutes. A slot is replaced whole, never patched. Concurrent misses each call
the loader (no coalescing), last write wins.

With serve_stale on, an expired slot still inside its grace window is returned
immediately and one background thread per tier refreshes it.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_TTL = 600
CONTENT_STALE_GRACE = 120
INVENTORY_TTL = 120
INVENTORY_STALE_GRACE = 60

NO_CACHE = "no-cache"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    payload: T
    fetched_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) < self.ttl


class TierCache(Generic[T]):
    def __init__(
        self,
        name: str,
        ttl: float,
        loader: Callable[[], T],
        stale_grace: float = 0,
        serve_stale: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl = ttl
        self.loader = loader
        self.stale_grace = stale_grace
        self.serve_stale = serve_stale
        self.clock = clock
        self.hits = 0
        self.misses = 0
        self._entry: Optional[CacheEntry[T]] = None
        self._refresh_lock = threading.Lock()
        self._refreshing = False
        self._refresh_thread: Optional[threading.Thread] = None

    @property
    def cache_control(self) -> str:
        """Edge/CDN directive matching this tier's lifetime."""
        return f"public, s-maxage={int(self.ttl)}, stale-while-revalidate={int(self.stale_grace)}"

    def get(self) -> Tuple[T, bool]:
        """
        Return (payload, is_fresh).

        Loader errors propagate; an expired slot is never served as a fallback.
        is_fresh is False only when a stale payload is served inside the grace window.
        """
        now = self.clock()
        entry = self._entry
        if entry is not None and entry.is_fresh(now):
            self.hits += 1
            logger.info("[%s] cache hit (age %.0fs)", self.name, entry.age(now))
            return entry.payload, True

        if self.serve_stale and entry is not None and entry.age(now) < self.ttl + self.stale_grace:
            self.hits += 1
            logger.info("[%s] serving stale payload (age %.0fs), refreshing", self.name, entry.age(now))
            self._refresh_in_background()
            return entry.payload, False

        self.misses += 1
        logger.info("[%s] cache miss, loading", self.name)
        return self._load(now), True

    def _load(self, started_at: float) -> T:
        payload = self.loader()
        # single reference assignment; readers see the old or the new entry
        self._entry = CacheEntry(payload=payload, fetched_at=started_at, ttl=self.ttl)
        return payload

    def _refresh_in_background(self) -> None:
        with self._refresh_lock:
            if self._refreshing:
                return
            self._refreshing = True
        self._refresh_thread = threading.Thread(
            target=self._background_refresh, name=f"cache-refresh-{self.name}", daemon=True
        )
        self._refresh_thread.start()

    def _background_refresh(self) -> None:
        try:
            self._load(self.clock())
            logger.info("[%s] background refresh done", self.name)
        except Exception:
            logger.exception("[%s] background refresh failed, keeping stale payload", self.name)
        finally:
            with self._refresh_lock:
                self._refreshing = False

    def invalidate(self) -> None:
        self._entry = None

    def stats(self) -> Dict[str, Any]:
        entry = self._entry
        now = self.clock()
        return {
            "ttl": self.ttl,
            "populated": entry is not None,
            "age": round(entry.age(now), 1) if entry else None,
            "fresh": entry.is_fresh(now) if entry else False,
            "hits": self.hits,
            "misses": self.misses,
        }


class ResponseCache:
    """
    Process-wide cache service. Built once by the app factory and shared by the
    request handlers through app.extensions.
    """

    def __init__(
        self,
        content_loader: Callable[[], Any],
        inventory_loader: Callable[[], Any],
        serve_stale: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.content = TierCache(
            "content", CONTENT_TTL, content_loader, CONTENT_STALE_GRACE, serve_stale, clock
        )
        self.inventory = TierCache(
            "inventory", INVENTORY_TTL, inventory_loader, INVENTORY_STALE_GRACE, serve_stale, clock
        )

    def invalidate(self) -> None:
        self.content.invalidate()
        self.inventory.invalidate()

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {"content": self.content.stats(), "inventory": self.inventory.stats()}
