"""
Revalidation trigger for the page-render cache.

Called by the content store's publish webhook (or by hand) with a shared
secret. It only touches the render cache; the in-process ResponseCache tiers
keep their own TTLs.
"""
import hmac
import logging
import threading
import time
from typing import Dict, List, Optional

from .errors import Unauthorized
from .settings import Settings, settings

logger = logging.getLogger(__name__)

DEFAULT_PATHS = ("/products", "/catalog", "/")


class RenderCache:
    """Invalidation timestamps per rendered path. Renderers compare against their own render time."""

    def __init__(self):
        self._invalidated: Dict[str, float] = {}
        self._lock = threading.Lock()

    def invalidate(self, path: str) -> None:
        with self._lock:
            self._invalidated[path] = time.time()

    def invalidated_at(self, path: str) -> Optional[float]:
        with self._lock:
            return self._invalidated.get(path)

    def is_stale(self, path: str, rendered_at: float) -> bool:
        ts = self.invalidated_at(path)
        return ts is not None and ts >= rendered_at

    def paths(self) -> List[str]:
        with self._lock:
            return list(self._invalidated)


class Revalidator:
    def __init__(self, render_cache: RenderCache, cfg: Settings = settings):
        self.render_cache = render_cache
        self.cfg = cfg

    def revalidate(self, provided_secret: Optional[str], target_path: Optional[str] = None) -> List[str]:
        """
        Invalidate the default paths plus target_path.
        Raises Unauthorized on a secret mismatch (nothing is invalidated),
        ConfigurationMissing if no secret is configured.
        """
        expected = self.cfg.revalidate_secret()
        if not isinstance(provided_secret, str) or not hmac.compare_digest(
            provided_secret.encode("utf-8"), expected.encode("utf-8")
        ):
            logger.warning("Revalidation rejected: invalid secret")
            raise Unauthorized("Invalid secret")

        paths = list(DEFAULT_PATHS)
        if target_path and target_path not in paths:
            paths.append(target_path)

        for path in paths:
            self.render_cache.invalidate(path)
        logger.info("Revalidated paths: %s", ", ".join(paths))
        return paths
