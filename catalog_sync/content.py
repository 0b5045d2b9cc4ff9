"""
Content source: canonical product entries from the Contentful Content Delivery API.

No transformation beyond extracting each entry's field payload; linked assets
are resolved from the response includes the way the Contentful SDKs do it.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .errors import RetryExhaustedError, UpstreamUnavailable
from .models import ContentProduct
from .settings import Settings, settings

logger = logging.getLogger(__name__)

CDA_BASE = "https://cdn.contentful.com"
PAGE_LIMIT = 1000


class TransientResponse(UpstreamUnavailable):
    """Rate limited or server-side error; worth another attempt."""
    pass


def _link_key(value: Any) -> Optional[tuple]:
    if not isinstance(value, dict):
        return None
    sys = value.get("sys")
    if not isinstance(sys, dict) or sys.get("type") != "Link":
        return None
    return sys.get("linkType"), sys.get("id")


def resolve_links(value: Any, includes: Dict[tuple, Dict]) -> Any:
    """Replace Link objects with the included Asset/Entry. Unresolvable links are kept as-is."""
    key = _link_key(value)
    if key is not None:
        return includes.get(key, value)
    if isinstance(value, list):
        return [resolve_links(v, includes) for v in value]
    if isinstance(value, dict):
        return {k: resolve_links(v, includes) for k, v in value.items()}
    return value


def _index_includes(payload: Dict) -> Dict[tuple, Dict]:
    index = {}
    for link_type, items in (payload.get("includes") or {}).items():
        for item in items or []:
            item_id = (item.get("sys") or {}).get("id")
            if item_id:
                index[(link_type, item_id)] = item
    return index


class ContentSource:
    """Reads product entries from Contentful."""

    def __init__(
        self,
        cfg: Settings = settings,
        session: Optional[requests.Session] = None,
        tries: int = 3,
        retry_delay: float = 0.5,
    ):
        self.cfg = cfg
        self.session = session or requests.Session()
        self.tries = tries
        self.retry_delay = retry_delay

    @property
    def entries_url(self) -> str:
        return (
            f"{CDA_BASE}/spaces/{self.cfg.CONTENTFUL_SPACE_ID}"
            f"/environments/{self.cfg.CONTENTFUL_ENVIRONMENT}/entries"
        )

    def _get_entries(self, params: Dict[str, Any]) -> Dict:
        headers = {"Authorization": f"Bearer {self.cfg.CONTENTFUL_ACCESS_TOKEN}"}
        resp = self.session.get(
            self.entries_url, headers=headers, params=params, timeout=self.cfg.CONTENTFUL_TIMEOUT
        )
        if resp.status_code == 429 or resp.status_code >= 500:
            raise TransientResponse(f"Contentful returned {resp.status_code}")
        if resp.status_code >= 400:
            raise UpstreamUnavailable(f"Contentful returned {resp.status_code}: {resp.text[:200]}")
        return resp.json()

    def _get_with_backoff(self, params: Dict[str, Any]) -> Dict:
        """Retry connection errors, timeouts, 429 and 5xx with exponential backoff."""
        delay = self.retry_delay
        for attempt in range(1, self.tries + 1):
            try:
                return self._get_entries(params)
            except (requests.ConnectionError, requests.Timeout, TransientResponse) as e:
                if attempt >= self.tries:
                    raise RetryExhaustedError(f"Contentful failed after {self.tries} tries: {e}") from e
                logger.warning("Contentful attempt %d failed (%s), retrying in %.1fs", attempt, e, delay)
                time.sleep(delay)
                delay *= 2
        raise RetryExhaustedError("Contentful was never tried")

    def _query(self, **filters) -> List[ContentProduct]:
        self.cfg.validate_content()
        params = {"content_type": self.cfg.CONTENTFUL_CONTENT_TYPE, "limit": PAGE_LIMIT, "include": 1}
        params.update(filters)

        try:
            payload = self._get_with_backoff(params)
        except requests.RequestException as e:
            raise UpstreamUnavailable(f"Contentful request failed: {e}") from e
        except ValueError as e:
            # body was not JSON
            raise UpstreamUnavailable(f"Contentful returned an unreadable body: {e}") from e

        includes = _index_includes(payload)
        products: List[ContentProduct] = []
        seen = set()
        for item in payload.get("items") or []:
            fields = resolve_links(item.get("fields") or {}, includes)
            try:
                product = ContentProduct.model_validate(fields)
            except ValidationError as e:
                entry_id = (item.get("sys") or {}).get("id")
                logger.warning("Skipping content entry %s: %s", entry_id, e.errors()[0]["msg"])
                continue
            if product.slug in seen:
                logger.warning("Duplicate slug %r in content store, keeping the first entry", product.slug)
                continue
            seen.add(product.slug)
            products.append(product)
        return products

    def fetch_catalog(self) -> List[ContentProduct]:
        """All product entries."""
        products = self._query()
        logger.info("Found %d Contentful products", len(products))
        return products

    def fetch_product(self, slug: str) -> Optional[ContentProduct]:
        """Single entry by slug equality, or None."""
        products = self._query(**{"fields.slug": slug, "limit": 1})
        return products[0] if products else None
