import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask

from ..cache import ResponseCache
from ..content import ContentSource
from ..inventory import InventorySource
from ..merge import basic, stock_lookup
from ..revalidate import RenderCache, Revalidator
from ..settings import Settings, settings

EXTENSION_KEY = "catalog_sync"


@dataclass
class Services:
    content: ContentSource
    inventory: InventorySource
    cache: ResponseCache
    render_cache: RenderCache
    revalidator: Revalidator


def create_app(
    content_source: Optional[ContentSource] = None,
    inventory_source: Optional[InventorySource] = None,
    cfg: Settings = settings,
    clock: Callable[[], float] = time.monotonic,
) -> Flask:
    # .env for local runs
    load_dotenv()

    app = Flask(__name__)
    logging.basicConfig(level=logging.INFO)

    content_source = content_source or ContentSource(cfg)
    inventory_source = inventory_source or InventorySource(cfg)

    def load_basic_products():
        return [p.to_response() for p in basic(content_source.fetch_catalog())]

    def load_stock():
        lookup = stock_lookup(inventory_source.fetch_inventory())
        return {name: entry.to_response() for name, entry in lookup.items()}

    cache = ResponseCache(
        content_loader=load_basic_products,
        inventory_loader=load_stock,
        serve_stale=cfg.CACHE_SERVE_STALE,
        clock=clock,
    )
    render_cache = RenderCache()
    app.extensions[EXTENSION_KEY] = Services(
        content=content_source,
        inventory=inventory_source,
        cache=cache,
        render_cache=render_cache,
        revalidator=Revalidator(render_cache, cfg),
    )

    from . import routes
    app.register_blueprint(routes.bp)

    return app
