import logging
from datetime import datetime, timezone
from typing import List

from flask import Blueprint, current_app, jsonify, request

from ..cache import NO_CACHE
from ..errors import CatalogError, ConfigurationMissing, Unauthorized
from ..merge import degrade, lookup_stock, merge, overlay
from ..models import ContentProduct, EnrichedProduct

logger = logging.getLogger(__name__)

bp = Blueprint("catalog", __name__)


def _services():
    return current_app.extensions["catalog_sync"]


def _error(message: str, status: int = 500, key: str = "error"):
    return jsonify({key: message}), status, {"Cache-Control": NO_CACHE}


def _with_inventory(catalog: List[ContentProduct]) -> List[EnrichedProduct]:
    """Join against live inventory; a failing spreadsheet degrades to placeholders."""
    try:
        inventory = _services().inventory.fetch_inventory()
    except CatalogError as e:
        logger.error("Google Sheets error, serving placeholders: %s", e)
        return degrade(catalog)
    logger.info("Found %d products from Google Sheets", len(inventory))
    return merge(catalog, inventory)


# --- routes ---

@bp.get("/health")
def health():
    return {"ok": True, "cache": _services().cache.stats()}, 200


@bp.get("/products")
def products():
    """Uncached join of content and inventory."""
    try:
        catalog = _services().content.fetch_catalog()
    except CatalogError:
        logger.exception("Failed to fetch Contentful data")
        return _error("Failed to fetch products")

    enriched = _with_inventory(catalog)
    return jsonify([p.to_response() for p in enriched]), 200, {"Cache-Control": NO_CACHE}


@bp.get("/products/basic")
def products_basic():
    """Content only, cached for the content tier's TTL."""
    tier = _services().cache.content
    try:
        payload, _ = tier.get()
    except CatalogError:
        logger.exception("Failed to fetch basic products")
        return _error("Failed to fetch basic products")
    return jsonify(payload), 200, {"Cache-Control": tier.cache_control}


@bp.get("/products/stock")
def products_stock():
    """Stock and price keyed by normalized product name, cached for the inventory tier's TTL."""
    tier = _services().cache.inventory
    try:
        payload, _ = tier.get()
    except CatalogError:
        logger.exception("Failed to fetch stock data")
        return _error("Failed to fetch stock data")
    return jsonify(payload), 200, {"Cache-Control": tier.cache_control}


@bp.get("/products/<slug>")
def product_detail(slug: str):
    try:
        product = _services().content.fetch_product(slug)
    except CatalogError:
        logger.exception("Failed to fetch product %s", slug)
        return _error("Failed to fetch product")
    if product is None:
        return _error("Product not found", 404)

    try:
        inventory = _services().inventory.fetch_inventory()
    except CatalogError as e:
        logger.error("Google Sheets error, serving placeholders: %s", e)
        enriched = degrade([product])[0]
    else:
        enriched = overlay(product, lookup_stock(product.product_name, inventory))
    return jsonify(enriched.to_response()), 200, {"Cache-Control": NO_CACHE}



@bp.route("/revalidate", methods=["GET", "POST"])
def revalidate():
    """Discard page renders. POST takes JSON {secret, path}; GET takes the same as query params."""
    if request.method == "POST":
        body = request.get_json(force=True, silent=True)
        if not isinstance(body, dict):
            body = {}
    else:
        body = request.args
    secret = body.get("secret")
    path = body.get("path")
    if not isinstance(path, str):
        path = None

    try:
        revalidated = _services().revalidator.revalidate(secret, path)
    except Unauthorized:
        return _error("Invalid secret", 401, key="message")
    except ConfigurationMissing as e:
        logger.error("Revalidation unavailable: %s", e)
        return _error("Error revalidating cache", 500, key="message")

    return {
        "message": "Cache revalidated successfully",
        "revalidated": revalidated,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }, 200


@bp.get("/sheets/diagnostics")
def sheets_diagnostics():
    """Raw inventory read for checking the spreadsheet connection."""
    try:
        records = _services().inventory.fetch_inventory()
    except CatalogError as e:
        logger.exception("Diagnostics: error fetching data from Google Sheets")
        return jsonify({"success": False, "error": str(e)}), 500, {"Cache-Control": NO_CACHE}
    return jsonify({"success": True, "data": [r.to_response() for r in records]}), 200
