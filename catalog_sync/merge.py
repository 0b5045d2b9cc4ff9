"""
Name-fuzzy join between content entries and inventory rows.

The two sources never share a stable identifier, so a content entry is paired
with the first inventory row whose trimmed, case-folded name is equal to it,
contains it, or is contained by it. Both sizes are small (tens to low hundreds),
so the nested scan is fine.
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic.alias_generators import to_camel

from .models import ContentProduct, EnrichedProduct, InventoryRecord, Stock, StockEntry
from .utils import is_in_stock, normalize_name

logger = logging.getLogger(__name__)

CONTACT_FOR_AVAILABILITY = "Contact for availability"
LOADING_STOCK = "Loading..."
LOADING_PRICE = "..."


def names_match(catalog_name: Optional[str], inventory_name: Optional[str]) -> bool:
    """Equality or substring containment in either direction, after trim + case-fold."""
    a = normalize_name(catalog_name)
    b = normalize_name(inventory_name)
    # "" is a substring of everything
    if not a or not b:
        return False
    return a == b or b in a or a in b


def find_match(product: ContentProduct, inventory: Sequence[InventoryRecord]) -> Optional[InventoryRecord]:
    """First inventory row (in sheet scan order) matching the product name."""
    for record in inventory:
        if names_match(product.product_name, record.product_name):
            return record
    return None


def lookup_stock(product_name: Optional[str], inventory: Iterable[InventoryRecord]) -> Optional[InventoryRecord]:
    """
    Inventory row for a single product: an exact (normalized) name match anywhere
    in the sheets wins over an earlier substring match.
    """
    wanted = normalize_name(product_name)
    if not wanted:
        return None
    inventory = list(inventory)
    for record in inventory:
        if normalize_name(record.product_name) == wanted:
            return record
    for record in inventory:
        if names_match(wanted, record.product_name):
            return record
    return None


# computed by the join; same-named content fields never leak through
_COMPUTED_DEFAULTS = {"sheets_category": None, "status": None, "is_loading_details": None}


def _enrich(product: ContentProduct, **computed) -> EnrichedProduct:
    data = product.model_dump(by_alias=True)
    data.update({to_camel(name): value for name, value in {**_COMPUTED_DEFAULTS, **computed}.items()})
    return EnrichedProduct.model_validate(data)


def overlay(
    product: ContentProduct,
    record: Optional[InventoryRecord],
    placeholder_stock: Stock = 0,
) -> EnrichedProduct:
    """Stock and price from one inventory row, or placeholders when there is none."""
    if record is None:
        return _enrich(product, stock=placeholder_stock, price=0.0, is_in_stock=False, has_sheet_data=False)
    return _enrich(
        product,
        stock=record.stock,
        price=record.price,
        is_in_stock=is_in_stock(record.stock),
        has_sheet_data=True,
        sheets_category=record.category,
        status=record.status,
    )


def merge(
    catalog: Iterable[ContentProduct],
    inventory: Sequence[InventoryRecord],
    placeholder_stock: Stock = 0,
) -> List[EnrichedProduct]:
    """Overlay stock and price on every catalog entry. Unmatched entries get placeholders."""
    enriched = []
    matched = 0
    for product in catalog:
        record = find_match(product, inventory)
        if record is not None:
            matched += 1
        enriched.append(overlay(product, record, placeholder_stock))
    logger.info("Merged %d products, %d matched inventory rows", len(enriched), matched)
    return enriched



def degrade(catalog: Iterable[ContentProduct], stock: Stock = CONTACT_FOR_AVAILABILITY) -> List[EnrichedProduct]:
    """Catalog without inventory: used when the spreadsheet is unavailable."""
    return [
        _enrich(product, stock=stock, price=0.0, is_in_stock=False, has_sheet_data=False)
        for product in catalog
    ]


def basic(catalog: Iterable[ContentProduct]) -> List[EnrichedProduct]:
    """Content-only products with loading placeholders; the UI fills stock in later."""
    return [
        _enrich(
            product,
            stock=LOADING_STOCK,
            price=LOADING_PRICE,
            is_in_stock=False,
            has_sheet_data=False,
            is_loading_details=True,
        )
        for product in catalog
    ]


def stock_lookup(inventory: Iterable[InventoryRecord]) -> Dict[str, StockEntry]:
    """Stock-only view keyed by normalized name. Later rows overwrite earlier ones with the same key."""
    lookup = {}
    for record in inventory:
        key = normalize_name(record.product_name)
        lookup[key] = StockEntry(stock=record.stock, price=record.price, is_in_stock=is_in_stock(record.stock))
    return lookup
