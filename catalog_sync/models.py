"""
Pydantic v2 models for catalog records.
JSON keys are camelCase so the catalog UI reads the same shape it always has.
"""
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .errors import ParseAnomaly

logger = logging.getLogger(__name__)

OUT_OF_STOCK = "Out of Stock"
DEFAULT_QTY_INCREMENT = 5

Stock = Union[int, str]  # count or OUT_OF_STOCK / a placeholder label


class CatalogModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_response(self) -> dict:
        """Serialize for an HTTP response (camelCase, unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentProduct(CatalogModel):
    """
    Canonical catalog entry from the content store.

    Only slug and productName feed the join; everything else is passed
    through as the content store sent it.
    """
    model_config = ConfigDict(extra="allow")

    slug: str
    product_name: Optional[str] = None
    product_category: Optional[Any] = None
    switch_type: Optional[Any] = None  # single value or multi-select list
    keyboard_profile: Optional[Any] = None
    budget: Optional[Any] = None
    main_image: Optional[Any] = None  # resolved asset or raw link
    description: Optional[Any] = None  # rich-text document
    is_on_sale: Optional[Any] = None
    is_best_seller: Optional[Any] = None

    @field_validator("product_name", mode="before")
    @classmethod
    def _name_or_none(cls, value):
        if value is None or isinstance(value, str):
            return value
        logger.debug("%s, treating as unnamed", ParseAnomaly(f"non-text productName {value!r}"))
        return None


class InventoryRecord(CatalogModel):
    """One spreadsheet row of stock data. Not a stable key across reads."""
    product_name: str
    stock: Stock = 0
    price: float = 0.0
    category: str
    status: Optional[str] = None
    profile: Optional[str] = None
    qty_increment: int = DEFAULT_QTY_INCREMENT


class EnrichedProduct(ContentProduct):
    """Content entry with stock/price overlaid from the inventory."""
    stock: Stock
    price: Union[float, str]
    is_in_stock: bool
    has_sheet_data: bool
    sheets_category: Optional[str] = None
    status: Optional[str] = None
    is_loading_details: Optional[bool] = None


class StockEntry(CatalogModel):
    """Value of the stock-only mapping, keyed by normalized product name."""
    stock: Stock
    price: float
    is_in_stock: bool
