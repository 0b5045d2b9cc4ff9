"""
Utility functions for spreadsheet cell parsing and product-name normalization.

Malformed cells never raise: each parser recovers a ParseAnomaly with a default
so a single bad cell cannot take a catalog page down.
"""
import logging
import re
from typing import Any, Optional

from .errors import ParseAnomaly
from .models import DEFAULT_QTY_INCREMENT, OUT_OF_STOCK, Stock

logger = logging.getLogger(__name__)

HEADER_SENTINEL = "PRODUCT"

# Currency symbols, thousands separators and stray spaces
_PRICE_NOISE = re.compile(r"[₱$€£¥,\s]|PHP", re.IGNORECASE)
_NON_DIGITS = re.compile(r"\D")
_LEADING_INT = re.compile(r"[+-]?\d+")


def cell_text(value: Any) -> str:
    """Sheets returns strings, but ragged or typed rows can hand us None/numbers."""
    if value is None:
        return ""
    return str(value)


def is_product_row(name: Any) -> bool:
    """
    Product rows have a non-empty name that is not the header label
    and does not mention "link" (hyperlink-only rows).
    """
    text = cell_text(name)
    if not text.strip():
        return False
    if text == HEADER_SENTINEL:
        return False
    return "link" not in text.lower()


def _recover(kind: str, raw: Any, default, exc: Optional[Exception] = None):
    anomaly = ParseAnomaly(f"unparseable {kind} cell {raw!r}")
    if exc is not None:
        anomaly.__cause__ = exc
    logger.debug("%s, defaulting to %r", anomaly, default)
    return default


def parse_stock(value: Any) -> Stock:
    """
    Stock cell formats seen in the sheets:
    - "OOS" (any case)  -> OUT_OF_STOCK
    - "120pcs"          -> 120
    - "37", "12.5", "20 left" -> leading integer (37, 12, 20)
    Anything else defaults to 0.
    """
    text = cell_text(value).strip()
    if not text:
        return 0
    if text.lower() == "oos":
        return OUT_OF_STOCK
    if "pcs" in text.lower():
        digits = _NON_DIGITS.sub("", text)
        return int(digits) if digits else _recover("stock", value, 0)
    match = _LEADING_INT.match(text)
    if match is None:
        return _recover("stock", value, 0)
    return int(match.group())


def parse_price(value: Any) -> float:
    """Parse "₱1,250.50" style prices; 0.0 on failure or absence."""
    text = _PRICE_NOISE.sub("", cell_text(value))
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError as e:
        return _recover("price", value, 0.0, e)


def parse_qty_increment(value: Any) -> int:
    """Switches are sold in packs; the increment column must be a positive int."""
    text = cell_text(value).strip()
    if not text:
        return DEFAULT_QTY_INCREMENT
    try:
        parsed = int(text)
    except ValueError as e:
        return _recover("qty increment", value, DEFAULT_QTY_INCREMENT, e)
    return parsed if parsed > 0 else DEFAULT_QTY_INCREMENT


def optional_text(value: Any) -> Optional[str]:
    text = cell_text(value).strip()
    return text or None


def normalize_name(name: Optional[str]) -> str:
    """Trim + case-fold. No tokenizing."""
    return (name or "").strip().lower()


def is_in_stock(stock: Stock) -> bool:
    """True only for a positive count. The OOS sentinel and placeholder labels are never in stock."""
    if isinstance(stock, bool):
        return False
    if isinstance(stock, int):
        return stock > 0
    return False
