#!/usr/bin/env python3
"""
Catalog and Receipt Data Loader

Utilities for loading exported catalog data and parsed receipts from disk.

Functions:
- load_catalog: Load products (JSON) and price history (CSV) into an InMemoryCatalog
- load_price_history: Load the price-history CSV as {product_id: [prices]}
- load_receipt_items: Load parsed receipt items (JSON) as domain models
"""

import logging
from pathlib import Path

import pandas as pd

from ..core.config import get_config
from ..core.currency import coerce_amount
from ..core.errors import CatalogLoadError
from ..core.json_utils import read_json_records
from ..core.models import CatalogProduct, ParsedReceiptItem
from .lookup import InMemoryCatalog

logger = logging.getLogger(__name__)

PRICE_HISTORY_COLUMNS = ("product_id", "price")


def load_price_history(price_history_file: str | Path) -> dict[str, list[float]]:
    """
    Load historical unit prices from a CSV export.

    The file needs ``product_id`` and ``price`` columns; anything else (date,
    market, ...) is ignored. Rows with a blank id or a non-positive price are
    skipped.

    Args:
        price_history_file: Path to the CSV file

    Returns:
        Dictionary mapping product ids to their prices, in file order

    Raises:
        CatalogLoadError: If the file cannot be parsed or lacks required columns
    """
    price_history_file = Path(price_history_file)

    try:
        prices_df = pd.read_csv(price_history_file, dtype={"product_id": str})
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CatalogLoadError(f"Failed to read price history {price_history_file}: {e}") from e

    missing = [column for column in PRICE_HISTORY_COLUMNS if column not in prices_df.columns]
    if missing:
        raise CatalogLoadError(f"Price history {price_history_file} is missing columns: {', '.join(missing)}")

    history: dict[str, list[float]] = {}
    skipped = 0

    for _, row in prices_df.iterrows():
        product_id = row["product_id"]
        price = coerce_amount(row["price"])

        if pd.isna(product_id) or not str(product_id).strip() or price <= 0:
            skipped += 1
            continue

        history.setdefault(str(product_id).strip(), []).append(price)

    if skipped:
        logger.warning("Skipped %d malformed price rows in %s", skipped, price_history_file)

    logger.info("Loaded price history for %d products from %s", len(history), price_history_file)
    return history


def load_catalog(
    catalog_file: str | Path | None = None,
    price_history_file: str | Path | None = None,
) -> InMemoryCatalog:
    """
    Load the product catalog and its price history.

    Args:
        catalog_file: JSON list of products (or {"products": [...]}).
                      If None, uses config.catalog.catalog_file
        price_history_file: CSV with product_id,price rows.
                            If None, uses config.catalog.price_history_file.
                            A missing file simply means no history.

    Returns:
        InMemoryCatalog ready for lookups

    Raises:
        CatalogLoadError: If the catalog file is missing or malformed

    Example:
        >>> catalog = load_catalog("data/catalog/products.json")
        >>> catalog.lookup_product_by_barcode("7891000100103")
    """
    if catalog_file is None or price_history_file is None:
        config = get_config()
        catalog_file = catalog_file if catalog_file is not None else config.catalog.catalog_file
        if price_history_file is None:
            price_history_file = config.catalog.price_history_file

    catalog_file = Path(catalog_file)
    if not catalog_file.exists():
        raise CatalogLoadError(f"Catalog file not found: {catalog_file}")

    try:
        records = read_json_records(catalog_file, "products")
    except ValueError as e:
        raise CatalogLoadError(f"Malformed catalog {catalog_file}: {e}") from e

    products: list[CatalogProduct] = []
    for record in records:
        try:
            products.append(CatalogProduct.from_dict(record))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping catalog record %s: %s", record.get("name", "unknown"), e)

    history: dict[str, list[float]] = {}
    price_history_path = Path(price_history_file)
    if price_history_path.exists():
        history = load_price_history(price_history_path)
    else:
        logger.info("No price history at %s; scoring without history", price_history_path)

    catalog = InMemoryCatalog(products, history)
    logger.info("Loaded %d catalog products from %s", len(catalog), catalog_file)
    return catalog


def load_receipt_items(receipt_file: str | Path) -> list[ParsedReceiptItem]:
    """
    Load parsed receipt items.

    Args:
        receipt_file: JSON list of items (or {"items": [...]}) in the parser's
                      output shape: name, quantity, unit, unitPrice, totalPrice,
                      discount?, code?

    Returns:
        List of ParsedReceiptItem in receipt order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document holds no item list
    """
    receipt_file = Path(receipt_file)
    if not receipt_file.exists():
        raise FileNotFoundError(f"Receipt file not found: {receipt_file}")

    items = [ParsedReceiptItem.from_dict(record) for record in read_json_records(receipt_file, "items")]
    logger.info("Loaded %d receipt items from %s", len(items), receipt_file)
    return items
