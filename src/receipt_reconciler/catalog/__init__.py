"""
Product Catalog Package

Boundary between the reconciliation engine and catalog storage.

Key Components:
- lookup: CatalogLookup interface and the InMemoryCatalog implementation
- loader: Catalog (JSON), price history (CSV) and receipt item loading
"""

from .loader import (
    load_catalog,
    load_price_history,
    load_receipt_items,
)
from .lookup import (
    CatalogLookup,
    InMemoryCatalog,
)

__all__ = [
    "CatalogLookup",
    "InMemoryCatalog",
    "load_catalog",
    "load_price_history",
    "load_receipt_items",
]
