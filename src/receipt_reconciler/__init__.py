"""
Receipt Reconciler - Fiscal Receipt to Product Catalog Matching

Associates the line items of a parsed fiscal receipt with products in a
shopping catalog, tolerating OCR noise, missing barcodes and ambiguous names,
and lets the user confirm or override every decision before anything is saved.

Domain Packages:
- core: Data models, amount handling, configuration, errors
- catalog: Catalog lookup interface and file-backed loading
- matching: Normalization, scoring, reconciliation session, confirmation
- cli: Command-line interface

Example Usage:
    from receipt_reconciler.catalog import load_catalog, load_receipt_items
    from receipt_reconciler.matching import ReconciliationSession, confirm

    catalog = load_catalog("products.json", "price_history.csv")
    session = ReconciliationSession.from_receipt(load_receipt_items("receipt.json"), catalog)
    session.bulk_barcode_associate(["7891000100103"])
    purchase = confirm(session)
"""

__version__ = "0.1.0"
__author__ = "Receipt Reconciler Contributors"

from .core.errors import CatalogLoadError, EmptyConfirmationError, ReconciliationError
from .core.models import CatalogProduct, ConfirmedPurchase, ParsedReceiptItem, ReceiptLine
from .matching import ReconciliationSession, confirm

__all__ = [
    # Errors
    "CatalogLoadError",
    "EmptyConfirmationError",
    "ReconciliationError",
    # Models
    "CatalogProduct",
    "ConfirmedPurchase",
    "ParsedReceiptItem",
    "ReceiptLine",
    # Engine
    "ReconciliationSession",
    "confirm",
]
