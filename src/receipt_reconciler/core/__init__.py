"""
Core Utilities Package

Shared data models, amount handling and configuration used by the catalog
adapter, the matching engine and the CLI.
"""

from .config import (
    CatalogConfig,
    Config,
    Environment,
    OutputConfig,
    get_config,
    reload_config,
)
from .currency import (
    amounts_match,
    coerce_amount,
    format_amount,
)
from .errors import (
    CatalogLoadError,
    EmptyConfirmationError,
    ReconciliationError,
)
from .models import (
    CatalogProduct,
    ConfirmedItem,
    ConfirmedPurchase,
    ParsedReceiptItem,
    ReceiptLine,
    ReceiptTotals,
)

__all__ = [
    # Configuration
    "CatalogConfig",
    "Config",
    "Environment",
    "OutputConfig",
    "get_config",
    "reload_config",
    # Amounts
    "amounts_match",
    "coerce_amount",
    "format_amount",
    # Errors
    "CatalogLoadError",
    "EmptyConfirmationError",
    "ReconciliationError",
    # Data models
    "CatalogProduct",
    "ConfirmedItem",
    "ConfirmedPurchase",
    "ParsedReceiptItem",
    "ReceiptLine",
    "ReceiptTotals",
]
