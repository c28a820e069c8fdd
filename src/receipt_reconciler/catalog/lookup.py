#!/usr/bin/env python3
"""
Catalog Lookup Adapter

The reconciliation engine never talks to catalog storage directly. It consumes
the narrow ``CatalogLookup`` interface below, which any backend (database,
HTTP API, in-memory fixture) can implement.

``InMemoryCatalog`` is the file-backed implementation used by the CLI and tests.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol, runtime_checkable

from ..core.models import CatalogProduct

logger = logging.getLogger(__name__)


@runtime_checkable
class CatalogLookup(Protocol):
    """Read-only access to the user's product catalog."""

    def lookup_product_by_barcode(self, code: str) -> CatalogProduct | None:
        """Exact barcode match; None when no product carries this code."""
        ...

    def lookup_product_by_id(self, product_id: str) -> CatalogProduct | None:
        """Product by id; None when unknown."""
        ...

    def fetch_price_history(self, product_id: str) -> list[float]:
        """Historical unit prices of a product, empty when there are none."""
        ...


class InMemoryCatalog:
    """
    Catalog held in memory.

    Barcode lookups are exact matches against every code a product carries.
    When two products share a code, the first one registered wins and the
    clash is logged.
    """

    def __init__(
        self,
        products: Iterable[CatalogProduct] = (),
        price_history: Mapping[str, Sequence[float]] | None = None,
    ):
        self._products: dict[str, CatalogProduct] = {}
        self._by_barcode: dict[str, CatalogProduct] = {}
        self._price_history: dict[str, list[float]] = {}

        for product in products:
            self.add_product(product)

        for product_id, prices in (price_history or {}).items():
            self._price_history[product_id] = [float(price) for price in prices]

    def add_product(self, product: CatalogProduct) -> None:
        """Register a product and index its barcodes."""
        if product.id in self._products:
            logger.warning("Duplicate product id %s ignored (%s)", product.id, product.name)
            return

        self._products[product.id] = product

        for code in product.all_barcodes:
            existing = self._by_barcode.get(code)
            if existing is not None:
                logger.warning(
                    "Barcode %s of %s already used by %s (%s)",
                    code,
                    product.name,
                    existing.id,
                    existing.name,
                )
                continue
            self._by_barcode[code] = product

    def add_price(self, product_id: str, price: float) -> None:
        """Append one historical unit price for a product."""
        self._price_history.setdefault(product_id, []).append(float(price))

    def lookup_product_by_barcode(self, code: str) -> CatalogProduct | None:
        """Exact barcode match."""
        if not code:
            return None
        return self._by_barcode.get(code)

    def lookup_product_by_id(self, product_id: str) -> CatalogProduct | None:
        """Product by id."""
        return self._products.get(product_id)

    def fetch_price_history(self, product_id: str) -> list[float]:
        """Copy of the product's price history."""
        return list(self._price_history.get(product_id, []))

    @property
    def products(self) -> list[CatalogProduct]:
        """All products in registration order."""
        return list(self._products.values())

    def __len__(self) -> int:
        return len(self._products)
