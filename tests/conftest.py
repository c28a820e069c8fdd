"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from receipt_reconciler.catalog.lookup import InMemoryCatalog
from receipt_reconciler.core.models import CatalogProduct, ParsedReceiptItem
from tests.fixtures.synthetic_data import (
    SYNTHETIC_PRICE_HISTORY,
    SYNTHETIC_PRODUCTS,
    SYNTHETIC_RECEIPT_ITEMS,
    save_synthetic_catalog,
    save_synthetic_receipt,
)


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for test files."""
    return tmp_path


@pytest.fixture
def sample_receipt_item() -> dict[str, Any]:
    """Sample parsed receipt item in the parser's output shape."""
    return {
        "name": "Refrigerante 2L",
        "quantity": 2,
        "unit": "un",
        "unitPrice": 7.00,
        "totalPrice": 12.00,
        "discount": 2.00,
        "code": "7891000100103",
    }


@pytest.fixture
def catalog_products() -> list[CatalogProduct]:
    """Synthetic catalog products."""
    return [CatalogProduct.from_dict(record) for record in SYNTHETIC_PRODUCTS]


@pytest.fixture
def catalog(catalog_products) -> InMemoryCatalog:
    """In-memory catalog with synthetic products and price history."""
    return InMemoryCatalog(catalog_products, SYNTHETIC_PRICE_HISTORY)


@pytest.fixture
def receipt_items() -> list[ParsedReceiptItem]:
    """Synthetic parsed receipt items."""
    return [ParsedReceiptItem.from_dict(record) for record in SYNTHETIC_RECEIPT_ITEMS]


@pytest.fixture
def catalog_files(temp_dir) -> tuple[Path, Path]:
    """Catalog JSON and price history CSV written to disk."""
    return save_synthetic_catalog(temp_dir / "catalog")


@pytest.fixture
def receipt_file(temp_dir) -> Path:
    """Parsed receipt JSON written to disk."""
    return save_synthetic_receipt(temp_dir / "receipt.json")


@pytest.fixture
def write_json_file(temp_dir):
    """Factory writing arbitrary JSON documents under the temp directory."""

    def _write(name: str, data: Any) -> Path:
        path = temp_dir / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real catalog data
    monkeypatch.setenv("RECONCILER_ENV", "test")
    monkeypatch.setenv("RECONCILER_DATA_DIR", str(tmp_path / "reconciler_data"))
    for name in ("RECONCILER_CATALOG_FILE", "RECONCILER_PRICE_HISTORY_FILE", "DEBUG", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    # Drop any configuration cached by an earlier test
    monkeypatch.setattr("receipt_reconciler.core.config._config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for amount coercion and formatting")
    config.addinivalue_line("markers", "matching: Tests for scoring and line association")
    config.addinivalue_line("markers", "catalog: Tests for catalog lookup and loading")
    config.addinivalue_line("markers", "cli: Tests for command-line commands")
