#!/usr/bin/env python3
"""
Core Data Models for Receipt Reconciler

Data structures shared by the catalog adapter, the matching engine and the CLI:
- ParsedReceiptItem: one entry as handed over by the receipt parser
- CatalogProduct: read-only product from the user's catalog
- ReceiptLine: working copy of a receipt entry inside a reconciliation session
- ReceiptTotals, ConfirmedItem, ConfirmedPurchase: computed and exported results
"""

from dataclasses import dataclass
from typing import Any

from .currency import coerce_amount


def _first_present(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the value of the first key present in ``data`` and not None."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class ParsedReceiptItem:
    """
    One line item as extracted from a fiscal receipt.

    Note: ``discount`` is the line's *total* discount, not a per-unit value.
    """

    name: str
    quantity: float
    unit_price: float
    total_price: float = 0.0
    unit: str = "un"
    discount: float = 0.0
    code: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParsedReceiptItem":
        """
        Create from a parser record, accepting camelCase or snake_case keys.

        Malformed numbers become 0; a blank code becomes None. A missing
        quantity means a single unit. Without an explicit discount, the line
        discount is whatever the stated total falls short of price x quantity.
        """
        code = _first_present(data, "code", "barcode")
        code_str = str(code).strip() if code is not None else ""

        raw_quantity = data.get("quantity")
        quantity = 1.0 if raw_quantity is None or str(raw_quantity).strip() == "" else coerce_amount(raw_quantity)
        unit_price = coerce_amount(_first_present(data, "unitPrice", "unit_price"))
        total_price = coerce_amount(_first_present(data, "totalPrice", "total_price"))

        raw_discount = data.get("discount")
        if raw_discount is not None:
            discount = coerce_amount(raw_discount)
        elif total_price > 0:
            discount = round(max(quantity * unit_price - total_price, 0.0), 2)
        else:
            discount = 0.0

        return cls(
            name=str(data.get("name") or "").strip(),
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
            unit=str(data.get("unit") or "un"),
            discount=discount,
            code=code_str or None,
        )

    @property
    def unit_discount(self) -> float:
        """Per-unit discount, 0 when quantity gives nothing to divide by."""
        if self.quantity <= 0:
            return 0.0
        return self.discount / self.quantity


@dataclass(frozen=True)
class CatalogProduct:
    """A product from the user's catalog (read-only to the engine)."""

    id: str
    name: str
    barcode: str | None = None
    unit: str = "unidade"
    barcodes: tuple[str, ...] = ()

    @property
    def all_barcodes(self) -> tuple[str, ...]:
        """Primary barcode followed by any additional codes, without duplicates."""
        codes = [self.barcode] if self.barcode else []
        codes.extend(code for code in self.barcodes if code and code not in codes)
        return tuple(codes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogProduct":
        """Create from a catalog record."""
        product_id = data.get("id")
        if product_id is None or str(product_id).strip() == "":
            raise ValueError("Catalog product requires an 'id'")

        barcode = data.get("barcode")
        extra = data.get("barcodes") or []
        if isinstance(extra, str):
            extra = [extra]

        return cls(
            id=str(product_id),
            name=str(data.get("name") or ""),
            barcode=str(barcode).strip() if barcode else None,
            unit=str(data.get("unit") or "unidade"),
            barcodes=tuple(str(code).strip() for code in extra if code),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "unit": self.unit,
            "barcodes": list(self.barcodes),
        }


@dataclass
class ReceiptLine:
    """
    A receipt entry under review.

    ``original_label`` and ``barcode`` come from the source and are never edited.
    Association state lives only in ``product_id``/``product_name``; the
    ``is_associated`` flag is derived from them so it cannot drift.
    """

    original_label: str
    quantity: float = 1.0
    unit_price: float = 0.0
    unit_discount: float = 0.0
    barcode: str | None = None
    unit: str = "un"
    product_id: str = ""
    product_name: str = ""

    @classmethod
    def from_parsed_item(cls, item: ParsedReceiptItem) -> "ReceiptLine":
        """Seed a working line from a parser record."""
        return cls(
            original_label=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            unit_discount=item.unit_discount,
            barcode=item.code,
            unit=item.unit,
        )

    @property
    def is_associated(self) -> bool:
        """True iff the line is linked to a catalog product."""
        return self.product_id != ""

    @property
    def line_subtotal(self) -> float:
        """Amount paid for this line after its own discount."""
        return (self.unit_price - self.unit_discount) * self.quantity

    def associate(self, product: CatalogProduct) -> None:
        """Link this line to a catalog product."""
        self.product_id = product.id
        self.product_name = product.name

    def clear_association(self) -> None:
        """Remove any product link."""
        self.product_id = ""
        self.product_name = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display and debugging."""
        return {
            "original_label": self.original_label,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "unit_discount": self.unit_discount,
            "barcode": self.barcode,
            "unit": self.unit,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "is_associated": self.is_associated,
        }


@dataclass(frozen=True)
class ReceiptTotals:
    """Running totals of a reconciliation session."""

    line_subtotals: tuple[float, ...]
    subtotal: float
    purchase_discount: float
    total: float


@dataclass(frozen=True)
class ConfirmedItem:
    """An associated line, stripped of review bookkeeping."""

    product_id: str
    product_name: str
    quantity: float
    price: float
    unit_discount: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Wire shape expected by the purchase-creation endpoint."""
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
            "unitDiscount": self.unit_discount,
        }


@dataclass(frozen=True)
class ConfirmedPurchase:
    """Payload produced by the confirmation gate."""

    items: tuple[ConfirmedItem, ...]
    purchase_discount: float = 0.0

    @property
    def item_count(self) -> int:
        """Number of confirmed items."""
        return len(self.items)

    @property
    def total(self) -> float:
        """Amount of the confirmed items after line and purchase discounts."""
        subtotal = sum((item.price - item.unit_discount) * item.quantity for item in self.items)
        return subtotal - self.purchase_discount

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persistence wire format."""
        return {
            "items": [item.to_dict() for item in self.items],
            "purchaseDiscount": self.purchase_discount,
        }
