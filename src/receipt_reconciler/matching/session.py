#!/usr/bin/env python3
"""
Reconciliation Session

Stateful core of receipt-to-catalog reconciliation. A session owns the working
list of receipt lines plus the purchase-level discount, and is only changed
through the operations below:

1. Barcode fast path - exact lookup of a line's own barcode (raw, then once
   normalized); a hit associates with full confidence and skips scoring
2. Bulk barcode association - scanned codes are resolved one at a time and each
   product goes to the best-scoring unassociated line, if the score clears 0.3
3. Manual overrides - set/clear an association, edit numbers, add/remove lines

Catalog errors never escape a session operation: they are logged and turned
into notices, and the affected line is left as it was.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from functools import reduce

from ..catalog.lookup import CatalogLookup
from ..core.currency import amounts_match, coerce_amount, format_amount
from ..core.models import CatalogProduct, ParsedReceiptItem, ReceiptLine, ReceiptTotals
from .models import BatchResult, MatchScore, Notice, NoticeKind
from .normalize import normalize_barcode
from .scorer import ConfidenceThresholds, MatchScorer

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "quantity": "quantity",
    "unit_price": "unit_price",
    "unitPrice": "unit_price",
    "price": "unit_price",
    "unit_discount": "unit_discount",
    "unitDiscount": "unit_discount",
}


class ReconciliationSession:
    """
    Working state of one receipt under review.

    Not safe for concurrent mutation: callers issue one operation at a time.
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        lines: Iterable[ReceiptLine] = (),
        purchase_discount: float = 0.0,
    ):
        """
        Initialize the session.

        Args:
            catalog: Lookup adapter used for barcodes, ids and price history
            lines: Initial receipt lines (copied)
            purchase_discount: Purchase-level discount
        """
        self.catalog = catalog
        self._lines: list[ReceiptLine] = [replace(line) for line in lines]
        self._purchase_discount = coerce_amount(purchase_discount)
        self.notices: list[Notice] = []

    @classmethod
    def from_receipt(cls, items: Iterable[ParsedReceiptItem], catalog: CatalogLookup) -> "ReconciliationSession":
        """Create a session from parsed receipt items, running the barcode fast path."""
        session = cls(catalog)
        session.initialize_from_receipt(items)
        return session

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def lines(self) -> tuple[ReceiptLine, ...]:
        """Snapshot of the current lines (copies; edit through the session)."""
        return tuple(replace(line) for line in self._lines)

    def line(self, index: int) -> ReceiptLine:
        """Snapshot of one line."""
        return replace(self._line(index))

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def purchase_discount(self) -> float:
        """Purchase-level discount, separate from per-line discounts."""
        return self._purchase_discount

    @property
    def associated_count(self) -> int:
        """Number of lines linked to a product."""
        return sum(1 for line in self._lines if line.is_associated)

    def unassociated_indices(self) -> list[int]:
        """Indices of lines not yet linked to a product."""
        return [index for index, line in enumerate(self._lines) if not line.is_associated]

    def summary(self) -> str:
        """Short progress line for display."""
        return f"{self.associated_count} of {len(self._lines)} items associated"

    # ------------------------------------------------------------------
    # Ingestion and barcode fast path
    # ------------------------------------------------------------------

    def initialize_from_receipt(self, items: Iterable[ParsedReceiptItem]) -> list[Notice]:
        """
        Seed the session with parsed receipt items.

        Every line carrying a barcode goes through the fast path before this
        returns, so review starts partially pre-associated.

        Returns:
            Fast-path notices, one per line with a barcode
        """
        items = list(items)
        self._lines = [ReceiptLine.from_parsed_item(item) for item in items]
        logger.info("Session initialized with %d receipt lines", len(self._lines))

        for index, (item, line) in enumerate(zip(items, self._lines)):
            if item.total_price and not amounts_match(item.total_price, line.line_subtotal):
                logger.warning(
                    'Line %d "%s": receipt total %s differs from computed %s',
                    index,
                    item.name,
                    format_amount(item.total_price),
                    format_amount(line.line_subtotal),
                )

        notices = [
            self.try_barcode_associate(index) for index, line in enumerate(self._lines) if line.barcode
        ]

        logger.info("Barcode fast path: %s", self.summary())
        return notices

    def try_barcode_associate(self, line_index: int) -> Notice:
        """
        Associate a line through its own barcode.

        Looks the raw barcode up, retrying once with the normalized form on a
        miss. A hit associates the line with full confidence (no scoring); a
        miss or a lookup failure leaves the line untouched.

        Args:
            line_index: Index of the line

        Returns:
            Notice describing the outcome
        """
        line = self._line(line_index)
        code = line.barcode or ""

        if not code:
            return self._record(
                Notice(
                    kind=NoticeKind.LOOKUP_MISS,
                    barcode="",
                    message=f'"{line.original_label}" has no barcode',
                    line_index=line_index,
                )
            )

        product, failure = self._resolve_barcode(code)

        if failure is not None:
            return self._record(
                Notice(
                    kind=NoticeKind.LOOKUP_FAILURE,
                    barcode=code,
                    message=f"Lookup failed for {code}: {failure}",
                    line_index=line_index,
                )
            )

        if product is None:
            logger.debug("Fast path miss for line %d (%s)", line_index, code)
            return self._record(
                Notice(
                    kind=NoticeKind.LOOKUP_MISS,
                    barcode=code,
                    message=f"Barcode {code} not found in catalog",
                    line_index=line_index,
                )
            )

        line.associate(product)
        logger.info('Fast path: line %d "%s" -> %s', line_index, line.original_label, product.name)
        return self._record(
            Notice(
                kind=NoticeKind.ASSOCIATED,
                barcode=code,
                message=f'"{line.original_label}" associated to "{product.name}"',
                line_index=line_index,
                product=product,
                score=1.0,
            )
        )

    # ------------------------------------------------------------------
    # Bulk association from scanned barcodes
    # ------------------------------------------------------------------

    def bulk_barcode_associate(self, barcodes: Sequence[str]) -> BatchResult:
        """
        Associate a batch of scanned barcodes to receipt lines.

        Barcodes are processed strictly in order, one lookup at a time. Each
        step only considers lines still unassociated at that point, so earlier
        resolutions narrow the pool for later ones and no line is chosen twice.
        The run stops early once every line is associated.

        Args:
            barcodes: Scanned codes, in scan order

        Returns:
            BatchResult with one notice per processed barcode
        """
        logger.info(
            "Processing %d scanned barcodes against %d open lines",
            len(barcodes),
            len(self.unassociated_indices()),
        )

        result = reduce(self._associate_scanned, barcodes, BatchResult())

        logger.info(
            "Scanned batch done: %d associated, %d skipped%s",
            result.associated_count,
            result.skipped_count,
            " (stopped early, no open lines)" if result.aborted else "",
        )
        return result

    def _associate_scanned(self, batch: BatchResult, barcode: str) -> BatchResult:
        """Process one scanned barcode; the reducer step of a bulk run."""
        if batch.aborted:
            return batch

        candidates = [index for index in self.unassociated_indices() if index not in batch.consumed]
        if not candidates:
            return batch.with_notice(
                self._record(
                    Notice(
                        kind=NoticeKind.NO_LINES_LEFT,
                        barcode=barcode,
                        message="All lines are associated; remaining barcodes ignored",
                    )
                )
            )

        product, failure = self._resolve_barcode(barcode)

        if failure is not None:
            return batch.with_notice(
                self._record(
                    Notice(
                        kind=NoticeKind.LOOKUP_FAILURE,
                        barcode=barcode,
                        message=f"Lookup failed for {barcode}: {failure}",
                    )
                )
            )

        if product is None:
            return batch.with_notice(
                self._record(
                    Notice(
                        kind=NoticeKind.LOOKUP_MISS,
                        barcode=barcode,
                        message=f"Barcode {barcode} not found in catalog",
                    )
                )
            )

        history = self.price_history(product.id)
        ranked = MatchScorer.rank(self._lines, product, history, candidates)
        best = ranked[0]

        for match in ranked:
            logger.debug("  %s vs line %d: %.3f", product.name, match.line_index, match.score)

        if not ConfidenceThresholds.meets_threshold(best.score):
            return batch.with_notice(
                self._record(
                    Notice(
                        kind=NoticeKind.LOW_CONFIDENCE,
                        barcode=barcode,
                        message=f'"{product.name}" found, but no line matches it confidently ({best.score:.2f})',
                        line_index=best.line_index,
                        product=product,
                        score=best.score,
                    )
                )
            )

        line = self._lines[best.line_index]
        line.associate(product)
        logger.info(
            'Scanned %s: line %d "%s" -> %s (%.2f)',
            barcode,
            best.line_index,
            line.original_label,
            product.name,
            best.score,
        )
        return batch.with_notice(
            self._record(
                Notice(
                    kind=NoticeKind.ASSOCIATED,
                    barcode=barcode,
                    message=f'"{line.original_label}" associated to "{product.name}" ({best.score:.0%})',
                    line_index=best.line_index,
                    product=product,
                    score=best.score,
                )
            )
        )

    def rank_candidates(self, barcode: str) -> tuple[CatalogProduct | None, list[MatchScore]]:
        """
        Preview how a scanned barcode would score against the open lines.

        Nothing is associated. A miss or lookup failure yields (None, []).

        Returns:
            Resolved product and the open lines ranked best first
        """
        product, _ = self._resolve_barcode(barcode)
        if product is None:
            return None, []

        history = self.price_history(product.id)
        return product, MatchScorer.rank(self._lines, product, history, self.unassociated_indices())

    # ------------------------------------------------------------------
    # Manual edits
    # ------------------------------------------------------------------

    def set_association(self, line_index: int, product: CatalogProduct | None) -> None:
        """
        Manually associate a line (or clear it with None).

        Manual choices always win and are not subject to the confidence threshold.
        """
        line = self._line(line_index)
        if product is None:
            line.clear_association()
            logger.info('Line %d "%s" cleared', line_index, line.original_label)
        else:
            line.associate(product)
            logger.info('Line %d "%s" manually associated to %s', line_index, line.original_label, product.name)

    def set_association_by_id(self, line_index: int, product_id: str) -> Notice:
        """
        Manually associate a line to a product known only by id.

        An unknown id or a failing catalog leaves the line untouched.

        Returns:
            Notice describing the outcome
        """
        self._line(line_index)

        try:
            product = self.catalog.lookup_product_by_id(product_id)
        except Exception as e:
            logger.warning("Product lookup failed for id %s: %s", product_id, e)
            return self._record(
                Notice(
                    kind=NoticeKind.LOOKUP_FAILURE,
                    barcode="",
                    message=f"Lookup failed for product {product_id}: {e}",
                    line_index=line_index,
                )
            )

        if product is None:
            return self._record(
                Notice(
                    kind=NoticeKind.LOOKUP_MISS,
                    barcode="",
                    message=f"Product {product_id} not found in catalog",
                    line_index=line_index,
                )
            )

        self.set_association(line_index, product)
        return self._record(
            Notice(
                kind=NoticeKind.ASSOCIATED,
                barcode="",
                message=f'"{self._lines[line_index].original_label}" associated to "{product.name}"',
                line_index=line_index,
                product=product,
            )
        )

    def edit_line(self, line_index: int, field: str, value: object) -> None:
        """
        Edit quantity, unit price or unit discount of a line.

        Non-numeric values become 0. Association is not affected.

        Raises:
            ValueError: If the field is not editable
        """
        attribute = EDITABLE_FIELDS.get(field)
        if attribute is None:
            raise ValueError(f"Field not editable: {field}")

        line = self._line(line_index)
        setattr(line, attribute, coerce_amount(value))
        logger.debug("Line %d %s set to %s", line_index, attribute, getattr(line, attribute))

    def remove_line(self, line_index: int) -> ReceiptLine:
        """Delete a line; later indices shift down by one."""
        self._line(line_index)
        removed = self._lines.pop(line_index)
        logger.info('Line %d "%s" removed', line_index, removed.original_label)
        return removed

    def add_line(self, label: str, quantity: object = 1, unit_price: object = 0) -> int:
        """
        Append a line that was missing from the parsed receipt.

        Returns:
            Index of the new line
        """
        self._lines.append(
            ReceiptLine(
                original_label=label,
                quantity=coerce_amount(quantity),
                unit_price=coerce_amount(unit_price),
            )
        )
        return len(self._lines) - 1

    def set_purchase_discount(self, value: object) -> None:
        """Set the purchase-level discount (non-numeric becomes 0)."""
        self._purchase_discount = coerce_amount(value)

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def compute_totals(self) -> ReceiptTotals:
        """
        Compute running totals.

        Negative results (discounts above prices) are reported as-is.
        """
        line_subtotals = tuple(line.line_subtotal for line in self._lines)
        subtotal = sum(line_subtotals)
        return ReceiptTotals(
            line_subtotals=line_subtotals,
            subtotal=subtotal,
            purchase_discount=self._purchase_discount,
            total=subtotal - self._purchase_discount,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _line(self, line_index: int) -> ReceiptLine:
        if not 0 <= line_index < len(self._lines):
            raise IndexError(f"Line index {line_index} out of range (0-{len(self._lines) - 1})")
        return self._lines[line_index]

    def _record(self, notice: Notice) -> Notice:
        self.notices.append(notice)
        if notice.kind in (NoticeKind.LOOKUP_MISS, NoticeKind.LOW_CONFIDENCE):
            logger.info(notice.message)
        return notice

    def _resolve_barcode(self, code: str) -> tuple[CatalogProduct | None, Exception | None]:
        """Exact lookup of the raw code, then a single retry with its normalized form."""
        try:
            product = self.catalog.lookup_product_by_barcode(code)
            if product is None:
                normalized = normalize_barcode(code)
                if normalized and normalized != code:
                    logger.debug("Retrying %s as %s", code, normalized)
                    product = self.catalog.lookup_product_by_barcode(normalized)
        except Exception as e:
            logger.warning("Barcode lookup failed for %s: %s", code, e)
            return None, e

        return product, None

    def price_history(self, product_id: str) -> list[float]:
        """Best-effort price history; any failure means no history."""
        try:
            history = self.catalog.fetch_price_history(product_id)
        except Exception as e:
            logger.warning("Price history unavailable for %s: %s", product_id, e)
            return []

        prices = [coerce_amount(price) for price in history or []]
        usable = [price for price in prices if price > 0]
        if usable:
            logger.debug(
                "Price history for %s: %d prices, %s - %s",
                product_id,
                len(usable),
                format_amount(min(usable)),
                format_amount(max(usable)),
            )
        return usable
