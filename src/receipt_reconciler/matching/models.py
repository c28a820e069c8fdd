#!/usr/bin/env python3
"""
Matching Domain Models

Ephemeral results produced while reconciling a receipt: per-pair scores,
notices describing what happened to each barcode, and the accumulator of a
bulk barcode run.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from ..core.models import CatalogProduct


class NoticeKind(Enum):
    """What happened to one barcode (or one fast-path attempt)."""

    ASSOCIATED = "associated"
    LOOKUP_MISS = "lookup_miss"
    LOOKUP_FAILURE = "lookup_failure"
    LOW_CONFIDENCE = "low_confidence"
    NO_LINES_LEFT = "no_lines_left"


@dataclass(frozen=True)
class MatchScore:
    """Confidence of one (line, product) pair."""

    line_index: int
    product: CatalogProduct
    score: float


@dataclass(frozen=True)
class Notice:
    """
    Informational message surfaced to the user.

    None of these are errors: misses, failures and low-confidence results
    leave the session untouched.
    """

    kind: NoticeKind
    barcode: str
    message: str
    line_index: int | None = None
    product: CatalogProduct | None = None
    score: float | None = None

    @property
    def is_association(self) -> bool:
        """True if this notice reports a new association."""
        return self.kind == NoticeKind.ASSOCIATED


@dataclass(frozen=True)
class BatchResult:
    """
    Accumulator for a bulk barcode run.

    Each processed barcode yields a new BatchResult with one more notice, so the
    run reads as a fold over the scanned codes.
    """

    notices: tuple[Notice, ...] = ()
    consumed: frozenset[int] = field(default_factory=frozenset)
    aborted: bool = False

    def with_notice(self, notice: Notice) -> "BatchResult":
        """Return a copy with one more notice (and its line consumed, if any)."""
        consumed = self.consumed
        if notice.is_association and notice.line_index is not None:
            consumed = consumed | {notice.line_index}
        return replace(
            self,
            notices=self.notices + (notice,),
            consumed=consumed,
            aborted=self.aborted or notice.kind == NoticeKind.NO_LINES_LEFT,
        )

    @property
    def associated_count(self) -> int:
        """Number of barcodes that produced an association."""
        return sum(1 for notice in self.notices if notice.is_association)

    @property
    def skipped_count(self) -> int:
        """Number of barcodes processed without an association."""
        return sum(
            1 for notice in self.notices if not notice.is_association and notice.kind != NoticeKind.NO_LINES_LEFT
        )

    def notices_of(self, kind: NoticeKind) -> list[Notice]:
        """Return the notices of one kind, in order."""
        return [notice for notice in self.notices if notice.kind == kind]
