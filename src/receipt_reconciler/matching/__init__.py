"""
Receipt Reconciliation Package

Associates parsed receipt lines with catalog products.

This package provides:
- Barcode fast path with a single normalized retry
- Multi-criteria confidence scoring (name, price history, discount consistency)
- Greedy, non-conflicting assignment of scanned barcode batches
- Manual overrides and running totals
- A confirmation gate producing the purchase payload

Key Components:
- normalize: Barcode and label normalization
- scorer: Similarity scorers and the combined MatchScorer
- session: ReconciliationSession, the stateful core
- confirmation: confirm() gate
"""

from .confirmation import confirm
from .models import (
    BatchResult,
    MatchScore,
    Notice,
    NoticeKind,
)
from .normalize import (
    normalize_barcode,
    normalize_label,
)
from .scorer import (
    ConfidenceThresholds,
    MatchScorer,
    name_similarity,
    price_plausibility,
    total_consistency,
)
from .session import ReconciliationSession

__all__ = [
    # Models
    "BatchResult",
    "MatchScore",
    "Notice",
    "NoticeKind",
    # Normalization
    "normalize_barcode",
    "normalize_label",
    # Scoring
    "ConfidenceThresholds",
    "MatchScorer",
    "name_similarity",
    "price_plausibility",
    "total_consistency",
    # Session
    "ReconciliationSession",
    "confirm",
]
