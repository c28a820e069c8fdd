#!/usr/bin/env python3
"""
Reconciliation Errors

Only conditions that need user action are exceptions. Lookup misses, lookup
failures and low-confidence matches are reported as notices instead.
"""


class ReconciliationError(Exception):
    """Base class for reconciliation errors."""


class EmptyConfirmationError(ReconciliationError):
    """Raised when confirming a session with no associated lines."""

    def __init__(self, line_count: int = 0):
        self.line_count = line_count
        super().__init__(
            f"No receipt line is associated with a product ({line_count} lines reviewed). "
            "Associate at least one item before saving."
        )


class CatalogLoadError(ReconciliationError):
    """Raised when catalog files cannot be read or parsed."""
