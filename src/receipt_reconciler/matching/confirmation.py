#!/usr/bin/env python3
"""
Confirmation Gate

Turns a reviewed session into the payload consumed by purchase persistence.
Only associated lines are exported, without their review bookkeeping. The
session itself is never modified.
"""

import logging

from ..core.errors import EmptyConfirmationError
from ..core.models import ConfirmedItem, ConfirmedPurchase
from .session import ReconciliationSession

logger = logging.getLogger(__name__)


def confirm(session: ReconciliationSession) -> ConfirmedPurchase:
    """
    Validate a session and build the confirmed purchase.

    Args:
        session: Reviewed reconciliation session

    Returns:
        ConfirmedPurchase with one item per associated line, in receipt order,
        plus the purchase-level discount

    Raises:
        EmptyConfirmationError: If no line is associated
    """
    lines = session.lines

    items = tuple(
        ConfirmedItem(
            product_id=line.product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            price=line.unit_price,
            unit_discount=line.unit_discount,
        )
        for line in lines
        if line.is_associated and line.product_id != ""
    )

    if not items:
        raise EmptyConfirmationError(line_count=len(lines))

    if len(items) < len(lines):
        logger.info("Confirming %d of %d lines; unassociated lines are dropped", len(items), len(lines))

    return ConfirmedPurchase(items=items, purchase_discount=session.purchase_discount)
