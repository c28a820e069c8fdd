#!/usr/bin/env python3
"""
Amount Coercion and Formatting Utilities

Receipt amounts arrive from OCR and third-party parsers in many shapes: floats,
plain strings, Brazilian decimal commas ("7,00"), currency prefixes ("R$ 7,00")
and thousand separators ("1.234,56"). These helpers turn any of them into a
float, or 0.0 when the input cannot be read.

Key Principles:
- Coercion never raises; malformed input becomes 0.0
- Formatting always shows two decimal places
- Comparisons use a one-cent tolerance
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any

CURRENCY_PREFIXES = ("R$", "$")
AMOUNT_TOLERANCE = 0.01


def coerce_amount(value: Any) -> float:
    """
    Safely convert a number or amount string to float.

    Args:
        value: Number, or string like '7.00', '7,00', 'R$ 1.234,56'

    Returns:
        Float amount, 0.0 for invalid input

    Examples:
        coerce_amount('7,00') -> 7.0
        coerce_amount('R$ 1.234,56') -> 1234.56
        coerce_amount('abc') -> 0.0
        coerce_amount(None) -> 0.0
    """
    if isinstance(value, bool) or value is None:
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    clean_str = str(value).strip()
    for prefix in CURRENCY_PREFIXES:
        if clean_str.upper().startswith(prefix):
            clean_str = clean_str[len(prefix):].strip()
    clean_str = clean_str.replace(" ", "")

    if not clean_str or clean_str.lower() in ("nan", "none", "null", "-"):
        return 0.0

    if "," in clean_str:
        # Decimal comma: dots are thousand separators
        clean_str = clean_str.replace(".", "").replace(",", ".")

    try:
        number = float(Decimal(clean_str))
    except (ValueError, TypeError, InvalidOperation):
        return 0.0

    return number if math.isfinite(number) else 0.0


def format_amount(value: float) -> str:
    """Format an amount as a display string with R$ prefix."""
    number = round(coerce_amount(value), 2) + 0.0  # drops negative zero
    if number < 0:
        return f"-R$ {abs(number):.2f}"
    return f"R$ {number:.2f}"


def amounts_match(a: float, b: float, tolerance: float = AMOUNT_TOLERANCE) -> bool:
    """Check whether two amounts differ by less than the tolerance."""
    return abs(a - b) < tolerance
