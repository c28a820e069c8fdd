#!/usr/bin/env python3
"""
Text Normalization for Matching

Barcode canonicalization used for the single lookup retry, and label
normalization used only inside scoring (stored data is never rewritten).

Barcode canonical form:
- GTIN-14 (or longer) codes padded with leading zeros shrink towards 13 digits
- 9 to 12 digit codes (UPC-A, EANs that lost a leading zero) pad to 13 digits
- EAN-8 and shorter in-store codes are kept as-is
- Non-numeric codes are only trimmed and lowercased
"""

import re

EAN13_LENGTH = 13
EAN8_LENGTH = 8

_SEPARATORS = re.compile(r"[\s.\-]+")


def normalize_barcode(code: str | None) -> str:
    """
    Canonicalize a barcode for lookup.

    Idempotent: normalize_barcode(normalize_barcode(x)) == normalize_barcode(x).

    Examples:
        normalize_barcode("07891000100103") -> "7891000100103"
        normalize_barcode("012345678905") -> "0012345678905"
        normalize_barcode(" 7891-0001-00103 ") -> "7891000100103"
        normalize_barcode("96385074") -> "96385074"
        normalize_barcode("ABC-12") -> "abc-12"
    """
    if not code:
        return ""

    text = str(code).strip().lower()
    digits = _SEPARATORS.sub("", text)

    if not digits.isdigit():
        return text

    # Drop GTIN-14 padding, never below EAN-13 length
    while len(digits) > EAN13_LENGTH and digits.startswith("0"):
        digits = digits[1:]

    if EAN8_LENGTH < len(digits) < EAN13_LENGTH:
        digits = digits.zfill(EAN13_LENGTH)

    return digits


def normalize_label(label: str | None) -> str:
    """Lowercase and trim a product label."""
    if not label:
        return ""
    return str(label).strip().lower()


def tokenize_label(label: str | None) -> set[str]:
    """Split a normalized label into its set of whitespace tokens."""
    return set(normalize_label(label).split())
