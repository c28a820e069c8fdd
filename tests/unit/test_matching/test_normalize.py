#!/usr/bin/env python3
"""Tests for barcode and label normalization."""

import pytest

from receipt_reconciler.matching.normalize import normalize_barcode, normalize_label, tokenize_label


class TestNormalizeBarcode:
    """Test barcode canonicalization."""

    @pytest.mark.matching
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("7891000100103", "7891000100103"),
            ("07891000100103", "7891000100103"),
            ("00007891000100103", "7891000100103"),
            ("17891000055127", "17891000055127"),
            ("012345678905", "0012345678905"),
            ("123456789", "0000123456789"),
            ("96385074", "96385074"),
            ("1234", "1234"),
            (" 7891-0001-00103 ", "7891000100103"),
            ("7891.000.100103", "7891000100103"),
            ("ABC-12", "abc-12"),
            ("  Loja 42 ", "loja 42"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_canonical_form(self, raw, expected):
        """Test canonical forms for common barcode shapes."""
        assert normalize_barcode(raw) == expected

    @pytest.mark.matching
    @pytest.mark.parametrize(
        "raw",
        [
            "7891000100103",
            "07891000100103",
            "012345678905",
            "96385074",
            " 7891-0001-00103 ",
            "0000",
            "000000000000000",
            "ABC-12",
            "x 1",
            "  ",
            "-",
        ],
    )
    def test_idempotent(self, raw):
        """Test normalizing twice gives the same result as once."""
        once = normalize_barcode(raw)

        assert normalize_barcode(once) == once


class TestNormalizeLabel:
    """Test label normalization used for scoring."""

    @pytest.mark.matching
    def test_normalize_label(self):
        """Test lowercase and trim."""
        assert normalize_label("  Refrigerante COLA 2L ") == "refrigerante cola 2l"
        assert normalize_label(None) == ""
        assert normalize_label("") == ""

    @pytest.mark.matching
    def test_tokenize_label(self):
        """Test whitespace tokens as a set."""
        assert tokenize_label("Leite  Integral leite") == {"leite", "integral"}
        assert tokenize_label("") == set()
