#!/usr/bin/env python3
"""
Match Scoring System

Scores how well a receipt line fits a catalog product. Three signals are
combined into one confidence value in [0, 1]:

- Name similarity (weight 0.4): containment and token overlap, no edit distance
- Price plausibility (up to 0.35): unit price against the product's price history
- Total consistency (up to 0.25): the line's own discount arithmetic

The weights and the 0.3 acceptance threshold are fixed policy values.
All functions here are pure and never raise.
"""

from collections.abc import Iterable, Sequence

from ..core.models import CatalogProduct, ReceiptLine
from .models import MatchScore
from .normalize import normalize_label, tokenize_label

NAME_WEIGHT = 0.4
PRICE_WEIGHT = 0.35
CONSISTENCY_WEIGHT = 0.25

EXACT_NAME_SCORE = 1.0
CONTAINMENT_SCORE = 0.8
TOKEN_OVERLAP_FACTOR = 0.7

NO_HISTORY_PRICE_SCORE = 0.15
NO_HISTORY_MAX_PRICE = 1000.0

CONSISTENCY_TOLERANCE = 0.01


def name_similarity(a: str | None, b: str | None) -> float:
    """
    Score name similarity between two labels (order independent).

    Returns:
        1.0 for equal labels, 0.8 when one contains the other,
        0.7 * dice(token sets) when they share tokens, else 0.0

    A blank label on either side scores 0.0, before the equality and
    containment checks, so two empty names never count as a match.
    """
    left = normalize_label(a)
    right = normalize_label(b)

    if not left or not right:
        return 0.0

    if left == right:
        return EXACT_NAME_SCORE

    if left in right or right in left:
        return CONTAINMENT_SCORE

    left_tokens = tokenize_label(left)
    right_tokens = tokenize_label(right)
    common = left_tokens & right_tokens
    if not common:
        return 0.0

    return TOKEN_OVERLAP_FACTOR * (2 * len(common) / (len(left_tokens) + len(right_tokens)))


def price_plausibility(line_price: float, history: Sequence[float]) -> float:
    """
    Score how consistent a unit price is with a product's price history.

    Without history, any price in (0, 1000) gets a small fixed score.
    Inside the historical [min, max] range the full 0.35 is awarded; outside
    it decays with the relative distance from the historical average.
    """
    if not history:
        return NO_HISTORY_PRICE_SCORE if 0 < line_price < NO_HISTORY_MAX_PRICE else 0.0

    lowest = min(history)
    highest = max(history)
    average = sum(history) / len(history)

    if lowest <= line_price <= highest:
        return PRICE_WEIGHT

    if average <= 0:
        return 0.0

    deviation = min(abs(line_price - average) / average, 1.0)
    return PRICE_WEIGHT * (1 - deviation)


def total_consistency(line: ReceiptLine) -> float:
    """
    Score whether the line's discounted total agrees with unit price x quantity.

    A line with no discount scores the full 0.25; a discount that eats into
    the expected total lowers the score proportionally.
    """
    expected = line.unit_price * line.quantity
    actual = (line.unit_price - line.unit_discount) * line.quantity
    difference = abs(expected - actual)

    if difference < CONSISTENCY_TOLERANCE:
        return CONSISTENCY_WEIGHT

    if expected == 0:
        return 0.0

    return CONSISTENCY_WEIGHT * (1 - min(difference / abs(expected), 1.0))


class MatchScorer:
    """Combines the individual signals into a single confidence score"""

    @staticmethod
    def calculate_confidence(line: ReceiptLine, product: CatalogProduct, history: Sequence[float]) -> float:
        """
        Calculate match confidence for a (line, product) pair.

        Args:
            line: Receipt line under review
            product: Candidate catalog product
            history: Historical unit prices of the product (may be empty)

        Returns:
            Confidence score between 0.0 and 1.0
        """
        return (
            NAME_WEIGHT * name_similarity(line.original_label, product.name)
            + price_plausibility(line.unit_price, history)
            + total_consistency(line)
        )

    @staticmethod
    def breakdown(line: ReceiptLine, product: CatalogProduct, history: Sequence[float]) -> dict[str, float]:
        """Return the weighted components of a confidence score, for display."""
        name = NAME_WEIGHT * name_similarity(line.original_label, product.name)
        price = price_plausibility(line.unit_price, history)
        consistency = total_consistency(line)
        return {
            "name": name,
            "price": price,
            "consistency": consistency,
            "total": name + price + consistency,
        }

    @staticmethod
    def rank(
        lines: Sequence[ReceiptLine],
        product: CatalogProduct,
        history: Sequence[float],
        candidates: Iterable[int],
    ) -> list[MatchScore]:
        """
        Score a product against the candidate lines.

        Args:
            lines: All session lines
            product: Product resolved from a scanned barcode
            history: Its price history
            candidates: Indices of lines eligible for this product

        Returns:
            MatchScores sorted best first; ties keep the lower line index first
        """
        scores = [
            MatchScore(
                line_index=index,
                product=product,
                score=MatchScorer.calculate_confidence(lines[index], product, history),
            )
            for index in candidates
        ]
        return sorted(scores, key=lambda match: (-match.score, match.line_index))


class ConfidenceThresholds:
    """Confidence thresholds for automatic association"""

    AUTO_ASSOCIATE_MIN = 0.3

    @staticmethod
    def meets_threshold(confidence: float) -> bool:
        """Automatic association requires a score strictly above the minimum."""
        return confidence > ConfidenceThresholds.AUTO_ASSOCIATE_MIN
