"""
Catalog ranking against a query fingerprint.

Every catalog entry is compared independently and the comparison is
folded into a ComparisonOutcome instead of letting exceptions escape the
scan. A product with a malformed or wrong-length fingerprint is logged
and excluded; it never aborts the search.

Filtering happens before sorting and truncation happens after, so a
high-scoring product late in the catalog is never dropped by the cap.
"""

import os
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .errors import FingerprintError, InvalidQueryError
from .models import Match, Product, SearchQuery, validate_fingerprint
from .scoring import calculate_similarity, hamming_distance, max_distance, rank_matches

logger = logging.getLogger(__name__)

# Upper bound on returned matches, applied after sorting.
MAX_RESULTS = int(os.environ.get("SEARCH_MAX_RESULTS", "50"))


@dataclass(frozen=True)
class ComparisonOutcome:
    """Result of comparing the query with one catalog product."""

    product: Product
    score: Optional[float] = None
    error: Optional[FingerprintError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_threshold(threshold: float) -> float:
    try:
        threshold = float(threshold)
    except (TypeError, ValueError) as e:
        raise InvalidQueryError(f"Threshold must be a number, got {threshold!r}") from e
    if not 0.0 <= threshold <= 1.0:
        raise InvalidQueryError(f"Threshold must be in [0, 1], got {threshold}")
    return threshold


def validate_result_cap(result_cap: int) -> int:
    if isinstance(result_cap, bool) or not isinstance(result_cap, int) or result_cap < 1:
        raise InvalidQueryError(f"Result cap must be a positive integer, got {result_cap!r}")
    return result_cap


def compare_product(query_fingerprint: str,
                    product: Product,
                    max_dist: int) -> ComparisonOutcome:
    """Score one product, capturing fingerprint errors in the outcome."""
    try:
        distance = hamming_distance(query_fingerprint, product.fingerprint)
    except FingerprintError as e:
        return ComparisonOutcome(product=product, error=e)
    return ComparisonOutcome(product=product,
                             score=calculate_similarity(distance, max_dist))


def rank_query(query: SearchQuery, catalog: Iterable[Product]) -> List[Match]:
    """
    Rank a catalog snapshot against a prepared SearchQuery.

    Returns:
        Matches with score >= query.threshold, highest score first, ties
        in catalog order, at most query.result_cap entries.
    """
    max_dist = max_distance(query.fingerprint)
    matches = []
    scanned = 0
    failures = 0

    for product in catalog:
        scanned += 1
        outcome = compare_product(query.fingerprint, product, max_dist)
        if not outcome.ok:
            failures += 1
            logger.warning(
                f"Error comparing with product {product.id}: {outcome.error}"
            )
            continue
        if outcome.score >= query.threshold:
            matches.append(Match.from_product(product, outcome.score))

    ranked = rank_matches(matches)[:query.result_cap]

    logger.debug(
        f"Ranked {scanned} products: {len(matches)} above threshold "
        f"{query.threshold}, {failures} failed, {len(ranked)} returned"
    )
    return ranked


def rank_catalog(query_fingerprint: str,
                 catalog: Iterable[Product],
                 threshold: float,
                 result_cap: int = MAX_RESULTS) -> List[Match]:
    """
    Filter and rank catalog products by similarity to a query fingerprint.

    Args:
        query_fingerprint: Hex fingerprint of the query image.
        catalog: Products to scan (read-only).
        threshold: Minimum similarity in [0, 1].
        result_cap: Maximum number of matches to return.

    Raises:
        InvalidQueryError: If threshold or result_cap is out of range, or
            the query fingerprint is empty.
        MalformedFingerprintError: If the query fingerprint is not hex.
    """
    query_fingerprint = validate_fingerprint(query_fingerprint)
    if not query_fingerprint:
        raise InvalidQueryError("Query fingerprint is empty")

    query = SearchQuery(
        fingerprint=query_fingerprint,
        threshold=validate_threshold(threshold),
        result_cap=validate_result_cap(result_cap),
    )
    return rank_query(query, catalog)
