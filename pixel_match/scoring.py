"""
Fingerprint comparison and similarity scoring.

Distance is the number of differing bits between two equal-length hex
fingerprints. Similarity is its linear complement, normalized by the bit
length of the fingerprints actually being compared, so the scorer keeps
working if the fingerprint size changes.
"""

import logging
from typing import List

from .errors import LengthMismatchError
from .models import Match, validate_fingerprint

logger = logging.getLogger(__name__)

BITS_PER_HEX_DIGIT = 4


def max_distance(fingerprint: str) -> int:
    """Total bit count of a fingerprint (4 bits per hex digit)."""
    return BITS_PER_HEX_DIGIT * len(fingerprint)


def hamming_distance(hash1: str, hash2: str) -> int:
    """
    Count the differing bits between two hex fingerprints.

    Args:
        hash1: First fingerprint.
        hash2: Second fingerprint, same length as hash1.

    Returns:
        Distance in [0, 4 * len(hash1)].

    Raises:
        LengthMismatchError: If the fingerprints differ in length.
        MalformedFingerprintError: If either is not a hex string.
    """
    hash1 = validate_fingerprint(hash1)
    hash2 = validate_fingerprint(hash2)

    if len(hash1) != len(hash2):
        raise LengthMismatchError(len(hash1), len(hash2))
    if not hash1:
        return 0

    return bin(int(hash1, 16) ^ int(hash2, 16)).count("1")


def calculate_similarity(distance: int, max_distance: int) -> float:
    """
    Linear similarity score: 1 - distance / max_distance.

    1.0 means bit-identical fingerprints, 0.0 maximally different.
    """
    if max_distance <= 0:
        raise ValueError(f"max_distance must be positive, got {max_distance}")
    if not 0 <= distance <= max_distance:
        raise ValueError(
            f"distance {distance} outside [0, {max_distance}]"
        )
    return 1.0 - (distance / max_distance)


def rank_matches(matches: List[Match]) -> List[Match]:
    """
    Sort matches by score, highest first.

    The sort is stable: matches with equal scores keep the order in
    which they were produced (catalog order).
    """
    return sorted(matches, key=lambda m: -m.score)
