"""
Exception taxonomy for fingerprinting and catalog search.

Search-level errors (decode failures, invalid queries) abort a search
before any catalog work begins. Fingerprint errors raised while scanning
the catalog are isolated per entry by the matcher.
"""


class PixelMatchError(Exception):
    """Base class for all pixel_match errors."""


class ImageDecodeError(PixelMatchError):
    """The input image could not be read, fetched or decoded."""


class FingerprintError(PixelMatchError, ValueError):
    """A fingerprint could not be compared."""


class LengthMismatchError(FingerprintError):
    """Two fingerprints of different length were compared."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Fingerprints must be the same length "
            f"(expected {expected} hex digits, got {actual})"
        )
        self.expected = expected
        self.actual = actual


class MalformedFingerprintError(FingerprintError):
    """A fingerprint contains characters that are not hex digits."""


class InvalidQueryError(PixelMatchError, ValueError):
    """Search parameters are out of range (threshold, result cap, source)."""


class CatalogError(PixelMatchError):
    """The product catalog could not be loaded."""
