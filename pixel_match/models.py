"""
Value types shared by the search pipeline.

A fingerprint is a plain lowercase hex string; every other record is a
frozen dataclass so catalog entries and results cannot be mutated while
a search is running.
"""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping

from .errors import CatalogError, MalformedFingerprintError

_HEX_RE = re.compile(r"^[0-9a-f]*$")


def validate_fingerprint(value: str) -> str:
    """
    Normalize a fingerprint to lowercase and check it is pure hex.

    Raises:
        MalformedFingerprintError: If the value is not a string of hex digits.
    """
    if not isinstance(value, str):
        raise MalformedFingerprintError(
            f"Fingerprint must be a string, got {type(value).__name__}"
        )
    fingerprint = value.strip().lower()
    if not _HEX_RE.match(fingerprint):
        raise MalformedFingerprintError(f"Fingerprint is not hexadecimal: {value!r}")
    return fingerprint


@dataclass(frozen=True)
class Product:
    """A catalog entry with its precomputed fingerprint."""

    id: Any
    name: str
    category: str
    image_url: str
    fingerprint: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Product":
        """
        Build a product from a catalog JSON record.

        Accepts both the catalog file keys (``imageUrl``, ``hash``) and the
        Python spellings (``image_url``, ``fingerprint``). The fingerprint
        is stored as given (lowercased); it is validated when compared, so
        one bad record never prevents the catalog from loading.

        Raises:
            CatalogError: If the record has no ``id``.
        """
        if record.get("id") is None:
            raise CatalogError(f"Catalog record has no id: {dict(record)!r}")

        fingerprint = record.get("hash", record.get("fingerprint")) or ""
        if isinstance(fingerprint, str):
            fingerprint = fingerprint.strip().lower()

        return cls(
            id=record["id"],
            name=str(record.get("name", "")),
            category=str(record.get("category", "")),
            image_url=str(record.get("imageUrl", record.get("image_url", ""))),
            fingerprint=fingerprint,
        )


@dataclass(frozen=True)
class Match:
    """A product that cleared the similarity threshold for one search."""

    id: Any
    name: str
    category: str
    image: str
    score: float

    @classmethod
    def from_product(cls, product: Product, score: float) -> "Match":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            image=product.image_url,
            score=score,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchQuery:
    """Parameters of a single search invocation."""

    fingerprint: str
    threshold: float
    result_cap: int
