"""
Product catalog loading.

The catalog is an immutable, ordered collection of Products that is
passed explicitly to the engine and matcher. It is normally loaded from
a JSON file of precomputed fingerprints (see index_builder); when that
file is unavailable the base product file can be used as a fallback.
"""

import json
import logging
import os
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import CatalogError
from .models import Product

logger = logging.getLogger(__name__)


class Catalog:
    """Read-only, ordered snapshot of catalog products."""

    __slots__ = ("_products",)

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Tuple[Product, ...] = tuple(products)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Catalog":
        """
        Build a catalog from JSON-style records, skipping invalid ones.
        """
        products = []
        for i, record in enumerate(records):
            if not isinstance(record, Mapping):
                logger.warning(f"Skipping catalog record {i}: not an object")
                continue
            try:
                products.append(Product.from_record(record))
            except CatalogError as e:
                logger.warning(f"Skipping catalog record {i}: {e}")
        return cls(products)

    @property
    def products(self) -> Tuple[Product, ...]:
        return self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __getitem__(self, index: int) -> Product:
        return self._products[index]

    def __repr__(self) -> str:
        return f"Catalog({len(self._products)} products)"


def read_records(path: str) -> List[Mapping[str, Any]]:
    """
    Read a JSON array of product records.

    Raises:
        CatalogError: If the file is missing, not JSON, or not an array.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except OSError as e:
        raise CatalogError(f"Could not read catalog {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(records, list):
        raise CatalogError(f"Catalog {path} must contain a JSON array")
    return records


def load_catalog(path: str, fallback_path: Optional[str] = None) -> Catalog:
    """
    Load a catalog of products with precomputed fingerprints.

    Args:
        path: JSON file of precomputed fingerprints.
        fallback_path: Optional base product file used when ``path`` is
            missing or unreadable.

    Returns:
        Catalog in file order.

    Raises:
        CatalogError: If neither file can be loaded.
    """
    try:
        records = read_records(path)
        source = path
    except CatalogError as e:
        if not fallback_path:
            raise
        logger.warning(
            f"Precomputed catalog unavailable, falling back to "
            f"{os.path.basename(fallback_path)}: {e}"
        )
        records = read_records(fallback_path)
        source = fallback_path

    catalog = Catalog.from_records(records)
    logger.info(f"Loaded catalog: {len(catalog)} products from {source}")
    return catalog
