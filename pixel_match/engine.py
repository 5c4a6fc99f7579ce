"""
Visual product search engine.

Orchestrates the fingerprint search pipeline:
    1. Resolve and decode the query image (the only awaited step)
    2. Sample a luminance grid and compute its difference hash
    3. Compare against every catalog fingerprint and rank by similarity

Search parameters are validated before the image is touched, so a bad
threshold never costs a decode. Once the query fingerprint exists the
catalog scan runs to completion without yielding.
"""

import os
import asyncio
import logging
from typing import List, Optional

from .catalog import Catalog, load_catalog
from .dhash import fingerprint_length, hash_image_array
from .errors import ImageDecodeError, InvalidQueryError, LengthMismatchError
from .matcher import MAX_RESULTS, rank_query, validate_result_cap, validate_threshold
from .models import Match, SearchQuery, validate_fingerprint
from .preprocessing import HASH_SIZE, load_image
from .sources import Fetcher, ImageSource, is_empty_source

logger = logging.getLogger(__name__)

# Minimum similarity for a product to be returned.
DEFAULT_THRESHOLD = float(os.environ.get("SEARCH_THRESHOLD", "0.3"))

# Optional bound on the decode step, in seconds. Unset means no timeout.
DEFAULT_DECODE_TIMEOUT = (
    float(os.environ["IMAGE_DECODE_TIMEOUT"])
    if os.environ.get("IMAGE_DECODE_TIMEOUT") else None
)


class SearchEngine:
    """
    Fingerprint-based visual product search engine.

    Holds an immutable catalog snapshot and answers searches against it.
    The engine keeps no per-search state, so overlapping searches on the
    same instance are independent.
    """

    def __init__(self,
                 catalog: Catalog,
                 result_cap: int = MAX_RESULTS,
                 fetcher: Optional[Fetcher] = None,
                 hash_size: int = HASH_SIZE):
        """
        Args:
            catalog: Products to search.
            result_cap: Maximum number of matches per search.
            fetcher: Async callable resolving http(s) URLs to bytes.
                Without one, remote URL sources fail to decode.
            hash_size: Luminance grid height used for query fingerprints.
                Must match the size the catalog was built with.
        """
        self.catalog = catalog
        self.result_cap = validate_result_cap(result_cap)
        self.fetcher = fetcher
        self.hash_size = hash_size
        self.fingerprint_length = fingerprint_length(hash_size)

        if not catalog:
            logger.warning("Search engine created with an empty catalog")

    @classmethod
    def from_file(cls,
                  catalog_path: str,
                  fallback_path: Optional[str] = None,
                  **kwargs) -> "SearchEngine":
        """Load a catalog file and build an engine over it."""
        return cls(load_catalog(catalog_path, fallback_path), **kwargs)

    async def search(self,
                     image_source: ImageSource,
                     threshold: float = DEFAULT_THRESHOLD,
                     decode_timeout: Optional[float] = DEFAULT_DECODE_TIMEOUT
                     ) -> List[Match]:
        """
        Search the catalog for products similar to an image.

        Args:
            image_source: Bytes, binary file, path, data URL or http(s) URL.
            threshold: Minimum similarity in [0, 1].
            decode_timeout: Optional limit in seconds on loading the image.

        Returns:
            Matches sorted by score (highest first, ties in catalog
            order), at most ``result_cap`` long. An empty list means no
            product cleared the threshold.

        Raises:
            InvalidQueryError: If the threshold is out of range or the
                source is empty.
            ImageDecodeError: If the image cannot be loaded or decoded.
        """
        threshold = validate_threshold(threshold)
        if is_empty_source(image_source):
            raise InvalidQueryError("Image source must not be empty")

        try:
            if decode_timeout is None:
                image = await load_image(image_source, fetcher=self.fetcher)
            else:
                image = await asyncio.wait_for(
                    load_image(image_source, fetcher=self.fetcher),
                    timeout=decode_timeout,
                )
        except asyncio.TimeoutError as e:
            logger.error(f"Image decode timed out after {decode_timeout}s")
            raise ImageDecodeError(
                f"Image decode timed out after {decode_timeout}s"
            ) from e
        except ImageDecodeError as e:
            logger.error(f"Could not process image: {e}")
            raise

        fingerprint = hash_image_array(image, self.hash_size)
        return self.search_fingerprint(fingerprint, threshold)

    def search_fingerprint(self,
                           fingerprint: str,
                           threshold: float = DEFAULT_THRESHOLD) -> List[Match]:
        """
        Rank the catalog against an already computed query fingerprint.

        Raises:
            InvalidQueryError: If the threshold is out of range.
            LengthMismatchError: If the fingerprint does not have the
                length this engine's hash size produces.
        """
        threshold = validate_threshold(threshold)
        fingerprint = validate_fingerprint(fingerprint)
        if len(fingerprint) != self.fingerprint_length:
            raise LengthMismatchError(self.fingerprint_length, len(fingerprint))

        query = SearchQuery(
            fingerprint=fingerprint,
            threshold=threshold,
            result_cap=self.result_cap,
        )
        results = rank_query(query, self.catalog)

        logger.info(
            f"Search complete: {len(self.catalog)} products -> "
            f"{len(results)} results (threshold {threshold:.2f})"
        )
        return results
