"""
Offline catalog fingerprint construction.

Reads the base product file, fingerprints each product image with the
same encoder used for queries, and writes the records back out with
their ``hash`` field filled in. The output is the precomputed catalog
loaded by catalog.load_catalog().

A product whose image cannot be hashed keeps whatever fingerprint it
already had; one bad image never aborts the batch.
"""

import os
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .catalog import read_records
from .dhash import hash_image
from .errors import ImageDecodeError
from .preprocessing import HASH_SIZE
from .sources import Fetcher, REMOTE_SCHEMES

logger = logging.getLogger(__name__)


def resolve_image_location(image_url: str, image_dir: Optional[str] = None) -> str:
    """
    Resolve a product's image reference to a path or URL.

    Site-root paths such as ``/images/lamp.jpg`` are looked up under
    image_dir unless they exist as absolute filesystem paths.
    """
    if (not image_dir or image_url.lower().startswith(REMOTE_SCHEMES)
            or image_url.startswith("data:")):
        return image_url
    if os.path.isabs(image_url) and os.path.exists(image_url):
        return image_url
    return os.path.join(image_dir, image_url.lstrip("/"))


async def fingerprint_records(records: List[Mapping[str, Any]],
                              image_dir: Optional[str] = None,
                              fetcher: Optional[Fetcher] = None,
                              hash_size: int = HASH_SIZE
                              ) -> Tuple[List[Dict[str, Any]], int]:
    """
    Compute fingerprints for product records, one image at a time.

    Args:
        records: Product records with an ``imageUrl`` field.
        image_dir: Base directory for relative image paths.
        fetcher: Async callable for http(s) image URLs.
        hash_size: Luminance grid height.

    Returns:
        Tuple of (updated records, error count). Records are copies;
        the input is not modified. Entries that are not objects are
        dropped from the output and counted as errors.
    """
    updated = []
    errors = 0
    total = len(records)

    logger.info(f"Fingerprinting {total} products")

    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning(f"Skipping product record {i}: not an object")
            errors += 1
            continue

        product = dict(record)
        image_url = product.get("imageUrl") or product.get("image_url")

        try:
            if not image_url:
                raise ImageDecodeError("record has no imageUrl")
            location = resolve_image_location(str(image_url), image_dir)
            product["hash"] = await hash_image(location, fetcher=fetcher,
                                               hash_size=hash_size)
        except ImageDecodeError as e:
            logger.warning(f"Error hashing product {product.get('id')}: {e}")
            errors += 1

        updated.append(product)

        if (i + 1) % 100 == 0:
            logger.info(f"Processed {i + 1}/{total} products")

    return updated, errors


async def build_catalog(products_path: str,
                        output_path: str,
                        image_dir: Optional[str] = None,
                        fetcher: Optional[Fetcher] = None,
                        hash_size: int = HASH_SIZE) -> dict:
    """
    Build a precomputed fingerprint catalog from a base product file.

    Args:
        products_path: JSON array of product records.
        output_path: Where to write the fingerprinted records.
        image_dir: Base directory for relative image paths. Defaults to
            the directory containing products_path.
        fetcher: Async callable for http(s) image URLs.
        hash_size: Luminance grid height.

    Returns:
        Dict with 'success', 'processed', 'hashed', 'errors' and
        'output_path'.
    """
    records = read_records(products_path)
    if not records:
        return {"success": False, "error": "No products to process"}

    if image_dir is None:
        image_dir = os.path.dirname(os.path.abspath(products_path))

    updated, errors = await fingerprint_records(
        records, image_dir=image_dir, fetcher=fetcher, hash_size=hash_size
    )

    out_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(updated, f, indent=2)

    hashed = len(records) - errors
    logger.info(
        f"Catalog built: {len(updated)} products, {hashed} hashed, "
        f"{errors} errors -> {output_path}"
    )

    return {
        "success": True,
        "processed": len(records),
        "hashed": hashed,
        "errors": errors,
        "output_path": output_path,
    }
