"""
pixel_match — Perceptual-hash visual product search.

Fingerprints a query image with a 64-bit difference hash and ranks a
catalog of precomputed product fingerprints by Hamming similarity.

Modules:
    engine         Main SearchEngine class
    preprocessing  Image decoding and luminance grid sampling
    dhash          Difference-hash fingerprint encoder
    scoring        Hamming distance and similarity scoring
    matcher        Threshold filtering and ranking of a catalog
    catalog        Immutable catalog handle and JSON loader
    index_builder  Offline catalog fingerprint construction
    sources        Image source resolution (bytes, files, URLs)
    errors         Exception types
"""

from .catalog import Catalog, load_catalog
from .engine import SearchEngine
from .errors import (
    CatalogError, ImageDecodeError, InvalidQueryError, LengthMismatchError,
    MalformedFingerprintError, PixelMatchError,
)
from .models import Match, Product, SearchQuery

__version__ = "1.0.0"

__all__ = [
    "Catalog", "load_catalog", "SearchEngine",
    "CatalogError", "ImageDecodeError", "InvalidQueryError",
    "LengthMismatchError", "MalformedFingerprintError", "PixelMatchError",
    "Match", "Product", "SearchQuery",
]
