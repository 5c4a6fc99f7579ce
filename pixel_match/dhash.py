"""
Difference hash (dHash) encoder.

For each row of the luminance grid, compares every sample with its right
neighbour and emits 1 when the left one is brighter. Only the sign of the
horizontal gradient is kept, so a uniform brightness shift leaves the
fingerprint unchanged while structural edges change it.

Bits are taken row-major (left to right, top to bottom) and packed four at
a time, high bit first, into lowercase hex digits. Catalog fingerprints
are built with the same ordering, so it must not change.
"""

import logging
from typing import Optional

import numpy as np

from .preprocessing import HASH_SIZE, load_image, sample_luminance_grid
from .sources import Fetcher, ImageSource

logger = logging.getLogger(__name__)


def fingerprint_length(hash_size: int = HASH_SIZE) -> int:
    """Number of hex digits produced for a given grid height."""
    return (hash_size * hash_size) // 4


def compute_difference_bits(grid: np.ndarray) -> np.ndarray:
    """
    Compare horizontally adjacent samples of a luminance grid.

    Args:
        grid: 2-D array of shape (H, H + 1).

    Returns:
        Flat bool array of H * H bits in row-major order.
    """
    grid = np.asarray(grid)
    if grid.ndim != 2 or grid.shape[1] != grid.shape[0] + 1:
        raise ValueError(
            f"Luminance grid must have shape (H, H + 1), got {grid.shape}"
        )
    # Signed compare so uint8 inputs never wrap.
    grid = grid.astype(np.int16)
    return (grid[:, :-1] > grid[:, 1:]).flatten()


def bits_to_hex(bits: np.ndarray) -> str:
    """Pack bits into hex digits, four bits per digit, high bit first."""
    bits = np.asarray(bits, dtype=np.uint8).flatten()
    if bits.size % 4 != 0:
        raise ValueError(f"Bit count must be a multiple of 4, got {bits.size}")

    nibbles = bits.reshape(-1, 4) @ np.array([8, 4, 2, 1], dtype=np.uint8)
    return "".join(format(int(n), "x") for n in nibbles)


def compute_dhash(grid: np.ndarray) -> str:
    """Fingerprint a (H, H + 1) luminance grid."""
    return bits_to_hex(compute_difference_bits(grid))


def hash_image_array(image_np: np.ndarray, hash_size: int = HASH_SIZE) -> str:
    """Fingerprint a decoded image of any size."""
    return compute_dhash(sample_luminance_grid(image_np, hash_size))


async def hash_image(source: ImageSource,
                     fetcher: Optional[Fetcher] = None,
                     hash_size: int = HASH_SIZE) -> str:
    """
    Load an image from any supported source and fingerprint it.

    Raises:
        ImageDecodeError: If the source cannot be resolved or decoded.
    """
    image = await load_image(source, fetcher=fetcher)
    return hash_image_array(image, hash_size)
