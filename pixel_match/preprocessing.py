"""
Bitmap sampling for fingerprinting.

Decodes an arbitrary input image and reduces it to a small fixed grid of
luminance values. The grid is one column wider than it is tall: the
extra column only serves as the right-hand neighbour of the last
comparison in each row.

Resampling uses OpenCV area interpolation on the color image, then each
sample is converted to luminance with the fixed Rec. 601 weights.
"""

import os
import logging
from typing import Optional

import cv2
import numpy as np

from .errors import ImageDecodeError
from .sources import Fetcher, ImageSource, resolve_image_source

logger = logging.getLogger(__name__)

# Grid height; width is always HASH_SIZE + 1.
# Changing this changes the fingerprint length, so catalog fingerprints
# must be rebuilt with the same value.
HASH_SIZE = int(os.environ.get("DHASH_SIZE", "8"))

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8 RGB format (3 channels, no alpha)."""
    if image_np.dtype != np.uint8:
        if image_np.size and image_np.max() <= 1.0:
            image_np = (image_np * 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)

    if image_np.ndim == 2:
        image_np = np.stack([image_np] * 3, axis=-1)
    elif image_np.ndim == 3 and image_np.shape[2] == 1:
        image_np = np.repeat(image_np, 3, axis=2)
    elif image_np.ndim == 3 and image_np.shape[2] == 4:
        image_np = image_np[:, :, :3]

    if image_np.ndim != 3 or image_np.shape[2] != 3:
        raise ValueError(f"Unsupported image shape: {image_np.shape}")
    return np.ascontiguousarray(image_np)


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, BMP, WebP, ...) to RGB.

    Raises:
        ImageDecodeError: If the bytes are empty, corrupt or in an
            unsupported format.
    """
    if not data:
        raise ImageDecodeError("Image data is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageDecodeError(f"Failed to decode image: {e}") from e

    if image is None or image.size == 0:
        raise ImageDecodeError("Failed to decode image: unsupported or corrupt data")

    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


async def load_image(source: ImageSource,
                     fetcher: Optional[Fetcher] = None) -> np.ndarray:
    """Resolve an image source and decode it to an RGB uint8 array."""
    data = await resolve_image_source(source, fetcher=fetcher)
    return decode_image(data)


def compute_luminance(rgb: np.ndarray) -> np.ndarray:
    """
    Convert RGB samples to integer luminance in [0, 255].

    L = round(0.299 R + 0.587 G + 0.114 B), rounding halves up.
    """
    rgb = rgb.astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    luma = r_w * rgb[..., 0] + g_w * rgb[..., 1] + b_w * rgb[..., 2]
    return np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)


def sample_luminance_grid(image_np: np.ndarray,
                          hash_size: int = HASH_SIZE) -> np.ndarray:
    """
    Resample an image to a (hash_size + 1) x hash_size luminance grid.

    Args:
        image_np: RGB (or grayscale / RGBA) image of any size.
        hash_size: Grid height; the width is hash_size + 1.

    Returns:
        uint8 array of shape (hash_size, hash_size + 1).
    """
    if hash_size < 1:
        raise ValueError(f"hash_size must be positive, got {hash_size}")

    image_np = normalize_image(image_np)
    if image_np.shape[0] == 0 or image_np.shape[1] == 0:
        raise ImageDecodeError("Image has no pixels")

    small = cv2.resize(image_np, (hash_size + 1, hash_size),
                       interpolation=cv2.INTER_AREA)
    return compute_luminance(small)
