"""Shared test fixtures for pixel match tests."""

import numpy as np
import pytest

from pixel_match.catalog import Catalog

from helpers import FULL_HASH, ZERO_HASH, encode_png


@pytest.fixture
def falling_gradient_image():
    """90x80 image whose 9 columns get darker left to right (all dHash bits 1)."""
    img = np.zeros((80, 90, 3), dtype=np.uint8)
    for col in range(9):
        img[:, col * 10:(col + 1) * 10] = 240 - 30 * col
    return img


@pytest.fixture
def rising_gradient_image():
    """90x80 image whose 9 columns get brighter left to right (all dHash bits 0)."""
    img = np.zeros((80, 90, 3), dtype=np.uint8)
    for col in range(9):
        img[:, col * 10:(col + 1) * 10] = 30 * col
    return img


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]
    return img


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def falling_gradient_png(falling_gradient_image):
    return encode_png(falling_gradient_image)


@pytest.fixture
def two_product_catalog():
    """One all-zero and one all-one fingerprint."""
    return Catalog.from_records([
        {"id": 1, "name": "Lamp", "category": "Lighting",
         "imageUrl": "/images/lamp.jpg", "hash": ZERO_HASH},
        {"id": 2, "name": "Chair", "category": "Furniture",
         "imageUrl": "/images/chair.jpg", "hash": FULL_HASH},
    ])
