"""Constants and image helpers shared by the test modules."""

import numpy as np
import cv2

ZERO_HASH = "0000000000000000"
FULL_HASH = "ffffffffffffffff"


def encode_png(image_rgb: np.ndarray) -> bytes:
    """Encode an RGB array as PNG bytes."""
    ok, buf = cv2.imencode(".png", cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return buf.tobytes()
