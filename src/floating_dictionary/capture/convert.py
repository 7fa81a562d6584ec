"""Pixel format conversion utilities.

Captured regions are kept as numpy arrays in BGRA order, the layout the
screenshot backends' PNGs are normalised to. These helpers convert between
that layout and what Pillow and Tesseract consume.
"""

import numpy as np
from numpy.typing import NDArray

# Type alias for BGRA frame (height, width, 4 channels)
BGRAFrame = NDArray[np.uint8]


def pil_to_bgra(image) -> BGRAFrame:
    """Convert a PIL Image of any mode to a BGRA numpy array.

    Args:
        image: PIL Image (RGB, RGBA, L, P, ...).

    Returns:
        numpy array of shape (H, W, 4) in BGRA format.
    """
    rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    # R=0, G=1, B=2, A=3 -> B, G, R, A
    return np.ascontiguousarray(rgba[:, :, [2, 1, 0, 3]])


def bgra_to_rgb(frame: BGRAFrame) -> NDArray[np.uint8]:
    """Convert BGRA numpy array to RGB numpy array.

    Args:
        frame: numpy array of shape (H, W, 4) in BGRA format.

    Returns:
        numpy array of shape (H, W, 3) in RGB format.
    """
    rgb = frame[:, :, [2, 1, 0]]
    return np.ascontiguousarray(rgb)


def bgra_to_rgb_pil(frame: BGRAFrame):
    """Convert BGRA numpy array to PIL RGB Image (what pytesseract takes)."""
    from PIL import Image

    return Image.fromarray(bgra_to_rgb(frame))
