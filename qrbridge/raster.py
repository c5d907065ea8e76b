"""Bit matrix -> black/white RGB raster."""

import numpy as np
from PIL import Image

from qrbridge.logging import audit, get_logger, trace
from qrbridge.matrix import BitMatrix

log = get_logger("raster")

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


@trace
def rasterize(matrix: BitMatrix) -> Image.Image:
    """Render *matrix* one pixel per module: set modules black, clear modules white.

    The result is an opaque RGB image with exactly the matrix dimensions.
    """
    if matrix.width <= 0 or matrix.height <= 0:
        raise ValueError(f"Cannot rasterize a {matrix.width}x{matrix.height} matrix")

    arr = np.where(matrix.bits[..., np.newaxis], BLACK, WHITE).astype(np.uint8)
    img = Image.fromarray(arr)
    audit("qr.rasterized", logger=log, image_px=f"{img.size[0]}x{img.size[1]}")
    return img
