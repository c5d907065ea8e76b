import numpy as np

from qrbridge.matrix import BitMatrix, encode_matrix
from qrbridge.raster import rasterize


def test_set_modules_are_black_and_clear_modules_white():
    img = rasterize(BitMatrix([[True, False], [False, True]]))

    assert img.mode == "RGB"
    assert img.size == (2, 2)
    assert img.getpixel((0, 0)) == (0, 0, 0)
    assert img.getpixel((1, 0)) == (255, 255, 255)
    assert img.getpixel((0, 1)) == (255, 255, 255)
    assert img.getpixel((1, 1)) == (0, 0, 0)


def test_raster_keeps_matrix_dimensions():
    img = rasterize(BitMatrix(np.zeros((2, 3), dtype=bool)))
    assert img.size == (3, 2)


def test_rasterization_is_repeatable():
    matrix = encode_matrix("repeat me", width=120, height=120)
    assert rasterize(matrix).tobytes() == rasterize(matrix).tobytes()


def test_raster_matches_matrix_pixel_for_pixel():
    matrix = encode_matrix("pixel exact", width=150, height=150)
    gray = np.array(rasterize(matrix).convert("L"))
    assert np.array_equal(gray, np.where(matrix.bits, 0, 255))
