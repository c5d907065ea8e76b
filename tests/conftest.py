"""Shared fixtures: synthetic logos and images built on the fly."""

import logging

import numpy as np
import pytest
from PIL import Image

RED = (220, 20, 20)


def is_red(pixel) -> bool:
    r, g, b = pixel[:3]
    return r > 180 and g < 80 and b < 80


@pytest.fixture
def make_logo(tmp_path):
    """Write a solid-color logo of the given size and return its path."""
    def _make(width: int, height: int, color=RED, name: str = "logo.png"):
        path = tmp_path / name
        Image.new("RGB", (width, height), color).save(path)
        return path
    return _make


@pytest.fixture
def gradient():
    """7x5 grayscale image whose pixel (x, y) has value 10*y + x."""
    arr = (np.arange(5)[:, None] * 10 + np.arange(7)[None, :]).astype(np.uint8)
    return arr, Image.fromarray(arr)


@pytest.fixture
def qrbridge_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="qrbridge")
    return caplog


def close_to(pixel, color, tol: int = 6) -> bool:
    return all(abs(a - b) <= tol for a, b in zip(pixel[:3], color))
