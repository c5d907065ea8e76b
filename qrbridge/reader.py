"""Binarization and matrix decoding over luminance views.

Decoding tries ZBar (via pyzbar) first and falls back to OpenCV's QR
detector; the first scanner that returns data wins.
"""

import time

import cv2
import numpy as np
from pyzbar.pyzbar import ZBarSymbol, decode as pyzbar_decode

from qrbridge.config import CHARSET
from qrbridge.errors import DecodeError
from qrbridge.logging import audit, get_logger, trace
from qrbridge.luminance import LuminanceSource

log = get_logger("reader")

ADAPTIVE_BLOCK_SIZE = 51
ADAPTIVE_C = 10


def _window_array(source: LuminanceSource) -> np.ndarray:
    to_array = getattr(source, "to_array", None)
    if to_array is not None:
        return to_array()
    return np.frombuffer(source.get_matrix(), dtype=np.uint8).reshape(source.height, source.width).copy()


@trace
def binarize(source: LuminanceSource, method: str = "otsu") -> np.ndarray:
    """Threshold a luminance view into a 2-D uint8 grid of 0 (dark) and 255 (light).

    Args:
        source: Any luminance view.
        method: "otsu" for a global histogram threshold, or "adaptive" for a
            local mean threshold that copes with uneven lighting.
    """
    gray = _window_array(source)
    if method == "otsu":
        _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    elif method == "adaptive":
        block = min(ADAPTIVE_BLOCK_SIZE, (min(gray.shape) // 2) * 2 + 1)
        if block < 3:
            _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        else:
            binary = cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C,
                                           cv2.THRESH_BINARY, block, ADAPTIVE_C)
    else:
        raise ValueError(f"Unknown binarization method {method!r}")
    return binary


def scan_zbar(binarized: np.ndarray, charset: str = CHARSET) -> str | None:
    """Return the first QR payload ZBar finds, or None."""
    results = pyzbar_decode(binarized, symbols=[ZBarSymbol.QRCODE])
    if not results:
        return None
    return results[0].data.decode(charset)


def scan_opencv(binarized: np.ndarray, charset: str = CHARSET) -> str | None:
    """Return the QR payload OpenCV finds, or None.

    OpenCV always yields text, so *charset* is accepted for a uniform
    scanner signature only.
    """
    detector = cv2.QRCodeDetector()
    data, _points, _ = detector.detectAndDecode(binarized)
    return data or None


SCANNERS = (("zbar", scan_zbar), ("opencv", scan_opencv))


@trace
def decode_matrix(binarized: np.ndarray, charset: str = CHARSET) -> str:
    """Locate and read a QR symbol in a binarized grid.

    Raises:
        DecodeError: no scanner could read a symbol.
    """
    errors = []
    for name, scanner in SCANNERS:
        start = time.perf_counter()
        try:
            text = scanner(binarized, charset)
        except (UnicodeDecodeError, cv2.error) as exc:
            elapsed = (time.perf_counter() - start) * 1000
            audit("scan.failed", logger=log, decoder=name, error=str(exc), time_ms=round(elapsed, 1))
            errors.append(f"{name}: {exc}")
            continue
        elapsed = (time.perf_counter() - start) * 1000
        if text is not None:
            audit("scan.decoded", logger=log, decoder=name, time_ms=round(elapsed, 1), data=text[:80])
            return text
        audit("scan.failed", logger=log, decoder=name, error="No QR code detected", time_ms=round(elapsed, 1))
        errors.append(f"{name}: no QR code detected")
    raise DecodeError("No QR code found (" + "; ".join(errors) + ")")
