"""Bit-matrix encoding: content string -> scaled module grid, backed by the ``qrcode`` library."""

from enum import Enum

import numpy as np
import qrcode
import qrcode.constants
from qrcode.exceptions import DataOverflowError

from qrbridge.config import CHARSET
from qrbridge.errors import EncodingError
from qrbridge.logging import audit, get_logger, trace

log = get_logger("matrix")

QR_CODE = "QR_CODE"


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {level.name: level for level in ECCLevel}


class BitMatrix:
    """Immutable rectangular grid of set/clear modules, indexed ``get(x, y)``."""

    __slots__ = ("_bits",)

    def __init__(self, bits):
        arr = np.array(bits, dtype=bool)
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"BitMatrix needs a non-empty 2-D grid, got shape {arr.shape}")
        arr.flags.writeable = False
        self._bits = arr

    @property
    def width(self) -> int:
        return self._bits.shape[1]

    @property
    def height(self) -> int:
        return self._bits.shape[0]

    @property
    def bits(self) -> np.ndarray:
        """Read-only ``(height, width)`` bool array; row index is y."""
        return self._bits

    def get(self, x: int, y: int) -> bool:
        return bool(self._bits[y, x])

    def __eq__(self, other):
        if not isinstance(other, BitMatrix):
            return NotImplemented
        return np.array_equal(self._bits, other._bits)

    def __hash__(self):
        return hash((self._bits.shape, self._bits.tobytes()))

    def __repr__(self):
        return f"BitMatrix({self.width}x{self.height}, set={int(self._bits.sum())})"


def symbol_modules(data: bytes, ecc: str = "H") -> np.ndarray:
    """Raw symbol modules (no quiet zone) for *data* at the given ECC level."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ECC_NAMES[ecc.upper()].value,
        box_size=1,
        border=0,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return np.array(qr.get_matrix(), dtype=bool)


def scale_modules(modules: np.ndarray, width: int, height: int, margin: int) -> np.ndarray:
    """Place *modules* in a ``width`` x ``height`` grid.

    The symbol plus *margin* quiet modules per side is scaled by the largest
    integer multiple that fits and centered. Each output axis is at least
    the quiet-zoned symbol size.
    """
    input_height, input_width = modules.shape
    qr_width = input_width + 2 * margin
    qr_height = input_height + 2 * margin
    output_width = max(width, qr_width)
    output_height = max(height, qr_height)

    multiple = min(output_width // qr_width, output_height // qr_height)
    left = (output_width - input_width * multiple) // 2
    top = (output_height - input_height * multiple) // 2

    out = np.zeros((output_height, output_width), dtype=bool)
    block = np.kron(modules, np.ones((multiple, multiple), dtype=bool))
    out[top:top + block.shape[0], left:left + block.shape[1]] = block
    return out


@trace
def encode_matrix(
    content: str,
    barcode_format: str = QR_CODE,
    width: int = 600,
    height: int = 600,
    ecc: str = "H",
    charset: str = CHARSET,
    margin: int = 1,
) -> BitMatrix:
    """Encode *content* into a ``width`` x ``height`` bit matrix.

    Raises:
        EncodingError: empty content, unsupported format, bad dimensions,
            content not representable in *charset*, or content too long for
            the largest symbol at this ECC level.
    """
    if not content:
        raise EncodingError("Found empty contents")
    if barcode_format != QR_CODE:
        raise EncodingError(f"Can only encode {QR_CODE}, but got {barcode_format}")
    if width < 0 or height < 0:
        raise EncodingError(f"Requested dimensions are too small: {width}x{height}")
    if margin < 0:
        raise EncodingError(f"Margin must be non-negative, got {margin}")
    if ecc.upper() not in ECC_NAMES:
        raise EncodingError(f"Unknown error correction level {ecc!r}")

    try:
        data = content.encode(charset)
    except (UnicodeEncodeError, LookupError) as exc:
        raise EncodingError(f"Content cannot be encoded as {charset}: {exc}") from exc

    # qrcode 8 signals overflow with a ValueError from its version check
    try:
        modules = symbol_modules(data, ecc=ecc)
    except (DataOverflowError, ValueError) as exc:
        raise EncodingError(f"Content too long for a QR symbol at ECC {ecc.upper()} ({len(data)} bytes)") from exc

    matrix = BitMatrix(scale_modules(modules, width, height, margin))
    audit("qr.matrix_encoded", logger=log,
          content=content[:80], symbol=f"{modules.shape[1]}x{modules.shape[0]}",
          matrix=f"{matrix.width}x{matrix.height}", ecc=ecc.upper(), margin=margin)
    return matrix
