"""Grayscale luminance views over images, with crop and rotate.

A view is a window ``(left, top, width, height)`` over a single-channel
``uint8`` buffer that covers the whole source image. Cropping composes
windows over the same buffer; rotating builds a new buffer.
"""

from typing import Protocol, runtime_checkable

import numpy as np
from PIL import Image

from qrbridge.errors import IndexOutOfRangeError, OutOfBoundsError

WHITE = 255


@runtime_checkable
class LuminanceSource(Protocol):
    """What a binarizer needs from a grayscale sampling surface."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def get_row(self, y: int) -> bytes: ...

    def get_matrix(self) -> bytes: ...

    def is_crop_supported(self) -> bool: ...

    def crop(self, left: int, top: int, width: int, height: int) -> "LuminanceSource": ...

    def is_rotate_supported(self) -> bool: ...

    def rotate_counter_clockwise(self) -> "LuminanceSource": ...


def to_grayscale(image: Image.Image) -> np.ndarray:
    """Convert *image* to a ``(height, width)`` uint8 luminance array.

    Fully transparent pixels become white before conversion; any remaining
    partial alpha is dropped. The input image is left untouched.
    """
    if image.has_transparency_data:
        rgba = np.array(image.convert("RGBA"))
        rgba[rgba[..., 3] == 0] = WHITE
        image = Image.fromarray(np.ascontiguousarray(rgba[..., :3]))
    return np.array(image.convert("L"), dtype=np.uint8)


class ImageLuminanceSource:
    """Croppable, rotatable grayscale window over a PIL image.

    Args:
        image: Any PIL image; converted once to a full-size grayscale buffer.
        left, top: Window offset inside the image.
        width, height: Window size; defaults to the rest of the image.

    Raises:
        OutOfBoundsError: the window does not fit inside the image.
    """

    def __init__(self, image: Image.Image, left: int = 0, top: int = 0,
                 width: int | None = None, height: int | None = None):
        self._set_window(to_grayscale(image), left, top, width, height)

    @classmethod
    def from_luminance(cls, buffer: np.ndarray, left: int = 0, top: int = 0,
                       width: int | None = None, height: int | None = None) -> "ImageLuminanceSource":
        """Wrap an existing 2-D uint8 luminance buffer without copying it."""
        if buffer.ndim != 2 or buffer.dtype != np.uint8:
            raise ValueError(f"Expected a 2-D uint8 buffer, got {buffer.dtype} with shape {buffer.shape}")
        source = cls.__new__(cls)
        source._set_window(buffer, left, top, width, height)
        return source

    def _set_window(self, buffer, left, top, width, height):
        source_height, source_width = buffer.shape
        if width is None:
            width = source_width - left
        if height is None:
            height = source_height - top
        if left < 0 or top < 0 or width <= 0 or height <= 0:
            raise OutOfBoundsError(
                f"Invalid crop rectangle left={left} top={top} width={width} height={height}")
        if left + width > source_width or top + height > source_height:
            raise OutOfBoundsError("Crop rectangle does not fit within image data.")
        self._buffer = buffer
        self._left = left
        self._top = top
        self._width = width
        self._height = height

    @property
    def left(self) -> int:
        return self._left

    @property
    def top(self) -> int:
        return self._top

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def source_width(self) -> int:
        return self._buffer.shape[1]

    @property
    def source_height(self) -> int:
        return self._buffer.shape[0]

    @property
    def buffer(self) -> np.ndarray:
        """The shared full-source buffer (not a copy)."""
        return self._buffer

    def get_row(self, y: int) -> bytes:
        if y < 0 or y >= self._height:
            raise IndexOutOfRangeError(f"Requested row is outside the image: {y}")
        row = self._top + y
        return self._buffer[row, self._left:self._left + self._width].tobytes()

    def get_matrix(self) -> bytes:
        """All window samples in row-major order."""
        return self.to_array().tobytes()

    def to_array(self) -> np.ndarray:
        return self._buffer[self._top:self._top + self._height,
                            self._left:self._left + self._width].copy()

    def is_crop_supported(self) -> bool:
        return True

    def crop(self, left: int, top: int, width: int, height: int) -> "ImageLuminanceSource":
        """Sub-window relative to this one, sharing the same buffer."""
        return ImageLuminanceSource.from_luminance(
            self._buffer, self._left + left, self._top + top, width, height)

    def is_rotate_supported(self) -> bool:
        return True

    def rotate_counter_clockwise(self) -> "ImageLuminanceSource":
        """Rotate the whole source 90 degrees counter-clockwise and carry the window along.

        A pixel at ``(x, y)`` moves to ``(y, source_width - 1 - x)``.
        """
        rotated = np.ascontiguousarray(np.rot90(self._buffer))
        return ImageLuminanceSource.from_luminance(
            rotated,
            left=self._top,
            top=self.source_width - (self._left + self._width),
            width=self._height,
            height=self._width,
        )

    def __repr__(self):
        return (f"ImageLuminanceSource(left={self._left}, top={self._top}, "
                f"width={self._width}, height={self._height}, "
                f"source={self.source_width}x{self.source_height})")
