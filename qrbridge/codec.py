"""Encode text to QR code images and decode QR code images back to text.

Encode: content -> bit matrix -> RGB raster -> (logo) -> image file/stream.
Decode: image -> luminance view -> binarized grid -> text.

All settings arrive through a :class:`~qrbridge.config.QRConfig`; nothing is
shared between calls.
"""

import time
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from qrbridge.config import DEFAULT_CONFIG, QRConfig
from qrbridge.errors import DecodeError
from qrbridge.logging import audit, get_logger, trace
from qrbridge.logo import insert_logo
from qrbridge.luminance import ImageLuminanceSource
from qrbridge.matrix import QR_CODE, encode_matrix
from qrbridge.raster import rasterize
from qrbridge.reader import binarize, decode_matrix

log = get_logger("codec")

# Upright plus three quarter turns
MAX_ROTATIONS = 3


@trace
def create_image(
    content: str,
    logo_path: str | Path | None = None,
    compress_logo: bool = True,
    config: QRConfig = DEFAULT_CONFIG,
) -> Image.Image:
    """Build the QR raster for *content* in memory, with the optional logo applied."""
    matrix = encode_matrix(
        content, QR_CODE, config.size, config.size,
        ecc=config.ecc, charset=config.charset, margin=config.margin,
    )
    image = rasterize(matrix)
    insert_logo(image, logo_path, compress=compress_logo, config=config)
    return image


def default_destination(config: QRConfig = DEFAULT_CONFIG) -> Path:
    """``<output_dir>/<epoch millis>.<ext>``"""
    return Path(config.output_dir) / f"{time.time_ns() // 1_000_000}.{config.extension}"


@trace
def encode(
    content: str,
    logo_path: str | Path | None = None,
    destination: str | Path | BinaryIO | None = None,
    compress_logo: bool = True,
    size: int | None = None,
    logo_size: int | None = None,
    config: QRConfig | None = None,
) -> Path | None:
    """Encode *content* as a QR code image and write it out.

    Args:
        content: Text to encode.
        logo_path: Optional logo to place in the middle.
        destination: File path, or a writable binary stream. Defaults to a
            timestamp-named file under ``config.output_dir``; missing parent
            directories are created.
        compress_logo: Cap the logo at ``logo_size`` per axis.
        size: Override ``config.size`` for this call.
        logo_size: Override ``config.logo_size`` for this call.
        config: Base settings (``DEFAULT_CONFIG`` if omitted).

    Returns:
        The written path, or None when writing to a stream.

    Raises:
        EncodingError: the content cannot be encoded.
        OSError: the destination cannot be created or written.
    """
    config = (config or DEFAULT_CONFIG).with_overrides(size=size, logo_size=logo_size)
    image = create_image(content, logo_path, compress_logo=compress_logo, config=config)

    if destination is None:
        destination = default_destination(config)

    if hasattr(destination, "write"):
        image.save(destination, format=config.format_name)
        audit("qr.saved", logger=log, target="<stream>", format=config.format_name,
              image_px=f"{image.size[0]}x{image.size[1]}")
        return None

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format=config.format_name)
    audit("qr.saved", logger=log, target=str(path.resolve()), format=config.format_name,
          image_px=f"{image.size[0]}x{image.size[1]}")
    return path


def load_image(source: str | Path | BinaryIO | Image.Image) -> Image.Image:
    """Open *source* as a fully loaded PIL image.

    Raises:
        DecodeError: the source cannot be read or is not an image.
    """
    if isinstance(source, Image.Image):
        return source
    try:
        with Image.open(source) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"Cannot read image from {source!r}: {exc}") from exc


@trace
def decode(source: str | Path | BinaryIO | Image.Image, config: QRConfig = DEFAULT_CONFIG) -> str:
    """Read the QR code in *source* and return its text.

    With ``config.try_harder`` the luminance view is also tried rotated by
    each quarter turn before giving up.

    Raises:
        DecodeError: the source is not an image or holds no readable symbol.
    """
    luminance = ImageLuminanceSource(load_image(source))
    attempts = 1 + (MAX_ROTATIONS if config.try_harder and luminance.is_rotate_supported() else 0)

    for rotation in range(attempts):
        if rotation:
            luminance = luminance.rotate_counter_clockwise()
        try:
            text = decode_matrix(binarize(luminance, config.binarizer), charset=config.charset)
        except DecodeError as exc:
            last_error = exc
            continue
        audit("qr.decoded", logger=log, data=text[:80], rotations=rotation,
              image_px=f"{luminance.source_width}x{luminance.source_height}")
        return text
    raise last_error


def try_decode(source: str | Path | BinaryIO | Image.Image, config: QRConfig = DEFAULT_CONFIG) -> str | None:
    """Like :func:`decode`, but returns None instead of raising DecodeError."""
    try:
        return decode(source, config=config)
    except DecodeError:
        return None
