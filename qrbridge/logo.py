"""Logo compositing: paste a logo in the middle of a QR raster with a rounded border."""

from pathlib import Path

from PIL import Image, ImageDraw, UnidentifiedImageError

from qrbridge.config import DEFAULT_CONFIG, QRConfig
from qrbridge.errors import ResourceMissingError
from qrbridge.logging import audit, get_logger, trace

log = get_logger("logo")

# Border is drawn at this multiple of the final resolution, then downscaled
SUPERSAMPLE = 4


def clamp_logo_size(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Cap each axis at *max_size* on its own.

    Aspect ratio is not preserved: a 300x80 logo with max 120 becomes 120x80.
    """
    return min(width, max_size), min(height, max_size)


def logo_position(canvas_size: tuple[int, int], logo_size: tuple[int, int]) -> tuple[int, int]:
    """Top-left corner that centers *logo_size* on *canvas_size*."""
    return (canvas_size[0] - logo_size[0]) // 2, (canvas_size[1] - logo_size[1]) // 2


def _skip_missing(path: str, reason: str, config: QRConfig, exc: Exception | None = None):
    if config.strict_logo:
        raise ResourceMissingError(f"{path}: {reason}") from exc
    log.warning("Logo %s %s; encoding without logo", path, reason)
    audit("logo.missing", logger=log, path=path, reason=reason)


def load_logo(path: Path) -> Image.Image:
    """Open a logo image as RGBA, forcing the pixel data to load now."""
    with Image.open(path) as img:
        img.load()
        return img.convert("RGBA")


def draw_rounded_border(
    image: Image.Image,
    box: tuple[int, int, int, int],
    width: int = 10,
    radius: int = 6,
    color: tuple[int, int, int] = (255, 255, 255),
):
    """Stroke an anti-aliased rounded rectangle centered on the edges of *box*.

    *box* is ``(x, y, w, h)``; the stroke straddles the box outline, half
    inside and half outside, and *radius* is the corner radius of the outline.
    """
    if width <= 0:
        return
    x, y, w, h = box
    s = SUPERSAMPLE
    pad = width // 2 + 1

    # Local canvas around the box, at supersampled resolution
    origin_x, origin_y = x - pad, y - pad
    region_w, region_h = w + 2 * pad, h + 2 * pad
    mask = Image.new("L", (region_w * s, region_h * s), 0)
    draw = ImageDraw.Draw(mask)

    half = width * s // 2
    outer = [pad * s - half, pad * s - half,
             (pad + w) * s + half - 1, (pad + h) * s + half - 1]
    draw.rounded_rectangle(outer, radius=radius * s + half, outline=255, width=width * s)

    mask = mask.resize((region_w, region_h), Image.LANCZOS)
    image.paste(color, (origin_x, origin_y, origin_x + region_w, origin_y + region_h), mask)


@trace
def insert_logo(
    image: Image.Image,
    logo_path: str | Path | None,
    compress: bool = True,
    config: QRConfig = DEFAULT_CONFIG,
) -> None:
    """Draw the logo at *logo_path* centered on *image*, in place.

    No path means no logo. A path that does not exist or is not an image is
    logged and skipped, unless ``config.strict_logo`` is set, in which case
    :class:`ResourceMissingError` is raised.

    Args:
        image: QR raster to modify (RGB).
        logo_path: Logo image file.
        compress: Cap the logo at ``config.logo_size`` per axis, resampling
            with an area-averaging filter.
        config: Logo size cap and border style.
    """
    if logo_path is None or str(logo_path) == "":
        return

    path = Path(logo_path)
    if not path.is_file():
        _skip_missing(str(logo_path), "does not exist", config)
        return
    try:
        logo = load_logo(path)
    except (UnidentifiedImageError, OSError) as exc:
        _skip_missing(str(logo_path), f"is not a readable image ({exc})", config, exc)
        return

    original_size = logo.size
    width, height = original_size
    if compress:
        width, height = clamp_logo_size(width, height, config.logo_size)
        if (width, height) != original_size:
            logo = logo.resize((width, height), Image.BOX)

    x, y = logo_position(image.size, (width, height))
    image.paste(logo, (x, y), logo)
    draw_rounded_border(
        image, (x, y, width, height),
        width=config.logo_border_width,
        radius=config.logo_corner_radius,
        color=config.logo_border_color,
    )

    audit("logo.composited", logger=log,
          path=str(logo_path),
          logo_size=f"{original_size[0]}x{original_size[1]}",
          placed=f"{width}x{height}@{x},{y}",
          compressed=compress)
