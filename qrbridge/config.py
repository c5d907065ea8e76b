"""Per-call configuration for encoding and decoding."""

import dataclasses
from dataclasses import dataclass

DEFAULT_QRCODE_SIZE = 600
DEFAULT_LOGO_SIZE = 120
DEFAULT_FORMAT_NAME = "JPEG"
CHARSET = "utf-8"

ECC_LETTERS = ("L", "M", "Q", "H")
BINARIZERS = ("otsu", "adaptive")

# Pillow format name -> conventional file suffix, where they differ
_EXTENSIONS = {"JPEG": "jpg", "TIFF": "tif"}


@dataclass(frozen=True)
class QRConfig:
    """Settings for one encode or decode call.

    Instances are immutable; use :meth:`with_overrides` to derive a variant
    instead of mutating shared state.
    """

    size: int = DEFAULT_QRCODE_SIZE
    logo_size: int = DEFAULT_LOGO_SIZE
    format_name: str = DEFAULT_FORMAT_NAME
    charset: str = CHARSET
    ecc: str = "H"
    margin: int = 1
    output_dir: str = "output"
    logo_border_width: int = 10
    logo_corner_radius: int = 6
    logo_border_color: tuple[int, int, int] = (255, 255, 255)
    strict_logo: bool = False
    try_harder: bool = True
    binarizer: str = "otsu"

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.logo_size <= 0:
            raise ValueError(f"logo_size must be positive, got {self.logo_size}")
        if self.ecc.upper() not in ECC_LETTERS:
            raise ValueError(f"ecc must be one of {ECC_LETTERS}, got {self.ecc!r}")
        if self.margin < 0:
            raise ValueError(f"margin must be non-negative, got {self.margin}")
        if self.binarizer not in BINARIZERS:
            raise ValueError(f"binarizer must be one of {BINARIZERS}, got {self.binarizer!r}")

    @property
    def extension(self) -> str:
        fmt = self.format_name.upper()
        return _EXTENSIONS.get(fmt, fmt.lower())

    def with_overrides(self, size: int | None = None, logo_size: int | None = None, **changes) -> "QRConfig":
        """Return a copy with the given fields replaced; ``None`` sizes keep the current value."""
        if size is not None:
            changes["size"] = size
        if logo_size is not None:
            changes["logo_size"] = logo_size
        if not changes:
            return self
        return dataclasses.replace(self, **changes)


DEFAULT_CONFIG = QRConfig()
