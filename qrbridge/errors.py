"""Exception types raised by qrbridge."""


class QRBridgeError(Exception):
    """Base class for all qrbridge errors."""


class OutOfBoundsError(QRBridgeError, ValueError):
    """A crop window does not fit inside the source raster."""


class IndexOutOfRangeError(QRBridgeError, IndexError):
    """A row outside the luminance window was requested."""


class EncodingError(QRBridgeError):
    """The content could not be turned into a bit matrix."""


class DecodeError(QRBridgeError):
    """The source is not an image, or no readable symbol was found in it."""


class ResourceMissingError(QRBridgeError):
    """A logo resource is missing or unreadable (only raised in strict mode)."""
