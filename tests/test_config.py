import dataclasses

import pytest

from qrbridge.config import DEFAULT_CONFIG, QRConfig


def test_defaults():
    assert DEFAULT_CONFIG.size == 600
    assert DEFAULT_CONFIG.logo_size == 120
    assert DEFAULT_CONFIG.format_name == "JPEG"
    assert DEFAULT_CONFIG.charset == "utf-8"
    assert DEFAULT_CONFIG.ecc == "H"
    assert DEFAULT_CONFIG.margin == 1


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.size = 100


def test_with_overrides_returns_new_record():
    changed = DEFAULT_CONFIG.with_overrides(size=300, logo_size=None, format_name="PNG")

    assert (changed.size, changed.logo_size, changed.format_name) == (300, 120, "PNG")
    assert DEFAULT_CONFIG.size == 600


def test_with_no_overrides_is_identity():
    assert DEFAULT_CONFIG.with_overrides() is DEFAULT_CONFIG
    assert DEFAULT_CONFIG.with_overrides(size=None, logo_size=None) is DEFAULT_CONFIG


@pytest.mark.parametrize("fmt, ext", [("JPEG", "jpg"), ("png", "png"), ("TIFF", "tif"), ("BMP", "bmp")])
def test_extension(fmt, ext):
    assert QRConfig(format_name=fmt).extension == ext


@pytest.mark.parametrize("kwargs", [
    {"size": 0},
    {"logo_size": -5},
    {"ecc": "X"},
    {"margin": -1},
    {"binarizer": "magic"},
])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        QRConfig(**kwargs)
