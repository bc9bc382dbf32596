"""Shared fixtures for the watermark API test suite."""

from io import BytesIO
from typing import Callable, Tuple

import pytest
from PIL import Image

from watermark_api.core.config import get_settings


def encode_image(
    size: Tuple[int, int],
    color=(30, 60, 90),
    fmt: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    return encode_image


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch):
    """The cached settings object; attribute changes are undone after each test."""
    current = get_settings()
    for field in ("api_token", "max_file_size", "max_image_width", "max_image_height"):
        monkeypatch.setattr(current, field, getattr(current, field))
    return current
