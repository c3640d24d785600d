"""Pytest configuration and fixtures."""
import base64
import io
import json

import numpy as np
import pytest
from PIL import Image

from app.config import get_settings
from app.vision_client import get_segmentation_client


def gradient_array(width, height):
    """Deterministic RGB test pattern where every pixel is easy to predict."""
    xs = np.arange(width, dtype=np.uint32)[None, :].repeat(height, axis=0)
    ys = np.arange(height, dtype=np.uint32)[:, None].repeat(width, axis=1)
    return np.stack(
        [xs % 256, ys % 256, (xs * 3 + ys * 7) % 256], axis=-1
    ).astype(np.uint8)


def encode_png(array, mode=None):
    buffer = io.BytesIO()
    image = Image.fromarray(array)
    if mode is not None:
        image = image.convert(mode)
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode()


def model_response(box, mask_uri, label="subject", extra=()):
    """Build the JSON array the vision model is prompted to return."""
    entries = [{"box_2d": list(box), "mask": mask_uri, "label": label}]
    entries.extend(extra)
    return json.dumps(entries)


@pytest.fixture
def photo_bytes():
    """400x400 PNG photo with a gradient pattern."""
    return encode_png(gradient_array(400, 400))


@pytest.fixture
def full_mask_png():
    """64x64 mask that is fully opaque."""
    return encode_png(np.full((64, 64), 255, dtype=np.uint8))


@pytest.fixture
def half_mask_png():
    """64x64 mask whose left half is opaque."""
    mask = np.zeros((64, 64), dtype=np.uint8)
    mask[:, :32] = 255
    return encode_png(mask)


@pytest.fixture
def centered_response(full_mask_png):
    """Model response boxing the middle quarter of the image."""
    return model_response([250, 250, 750, 750], png_data_uri(full_mask_png))


@pytest.fixture(autouse=True)
def clear_cached_settings():
    """Reset cached settings and clients so env changes take effect."""
    get_settings.cache_clear()
    get_segmentation_client.cache_clear()
    yield
    get_settings.cache_clear()
    get_segmentation_client.cache_clear()
