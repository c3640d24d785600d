"""Image utility functions for decoding, resizing and encoding photos."""
import io
import logging
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps

from ..errors import ImageDecodeError

logger = logging.getLogger(__name__)


@dataclass
class SourceImage:
    """Decoded, pre-resized RGB photo for a single request."""
    image: Image.Image
    original_size: Tuple[int, int]

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def scale_factor(self) -> float:
        """Ratio of the working size to the uploaded size."""
        return self.width / self.original_size[0]

    def close(self) -> None:
        self.image.close()


def resize_image_if_needed(image: Image.Image, max_size: int = 1024) -> Tuple[Image.Image, float]:
    """Resize image if larger than max_size, return image and scale factor."""
    w, h = image.size
    max_dim = max(w, h)

    if max_dim <= max_size:
        return image, 1.0

    scale = max_size / max_dim
    new_w = max(1, round(w * scale))
    new_h = max(1, round(h * scale))

    logger.info(f"Resizing image from {w}x{h} to {new_w}x{new_h}")
    return image.resize((new_w, new_h), Image.Resampling.LANCZOS), scale


def load_source_image(image_bytes: bytes, max_dimension: int = 1024) -> SourceImage:
    """
    Decode uploaded bytes into an upright, RGB, size-bounded SourceImage.

    Args:
        image_bytes: Raw upload bytes
        max_dimension: Cap on the longest side after resizing

    Returns:
        SourceImage ready for the model and the compositor
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as opened:
            upright = ImageOps.exif_transpose(opened)
            rgb = upright.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError("Uploaded file is not a valid image") from e

    original_size = rgb.size
    resized, _ = resize_image_if_needed(rgb, max_dimension)

    logger.info(f"Loaded image: {original_size[0]}x{original_size[1]} -> {resized.width}x{resized.height}")
    return SourceImage(image=resized, original_size=original_size)


def encode_image(image: Image.Image, format: str = "PNG", **params) -> bytes:
    """Encode a PIL image into bytes in the given format."""
    buffer = io.BytesIO()
    image.save(buffer, format=format, **params)
    return buffer.getvalue()


def encode_jpeg(image: Image.Image, quality: int = 80) -> bytes:
    """Encode an RGB image as JPEG for upload to the vision model."""
    return encode_image(image, format="JPEG", quality=quality)
