"""Mask utility functions for turning model mask images into binary masks."""
import io
import logging
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image

from ..errors import MaskDecodeError

logger = logging.getLogger(__name__)

# The model is prompted for PNG masks; nothing else is sniffed.
MASK_FORMAT = "PNG"

OPAQUE = 255
TRANSPARENT = 0


@dataclass(frozen=True)
class BinaryMask:
    """Single-channel uint8 mask where every value is OPAQUE or TRANSPARENT."""
    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])


def decode_mask_image(mask_bytes: bytes) -> np.ndarray:
    """
    Decode PNG mask bytes into a grayscale intensity array.

    Args:
        mask_bytes: Raw PNG bytes

    Returns:
        uint8 array (H, W); any alpha channel is discarded
    """
    try:
        with Image.open(io.BytesIO(mask_bytes), formats=[MASK_FORMAT]) as image:
            return np.array(image.convert("L"), dtype=np.uint8)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise MaskDecodeError(f"Mask is not a valid {MASK_FORMAT} image") from e


def resize_mask(gray: np.ndarray, target_width: int, target_height: int) -> np.ndarray:
    """
    Resize an intensity mask to exactly (target_width, target_height).

    Aspect ratio is not preserved. INTER_AREA is used when shrinking and
    INTER_LINEAR when enlarging.
    """
    if target_width < 1 or target_height < 1:
        raise ValueError(f"Target size must be positive, got {target_width}x{target_height}")

    src_height, src_width = gray.shape[:2]
    if (src_width, src_height) == (target_width, target_height):
        return gray.copy()

    shrinking = target_width * target_height < src_width * src_height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR

    return cv2.resize(gray, (target_width, target_height), interpolation=interpolation)


def binarize(gray: np.ndarray, threshold: float) -> np.ndarray:
    """
    Threshold an intensity mask.

    Args:
        gray: uint8 intensity array
        threshold: Cutoff as a percentage of max intensity (0-100)

    Returns:
        uint8 array with OPAQUE where intensity >= cutoff, TRANSPARENT elsewhere
    """
    if not 0 <= threshold <= 100:
        raise ValueError(f"Threshold must be a percentage in [0, 100], got {threshold}")

    cutoff = threshold / 100.0 * 255
    return np.where(gray >= cutoff, OPAQUE, TRANSPARENT).astype(np.uint8)


def rasterize_mask(
    mask_bytes: bytes,
    target_width: int,
    target_height: int,
    threshold: float = 50.0
) -> BinaryMask:
    """
    Convert the model's mask image into a box-sized binary mask.

    Args:
        mask_bytes: PNG bytes decoded from the model's data URI
        target_width: Pixel box width
        target_height: Pixel box height
        threshold: Binarization cutoff, percent of max intensity

    Returns:
        BinaryMask of exactly target_width x target_height
    """
    gray = decode_mask_image(mask_bytes)
    src_height, src_width = gray.shape[:2]

    resized = resize_mask(gray, target_width, target_height)
    mask = binarize(resized, threshold)

    logger.debug(
        f"Rasterized {src_width}x{src_height} mask to {target_width}x{target_height} "
        f"({int(np.count_nonzero(mask))} opaque pixels)"
    )
    return BinaryMask(data=mask)
