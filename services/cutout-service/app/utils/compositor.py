"""Alpha compositing of a binary mask onto the source photo."""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .geometry import PixelBox
from .image_utils import encode_image
from .mask_utils import BinaryMask, TRANSPARENT

logger = logging.getLogger(__name__)


@dataclass
class CutoutImage:
    """Cropped RGBA cutout and the pixel box it was taken from."""
    image: Image.Image
    box: PixelBox
    label: Optional[str] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def to_png_bytes(self) -> bytes:
        return encode_image(self.image, format="PNG")


def build_alpha_canvas(size: Tuple[int, int], mask: BinaryMask, box: PixelBox) -> np.ndarray:
    """
    Place the box-sized mask on a full-size transparent canvas.

    Args:
        size: (width, height) of the source image
        mask: Binary mask sized exactly like the box
        box: Where the mask goes, in source pixel coordinates

    Returns:
        uint8 array (height, width)
    """
    width, height = size
    if (mask.width, mask.height) != (box.width, box.height):
        raise ValueError(
            f"Mask size {mask.width}x{mask.height} does not match box {box.width}x{box.height}"
        )
    if box.x0 < 0 or box.y0 < 0 or box.x1 > width or box.y1 > height:
        raise ValueError(f"Box {box.as_tuple()} lies outside {width}x{height} image")

    canvas = np.full((height, width), TRANSPARENT, dtype=np.uint8)
    canvas[box.y0:box.y1, box.x0:box.x1] = mask.data
    return canvas


def composite(source: Image.Image, mask: BinaryMask, box: PixelBox) -> CutoutImage:
    """
    Apply the mask as the source's alpha channel and crop to the box.

    Alpha is replaced, not multiplied; RGB values are untouched.
    """
    canvas = build_alpha_canvas(source.size, mask, box)

    rgba = source.convert("RGBA")
    rgba.putalpha(Image.fromarray(canvas))

    # crop() keeps no offset, (0, 0) is the box's top-left corner
    cutout = rgba.crop(box.as_tuple())
    rgba.close()

    logger.info(f"Composited cutout {cutout.width}x{cutout.height} at ({box.x0}, {box.y0})")
    return CutoutImage(image=cutout, box=box)
