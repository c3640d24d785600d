"""Utility modules for the cutout service."""
from .geometry import PixelBox, map_box
from .mask_utils import BinaryMask, rasterize_mask
from .compositor import CutoutImage, composite
from .image_utils import SourceImage, load_source_image, encode_jpeg

__all__ = [
    "PixelBox",
    "map_box",
    "BinaryMask",
    "rasterize_mask",
    "CutoutImage",
    "composite",
    "SourceImage",
    "load_source_image",
    "encode_jpeg",
]
