"""Coordinate mapping from the model's normalized box space to pixels."""
from dataclasses import dataclass
from typing import Sequence, Tuple

NORMALIZED_SCALE = 1000


@dataclass(frozen=True)
class PixelBox:
    """Bounding box in pixel space, half-open: [x0, x1) x [y0, y1)."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """Return (x0, y0, x1, y1), the order PIL's crop expects."""
        return (self.x0, self.y0, self.x1, self.y1)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def _scale(normalized: float, size: int) -> int:
    # Round half up
    return int(normalized / NORMALIZED_SCALE * size + 0.5)


def map_box(box: Sequence[float], width: int, height: int) -> PixelBox:
    """
    Convert a normalized box to pixel coordinates.

    Args:
        box: (y_min, x_min, y_max, x_max), each nominally in [0, 1000]
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        PixelBox clamped to the image, at least 1px wide and tall
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image size must be positive, got {width}x{height}")

    y_min, x_min, y_max, x_max = (
        _clamp(float(v), 0, NORMALIZED_SCALE) for v in box
    )

    # y scales against height, x against width
    y0 = int(_clamp(_scale(y_min, height), 0, height - 1))
    x0 = int(_clamp(_scale(x_min, width), 0, width - 1))
    y1 = min(_scale(y_max, height), height)
    x1 = min(_scale(x_max, width), width)

    box_width = max(1, x1 - x0)
    box_height = max(1, y1 - y0)

    return PixelBox(x0=x0, y0=y0, x1=x0 + box_width, y1=y0 + box_height)
