"""Pydantic schemas for the cutout service."""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class SegmentationResult(BaseModel):
    """One object instance as reported by the vision model."""
    box_2d: List[float] = Field(
        ...,
        min_length=4,
        max_length=4,
        description="[y_min, x_min, y_max, x_max] in 0-1000 normalized space"
    )
    mask: str = Field(..., description="Mask as a data URI (data:image/png;base64,...)")
    label: Optional[str] = Field(None, description="Short label for the object")

    @property
    def box(self) -> Tuple[float, float, float, float]:
        y_min, x_min, y_max, x_max = self.box_2d
        return (y_min, x_min, y_max, x_max)


class PipelineSettings(BaseModel):
    """Pipeline configuration as reported by the health endpoint."""
    max_dimension: int
    jpeg_quality: int
    mask_threshold: float


class HealthResponse(BaseModel):
    """Response from the health endpoint."""
    status: str
    model: str
    api_key_configured: bool
    pipeline: PipelineSettings


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    error: str
