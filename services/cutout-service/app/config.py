"""Cutout Service Configuration"""
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List

from .pipeline import PipelineConfig


DEFAULT_SEGMENTATION_PROMPT = (
    "Give the segmentation mask for the single primary subject of this photo. "
    "Output a JSON list with exactly one entry, containing the 2D bounding box "
    "in the key \"box_2d\", the segmentation mask in the key \"mask\" as a PNG "
    "data URI, and a short text label in the key \"label\"."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    app_name: str = "Cutout Service"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Vision model configuration
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    model_temperature: float = 0.5
    segmentation_prompt: str = DEFAULT_SEGMENTATION_PROMPT

    # Pipeline configuration
    max_dimension: int = Field(1024, ge=1)  # Longest side of the pre-resized photo
    jpeg_quality: int = Field(80, ge=1, le=100)  # Quality of the image sent to the model
    mask_threshold: float = Field(50.0, ge=0, le=100)  # Percent of max intensity

    # API configuration
    max_upload_bytes: int = Field(20 * 1024 * 1024, ge=1)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def pipeline_config(self) -> PipelineConfig:
        """Build the pipeline configuration record."""
        return PipelineConfig(
            max_dimension=self.max_dimension,
            jpeg_quality=self.jpeg_quality,
            mask_threshold=self.mask_threshold,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
