"""Health check router for the cutout service."""
from fastapi import APIRouter, Depends
import logging

from ..config import get_settings
from ..schemas import HealthResponse, PipelineSettings
from ..vision_client import SegmentationModelClient, get_segmentation_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(client: SegmentationModelClient = Depends(get_segmentation_client)):
    """
    Health check endpoint.

    Returns service status, the configured model and pipeline settings.
    The service is "degraded" when no model API key is configured.
    """
    settings = get_settings()
    config = settings.pipeline_config()

    return HealthResponse(
        status="ok" if client.configured else "degraded",
        model=client.model_name,
        api_key_configured=client.configured,
        pipeline=PipelineSettings(
            max_dimension=config.max_dimension,
            jpeg_quality=config.jpeg_quality,
            mask_threshold=config.mask_threshold,
        ),
    )
