"""Segment router - upload a photo, get back a cutout of its main subject."""
from functools import lru_cache
from typing import Optional
import logging
import re
import time

from fastapi import APIRouter, Depends, File, Response, UploadFile
from fastapi.concurrency import run_in_threadpool

from ..config import get_settings
from ..errors import MissingUploadError, UploadTooLargeError
from ..pipeline import CutoutPipeline
from ..schemas import ErrorResponse
from ..vision_client import SegmentationModelClient, get_segmentation_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["segment"])

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e]")


@lru_cache()
def get_pipeline() -> CutoutPipeline:
    """Get the shared pipeline, configured from settings."""
    return CutoutPipeline(get_settings().pipeline_config())


def header_safe_label(label: Optional[str]) -> Optional[str]:
    """Reduce a model-supplied label to printable ASCII for use in a header."""
    if not label:
        return None
    cleaned = _NON_PRINTABLE_RE.sub("?", label).strip()
    return cleaned if cleaned.strip("?") else None


async def read_upload(file: Optional[UploadFile]) -> bytes:
    """Read the uploaded file, enforcing presence and size limits."""
    if file is None:
        raise MissingUploadError()

    max_bytes = get_settings().max_upload_bytes
    data = await file.read(max_bytes + 1)
    await file.close()

    if not data:
        raise MissingUploadError()
    if len(data) > max_bytes:
        raise UploadTooLargeError(f"Uploaded file exceeds {max_bytes} bytes")

    logger.info(f"Received upload {file.filename!r} ({file.content_type}, {len(data)} bytes)")
    return data


@router.post(
    "/segment",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "Cutout of the primary subject"},
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def segment(
    file: Optional[UploadFile] = File(None),
    pipeline: CutoutPipeline = Depends(get_pipeline),
    client: SegmentationModelClient = Depends(get_segmentation_client),
):
    """
    Cut the primary subject out of an uploaded photo.

    The photo is downscaled so its longest side fits the configured maximum,
    sent to the vision model for a box and mask, and the masked region is
    returned as a transparent PNG cropped to the subject's bounds.
    """
    start_time = time.time()

    data = await read_upload(file)
    source = await run_in_threadpool(pipeline.load_source, data)

    try:
        model_input = await run_in_threadpool(pipeline.encode_model_input, source)
        response_text = await client.segment(model_input, mime_type="image/jpeg")
        cutout = await run_in_threadpool(pipeline.extract, source, response_text)
        png = await run_in_threadpool(cutout.to_png_bytes)
    finally:
        source.close()

    processing_time = (time.time() - start_time) * 1000
    logger.info(f"Segment complete: {cutout.width}x{cutout.height} cutout in {processing_time:.0f}ms")

    headers = {"X-Cutout-Box": ",".join(str(v) for v in cutout.box.as_tuple())}
    label = header_safe_label(cutout.label)
    if label:
        headers["X-Cutout-Label"] = label

    return Response(content=png, media_type="image/png", headers=headers)
