"""Parsing of the vision model's free-form segmentation answer.

The model is asked for JSON but regularly wraps it in markdown fences or
emits near-JSON that ``json.loads`` rejects. Parsing is therefore two-stage:
a strict JSON + schema pass, then a permissive pattern match over the raw
text for the same two fields.
"""
import base64
import binascii
import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from .errors import MaskDecodeError, SegmentationParseError, UnsupportedMaskFormatError
from .schemas import SegmentationResult

logger = logging.getLogger(__name__)

ACCEPTED_MASK_TYPES = ("image/png",)

_FENCE_RE = re.compile(r"```[\w-]*[ \t]*\n?(.*?)```", re.DOTALL)

_NUMBER = r"(-?\d+(?:\.\d+)?)"
_BOX_RE = re.compile(
    r"[\"']box_2d[\"']\s*:\s*\[\s*"
    + r"\s*,\s*".join([_NUMBER] * 4)
    + r"\s*\]"
)
_MASK_RE = re.compile(r"[\"']mask[\"']\s*:\s*\"([^\"]+)\"")
_LABEL_RE = re.compile(r"[\"']label[\"']\s*:\s*\"([^\"]*)\"")
_OBJECT_RE = re.compile(r"\{[^{}]*")

_DATA_URI_RE = re.compile(
    r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.*)$",
    re.DOTALL | re.IGNORECASE,
)


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the stripped text."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _parse_structured(text: str) -> Optional[SegmentationResult]:
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError:
        return None

    if isinstance(payload, list):
        if not payload:
            return None
        # Only the first instance is used
        payload = payload[0]

    if not isinstance(payload, dict):
        return None

    try:
        return SegmentationResult.model_validate(payload)
    except ValidationError as e:
        logger.debug(f"Structured segmentation payload rejected: {e}")
        return None


def _parse_permissive(text: str) -> Optional[SegmentationResult]:
    # Undo JSON's optional "\/" escaping so the data URI matches as written
    text = text.replace("\\/", "/")

    # Fields are only paired within one object, each chunk runs from a "{"
    # up to the next brace
    chunks = _OBJECT_RE.findall(text) or [text]

    for chunk in chunks:
        box_match = _BOX_RE.search(chunk)
        mask_match = _MASK_RE.search(chunk)
        if not box_match or not mask_match:
            continue

        label_match = _LABEL_RE.search(chunk)
        return SegmentationResult(
            box_2d=[float(v) for v in box_match.groups()],
            mask=mask_match.group(1),
            label=label_match.group(1) if label_match else None,
        )

    return None


def parse_segmentation_response(text: str) -> SegmentationResult:
    """
    Extract one segmentation result from the model's response text.

    Args:
        text: Raw model output

    Returns:
        SegmentationResult for the first object reported

    Raises:
        SegmentationParseError: If neither parser finds box_2d and mask
    """
    body = strip_code_fences(text or "")

    result = _parse_structured(body)
    if result is not None:
        return result

    logger.warning("Structured parse of model response failed, trying pattern match")
    result = _parse_permissive(text or "")
    if result is not None:
        return result

    raise SegmentationParseError(raw_response=text or "")


def decode_mask_data_uri(data_uri: str) -> bytes:
    """
    Validate a PNG data URI and return its decoded bytes.

    Raises:
        UnsupportedMaskFormatError: If the value is not a PNG data URI
        MaskDecodeError: If the base64 payload is malformed
    """
    match = _DATA_URI_RE.match(data_uri.strip())
    if not match:
        raise UnsupportedMaskFormatError("Segmentation mask is not a base64 data URI")

    media_type = match.group("media_type").lower()
    if media_type not in ACCEPTED_MASK_TYPES:
        raise UnsupportedMaskFormatError(f"Unsupported segmentation mask format: {media_type}")

    payload = "".join(match.group("payload").split())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MaskDecodeError("Segmentation mask is not valid base64") from e
