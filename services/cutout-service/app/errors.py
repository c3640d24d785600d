"""Error types raised by the cutout pipeline and its collaborators.

Every failure surfaces as a ``PipelineError`` carrying a user-facing message
and the HTTP status it maps to. Diagnostic details stay on the exception
object and in the server log.
"""
from typing import Optional


class PipelineError(Exception):
    """Base class for all cutout failures."""

    status_code: int = 500
    default_message: str = "Failed to process image"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingUploadError(PipelineError):
    """No file (or an empty file) was submitted."""

    status_code = 400
    default_message = "No file uploaded"


class UploadTooLargeError(PipelineError):
    """Uploaded file exceeds the configured size limit."""

    status_code = 413
    default_message = "Uploaded file is too large"


class ImageDecodeError(PipelineError):
    """Bytes could not be decoded as a raster image."""

    default_message = "Could not decode image"


class MaskDecodeError(ImageDecodeError):
    """The model-supplied mask is not a decodable PNG."""

    default_message = "Could not decode segmentation mask"


class SegmentationParseError(PipelineError):
    """Neither the JSON parser nor the fallback pattern found box and mask."""

    default_message = "Could not extract mask from AI response"

    def __init__(self, message: Optional[str] = None, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class UnsupportedMaskFormatError(PipelineError):
    """The mask field is present but is not a PNG data URI."""

    default_message = "Segmentation mask is not a PNG data URI"


class ExternalServiceError(PipelineError):
    """The vision model call itself failed."""

    default_message = "Segmentation model request failed"
