"""Gemini vision model client - asks the model to segment the primary subject."""
import logging
import time
from functools import lru_cache
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import Settings, get_settings
from .errors import ExternalServiceError

logger = logging.getLogger(__name__)


class SegmentationModelClient:
    """
    Thin async wrapper around the Gemini API.

    The underlying client is created on first use so the service can start
    (and report its health) without an API key.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[genai.Client] = None

    @property
    def model_name(self) -> str:
        return self.settings.gemini_model

    @property
    def configured(self) -> bool:
        return bool(self.settings.google_api_key)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.configured:
                raise ExternalServiceError("Segmentation model API key is not configured")
            self._client = genai.Client(api_key=self.settings.google_api_key)
        return self._client

    async def segment(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
        """
        Ask the model for a box and mask of the primary subject.

        Args:
            image_bytes: Encoded, pre-resized photo
            mime_type: Media type of image_bytes

        Returns:
            Raw response text, expected to contain box_2d and mask
        """
        client = self._get_client()
        start_time = time.time()

        try:
            response = await client.aio.models.generate_content(
                model=self.settings.gemini_model,
                contents=[
                    self.settings.segmentation_prompt,
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
                config=types.GenerateContentConfig(
                    temperature=self.settings.model_temperature,
                    thinking_config=types.ThinkingConfig(thinking_budget=0),
                ),
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise ExternalServiceError() from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Gemini: {e}")
            raise ExternalServiceError() from e
        except Exception as e:
            # Alternate transports (aiohttp) and timeouts raise their own types
            logger.exception(f"Gemini request failed: {e!r}")
            raise ExternalServiceError() from e

        processing_time = (time.time() - start_time) * 1000
        text = response.text
        if not text:
            logger.error("Gemini returned an empty response")
            raise ExternalServiceError("Segmentation model returned an empty response")

        logger.info(f"Gemini responded with {len(text)} characters in {processing_time:.0f}ms")
        return text


@lru_cache()
def get_segmentation_client() -> SegmentationModelClient:
    """Get the shared model client."""
    return SegmentationModelClient(get_settings())
