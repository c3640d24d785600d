"""Cutout pipeline - turns a photo and a model segmentation into a cutout."""
import logging
import time
from dataclasses import dataclass

from .errors import PipelineError, SegmentationParseError
from .response_parser import decode_mask_data_uri, parse_segmentation_response
from .utils.compositor import CutoutImage, composite
from .utils.geometry import map_box
from .utils.image_utils import SourceImage, encode_jpeg, load_source_image
from .utils.mask_utils import rasterize_mask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """Tunables for a pipeline run."""
    max_dimension: int = 1024
    jpeg_quality: int = 80
    mask_threshold: float = 50.0  # Percent of max intensity

    def __post_init__(self):
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be positive, got {self.max_dimension}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [1, 100], got {self.jpeg_quality}")
        if not 0 <= self.mask_threshold <= 100:
            raise ValueError(f"mask_threshold must be in [0, 100], got {self.mask_threshold}")


class CutoutPipeline:
    """
    Stateless cutout pipeline.

    Holds only immutable configuration, so one instance can serve
    concurrent requests.
    """

    def __init__(self, config: PipelineConfig = PipelineConfig()):
        self.config = config

    def load_source(self, source_bytes: bytes) -> SourceImage:
        """Decode the upload and bound its size before any model call."""
        return load_source_image(source_bytes, self.config.max_dimension)

    def encode_model_input(self, source: SourceImage) -> bytes:
        """Encode the pre-resized photo for the vision model."""
        return encode_jpeg(source.image, quality=self.config.jpeg_quality)

    def extract(self, source: SourceImage, model_response_text: str) -> CutoutImage:
        """
        Cut the segmented object out of an already loaded photo.

        Args:
            source: Pre-resized photo the model was shown
            model_response_text: Raw text answer from the vision model

        Returns:
            CutoutImage cropped to the object's pixel box

        Raises:
            PipelineError: On any parse, format or decode failure
        """
        start_time = time.time()

        try:
            segmentation = parse_segmentation_response(model_response_text)
        except SegmentationParseError as e:
            logger.error(f"Could not parse segmentation response: {e.raw_response!r}")
            raise

        mask_bytes = decode_mask_data_uri(segmentation.mask)

        box = map_box(segmentation.box, source.width, source.height)
        logger.info(
            f"Mapped box {segmentation.box_2d} on {source.width}x{source.height} "
            f"to ({box.x0}, {box.y0})-({box.x1}, {box.y1})"
        )

        mask = rasterize_mask(mask_bytes, box.width, box.height, self.config.mask_threshold)
        cutout = composite(source.image, mask, box)
        cutout.label = segmentation.label

        processing_time = (time.time() - start_time) * 1000
        logger.info(f"Cutout complete in {processing_time:.0f}ms")
        return cutout

    def run(self, source_bytes: bytes, model_response_text: str) -> CutoutImage:
        """Load the photo and cut out the segmented object."""
        source = self.load_source(source_bytes)
        try:
            return self.extract(source, model_response_text)
        except PipelineError as e:
            logger.warning(f"Cutout pipeline failed: {e.message}")
            raise
        finally:
            source.close()
