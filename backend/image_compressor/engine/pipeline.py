"""
Compression pipeline: chains probe, geometry, quality, encode and escalation
for each entry point the service exposes.
"""
import logging
from typing import Optional, Union

from PIL import Image

from image_compressor.engine.codecs import render
from image_compressor.engine.errors import EncodeError
from image_compressor.engine.escalation import escalate
from image_compressor.engine.geometry import (
    DEFAULT_LANDSCAPE_MAX_WIDTH,
    DEFAULT_ULTRA_MAX_DIMENSION,
    plan_geometry,
    plan_landscape,
    plan_ultra,
)
from image_compressor.engine.metadata import decode, probe
from image_compressor.engine.models import (
    CompressionRequest,
    CompressionResult,
    EncodedImage,
    GeometryPlan,
    ImageAsset,
    QualityPlan,
)
from image_compressor.engine.quality import (
    plan_landscape_quality,
    plan_quality,
    plan_ultra_quality,
)


logger = logging.getLogger(__name__)

ImageInput = Union[bytes, str]


class CompressionPipeline:
    """
    Stateless compression engine.

    Holds only the defaults for the landscape and ultra entry points, so a
    single instance can serve concurrent requests.
    """

    def __init__(
        self,
        landscape_max_width: int = DEFAULT_LANDSCAPE_MAX_WIDTH,
        ultra_max_dimension: int = DEFAULT_ULTRA_MAX_DIMENSION,
    ):
        self.landscape_max_width = landscape_max_width
        self.ultra_max_dimension = ultra_max_dimension

    def inspect(self, image: ImageInput) -> ImageAsset:
        return probe(image)

    def compress(self, image: ImageInput, request: CompressionRequest) -> CompressionResult:
        """
        Standard path: adaptive geometry and quality, escalating once if the
        first attempt does not shrink the image.

        Args:
            image: Encoded image bytes or base64 payload
            request: Requested format, quality and optional bounds

        Returns:
            CompressionResult for the best attempt

        Raises:
            ValidationError, DecodeError, EncodeError
        """
        if request.landscape_only:
            return self.compress_landscape(image, request)

        img, asset = decode(image)
        geometry = plan_geometry(asset.metadata, request)
        quality = plan_quality(asset.metadata, request.quality, request.format)

        attempt: Optional[EncodedImage] = None
        failure: Optional[EncodeError] = None
        try:
            attempt = self._encode(img, geometry, quality)
        except EncodeError as e:
            logger.warning(f'First compression attempt failed: {str(e)}')
            failure = e

        attempt, escalated = escalate(img, asset, attempt, quality, failure)

        compression_type = 'high-resolution' if quality.high_resolution else 'standard'
        return self._result(asset, attempt, request.quality, compression_type, escalated=escalated)

    def compress_landscape(self, image: ImageInput, request: CompressionRequest) -> CompressionResult:
        """Caps the width of landscape images; quality is used as requested."""
        img, asset = decode(image)
        geometry = plan_landscape(asset.metadata, request.max_width or self.landscape_max_width)
        quality = plan_landscape_quality(request.quality, request.format)

        attempt = self._encode(img, geometry, quality)
        return self._result(asset, attempt, request.quality, 'landscape', is_landscape=True)

    def compress_ultra(self, image: ImageInput, request: CompressionRequest) -> CompressionResult:
        """Clamps the larger side and encodes at a fixed low quality."""
        img, asset = decode(image)
        geometry = plan_ultra(asset.metadata, request.max_dimension or self.ultra_max_dimension)
        quality = plan_ultra_quality(request.format)

        attempt = self._encode(img, geometry, quality)
        return self._result(asset, attempt, quality.final_quality, 'ultra')

    def _encode(self, img: Image.Image, geometry: GeometryPlan, quality: QualityPlan) -> EncodedImage:
        return EncodedImage(data=render(img, geometry, quality.codec), geometry=geometry, quality=quality)

    def _result(
        self,
        asset: ImageAsset,
        attempt: EncodedImage,
        requested_quality: int,
        compression_type: str,
        escalated: bool = False,
        is_landscape: bool = False,
    ) -> CompressionResult:
        result = CompressionResult(
            data=attempt.data,
            format=attempt.quality.format,
            original_size=asset.size,
            original_dimensions=asset.metadata.dimensions,
            new_dimensions=attempt.geometry.dimensions,
            requested_quality=requested_quality,
            final_quality=attempt.quality.final_quality,
            compression_type=compression_type,
            resized=attempt.geometry.resized,
            quality_adjusted=attempt.quality.final_quality != requested_quality,
            high_res_optimized=attempt.quality.high_resolution,
            escalated=escalated,
            is_landscape=is_landscape,
        )
        logger.info('Image compressed', extra={
            'compression_type': compression_type,
            'output_format': result.format.value,
            'original_size': result.original_size,
            'compressed_size': result.compressed_size,
            'escalated': escalated,
        })
        return result
