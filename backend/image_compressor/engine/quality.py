"""
Quality policy: resolution classification and per-codec encode parameters.
"""
from image_compressor.engine.models import (
    CodecParams,
    JpegParams,
    Metadata,
    OutputFormat,
    PngParams,
    QualityPlan,
    WebpParams,
)


HIGH_RES_DIMENSION = 3000
HIGH_RES_BYTES = 2 * 1024 * 1024

HIGH_RES_QUALITY_STEP = 20
HIGH_RES_QUALITY_FLOOR = 60
JPEG_HIGH_RES_STEP = 10
JPEG_HIGH_RES_FLOOR = 50

ULTRA_QUALITY = 40

PNG_DEFAULT_LEVEL = 6
PNG_MAX_LEVEL = 9
WEBP_DEFAULT_METHOD = 4
WEBP_MAX_METHOD = 6


def is_high_resolution(metadata: Metadata) -> bool:
    return (
        metadata.width > HIGH_RES_DIMENSION
        or metadata.height > HIGH_RES_DIMENSION
        or metadata.byte_length > HIGH_RES_BYTES
    )


def adjust_base_quality(requested_quality: int, high_resolution: bool) -> int:
    if high_resolution and requested_quality > HIGH_RES_QUALITY_FLOOR:
        return max(HIGH_RES_QUALITY_FLOOR, requested_quality - HIGH_RES_QUALITY_STEP)
    return requested_quality


def max_effort_params(output_format: OutputFormat, quality: int) -> CodecParams:
    """Parameters trading encode time for the smallest output."""
    if output_format is OutputFormat.JPEG:
        return JpegParams(quality=quality, progressive=True, optimize=True)
    if output_format is OutputFormat.PNG:
        return PngParams(quality=quality, compress_level=PNG_MAX_LEVEL)
    return WebpParams(quality=quality, method=WEBP_MAX_METHOD)


def plan_quality(metadata: Metadata, requested_quality: int, output_format: OutputFormat) -> QualityPlan:
    """
    Resolves encode parameters for the standard path.

    High-resolution images get a lower base quality; on top of that JPEG
    drops a further step while PNG and WebP switch to maximum effort.
    """
    high_res = is_high_resolution(metadata)
    base_quality = adjust_base_quality(requested_quality, high_res)

    if output_format is OutputFormat.JPEG:
        quality = max(JPEG_HIGH_RES_FLOOR, base_quality - JPEG_HIGH_RES_STEP) if high_res else base_quality
        codec = JpegParams(quality=quality, progressive=True, optimize=True)
    elif output_format is OutputFormat.PNG:
        codec = PngParams(quality=base_quality, compress_level=PNG_MAX_LEVEL if high_res else PNG_DEFAULT_LEVEL)
    else:
        codec = WebpParams(quality=base_quality, method=WEBP_MAX_METHOD if high_res else WEBP_DEFAULT_METHOD)

    return QualityPlan(
        requested_quality=requested_quality,
        base_quality=base_quality,
        high_resolution=high_res,
        codec=codec,
    )


def plan_landscape_quality(requested_quality: int, output_format: OutputFormat) -> QualityPlan:
    """Requested quality as-is with the codec's default effort."""
    if output_format is OutputFormat.JPEG:
        codec = JpegParams(quality=requested_quality, progressive=False, optimize=False)
    elif output_format is OutputFormat.PNG:
        codec = PngParams(quality=requested_quality, compress_level=PNG_DEFAULT_LEVEL)
    else:
        codec = WebpParams(quality=requested_quality, method=WEBP_DEFAULT_METHOD)

    return QualityPlan(requested_quality, requested_quality, False, codec)


def plan_ultra_quality(output_format: OutputFormat, requested_quality: int = ULTRA_QUALITY) -> QualityPlan:
    """Fixed low quality at maximum effort, ignoring the requested quality."""
    return QualityPlan(
        requested_quality=requested_quality,
        base_quality=ULTRA_QUALITY,
        high_resolution=False,
        codec=max_effort_params(output_format, ULTRA_QUALITY),
    )
