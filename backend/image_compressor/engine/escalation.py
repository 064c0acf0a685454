"""
Escalation controller for the standard compression path.

When the first attempt fails or does not shrink the input, large images get
one more, harsher pass. Escalation never runs more than once.
"""
import logging
from typing import Optional, Tuple

from PIL import Image

from image_compressor.engine.codecs import render
from image_compressor.engine.errors import EncodeError
from image_compressor.engine.geometry import fit_inside
from image_compressor.engine.models import (
    EncodedImage,
    GeometryPlan,
    ImageAsset,
    Metadata,
    QualityPlan,
)
from image_compressor.engine.quality import max_effort_params


logger = logging.getLogger(__name__)

# Intentionally lower than the 3000px high-resolution gate
ESCALATION_MIN_DIMENSION = 2000
ESCALATION_SCALE = 0.7
ESCALATION_MAX_DIMENSION = 1920
ESCALATION_QUALITY_STEP = 20
ESCALATION_QUALITY_FLOOR = 40


def needs_escalation(asset: ImageAsset, attempt: Optional[EncodedImage]) -> bool:
    return attempt is None or attempt.size >= asset.size


def can_escalate(metadata: Metadata) -> bool:
    return metadata.width > ESCALATION_MIN_DIMENSION or metadata.height > ESCALATION_MIN_DIMENSION


def plan_escalation_geometry(metadata: Metadata) -> GeometryPlan:
    target = min(ESCALATION_MAX_DIMENSION, int(metadata.largest_dimension * ESCALATION_SCALE + 0.5))
    width, height = fit_inside(metadata.width, metadata.height, target, target)
    return GeometryPlan(metadata.width, metadata.height, width, height)


def plan_escalation_quality(plan: QualityPlan) -> QualityPlan:
    quality = max(ESCALATION_QUALITY_FLOOR, plan.base_quality - ESCALATION_QUALITY_STEP)
    return QualityPlan(
        requested_quality=plan.requested_quality,
        base_quality=plan.base_quality,
        high_resolution=plan.high_resolution,
        codec=max_effort_params(plan.format, quality),
    )


def escalate(
    img: Image.Image,
    asset: ImageAsset,
    attempt: Optional[EncodedImage],
    quality: QualityPlan,
    failure: Optional[EncodeError] = None,
) -> Tuple[EncodedImage, bool]:
    """
    Runs the second pass if the first one did not pay off.

    Args:
        img: Decoded original pixels
        asset: Original bytes and metadata
        attempt: First attempt, or None if it failed
        quality: Quality plan of the first attempt
        failure: Error raised by the first attempt, if any

    Returns:
        Tuple of (best attempt, whether escalation replaced the first attempt)

    Raises:
        EncodeError: If no attempt produced output
    """
    if not needs_escalation(asset, attempt):
        return attempt, False

    metadata = asset.metadata
    if not can_escalate(metadata):
        if attempt is None:
            raise failure or EncodeError('Compression produced no output')
        logger.info('Output not smaller than input, image too small to escalate', extra={
            'original_size': asset.size,
            'compressed_size': attempt.size,
        })
        return attempt, False

    geometry = plan_escalation_geometry(metadata)
    aggressive = plan_escalation_quality(quality)
    logger.info(
        f'Escalating compression of {metadata.dimensions} image to '
        f'{geometry.dimensions} at quality {aggressive.final_quality}'
    )

    try:
        data = render(img, geometry, aggressive.codec)
    except EncodeError as e:
        if attempt is None:
            raise
        logger.warning(f'Escalation failed, keeping first attempt: {str(e)}')
        return attempt, False

    return EncodedImage(data=data, geometry=geometry, quality=aggressive), True
