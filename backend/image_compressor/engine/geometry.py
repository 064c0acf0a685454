"""
Geometry planner.

Every entry point resolves its target size with the same fit-inside rule:
scale into a box, keep the aspect ratio, never upscale.
"""
import math
from typing import Tuple

from image_compressor.engine.errors import NotLandscapeError
from image_compressor.engine.models import CompressionRequest, GeometryPlan, Metadata


AUTO_LANDSCAPE_MAX_WIDTH = 1920
DEFAULT_LANDSCAPE_MAX_WIDTH = 1920
DEFAULT_ULTRA_MAX_DIMENSION = 1600


def round_half_up(value: float) -> int:
    return max(1, int(math.floor(value + 0.5)))


def scale_to_width(width: int, height: int, target_width: int) -> Tuple[int, int]:
    return target_width, round_half_up(target_width / width * height)


def scale_to_height(width: int, height: int, target_height: int) -> Tuple[int, int]:
    return round_half_up(target_height / height * width), target_height


def fit_inside(width: int, height: int, box_width: int, box_height: int) -> Tuple[int, int]:
    """
    Largest size with the same aspect ratio that fits in the box.

    Returns the original size when it already fits.
    """
    if width <= box_width and height <= box_height:
        return width, height
    # width is the binding side when box_width / width <= box_height / height
    if box_width * height <= box_height * width:
        return scale_to_width(width, height, box_width)
    return scale_to_height(width, height, box_height)


def is_landscape(metadata: Metadata) -> bool:
    return metadata.is_landscape


def needs_auto_landscape_cap(metadata: Metadata, request: CompressionRequest) -> bool:
    """Unconstrained wide landscapes are capped even without explicit bounds."""
    return (
        request.width is None
        and request.height is None
        and is_landscape(metadata)
        and metadata.width > AUTO_LANDSCAPE_MAX_WIDTH
    )


def _plan(metadata: Metadata, size: Tuple[int, int]) -> GeometryPlan:
    return GeometryPlan(metadata.width, metadata.height, size[0], size[1])


def plan_geometry(metadata: Metadata, request: CompressionRequest) -> GeometryPlan:
    """
    Resolves target dimensions for the standard path.

    Args:
        metadata: Probed metadata of the original image
        request: Requested width and/or height

    Returns:
        GeometryPlan, equal to the original when no resize is warranted
    """
    width, height = metadata.width, metadata.height

    if needs_auto_landscape_cap(metadata, request):
        return _plan(metadata, scale_to_width(width, height, AUTO_LANDSCAPE_MAX_WIDTH))

    if request.width and request.height:
        box = (request.width, request.height)
        if box[0] < width or box[1] < height:
            return _plan(metadata, fit_inside(width, height, *box))
    elif request.width:
        if request.width < width:
            return _plan(metadata, scale_to_width(width, height, request.width))
    elif request.height:
        if request.height < height:
            return _plan(metadata, scale_to_height(width, height, request.height))

    return GeometryPlan.unchanged(metadata)


def plan_landscape(metadata: Metadata, max_width: int = DEFAULT_LANDSCAPE_MAX_WIDTH) -> GeometryPlan:
    """
    Caps the width of a landscape image, scaling proportionally.

    Raises:
        NotLandscapeError: If the image is portrait or square
    """
    if not is_landscape(metadata):
        raise NotLandscapeError(
            f'Image is not a landscape ({metadata.dimensions}). '
            'Use /api/compress for other images.'
        )
    if metadata.width > max_width:
        return _plan(metadata, scale_to_width(metadata.width, metadata.height, max_width))
    return GeometryPlan.unchanged(metadata)


def plan_ultra(metadata: Metadata, max_dimension: int = DEFAULT_ULTRA_MAX_DIMENSION) -> GeometryPlan:
    """Clamps the larger side to max_dimension whatever the orientation."""
    return _plan(metadata, fit_inside(metadata.width, metadata.height, max_dimension, max_dimension))
