"""
Codec dispatcher: maps CodecParams variants onto Pillow encoder options.
"""
from PIL import Image

from image_compressor.engine.models import (
    CodecParams,
    GeometryPlan,
    JpegParams,
    PngParams,
    WebpParams,
)
from image_compressor.utils.image_processing import resize_to, save_image


def _encode_jpeg(img: Image.Image, params: JpegParams) -> bytes:
    return save_image(
        img, 'JPEG',
        quality=params.quality,
        progressive=params.progressive,
        optimize=params.optimize,
    )


def _encode_png(img: Image.Image, params: PngParams) -> bytes:
    return save_image(img, 'PNG', compress_level=params.compress_level)


def _encode_webp(img: Image.Image, params: WebpParams) -> bytes:
    return save_image(img, 'WEBP', quality=params.quality, method=params.method)


ENCODERS = {
    JpegParams: _encode_jpeg,
    PngParams: _encode_png,
    WebpParams: _encode_webp,
}


def encode(img: Image.Image, params: CodecParams) -> bytes:
    """
    Encodes the image with the codec selected by the params variant.

    Raises:
        EncodeError: If the codec fails
    """
    return ENCODERS[type(params)](img, params)


def render(img: Image.Image, geometry: GeometryPlan, params: CodecParams) -> bytes:
    """Resizes per the geometry plan, then encodes. The source image is left untouched."""
    return encode(resize_to(img, geometry.target_size), params)
