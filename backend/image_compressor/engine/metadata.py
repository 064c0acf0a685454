"""
Metadata prober: turns an encoded payload into an ImageAsset.
"""
import base64
import binascii
import re
from typing import Tuple, Union

from PIL import Image

from image_compressor.engine.errors import DecodeError
from image_compressor.engine.models import ImageAsset, Metadata
from image_compressor.utils.image_processing import has_alpha, open_image


DATA_URI_PREFIX = re.compile(r'^data:image/[a-zA-Z0-9.+-]+;base64,')


def strip_data_uri(payload: str) -> str:
    """Removes a leading ``data:image/...;base64,`` marker, if any."""
    return DATA_URI_PREFIX.sub('', payload.strip(), count=1)


def decode_image_payload(payload: str) -> bytes:
    """
    Decodes a base64 image payload, optionally wrapped in a data URI.

    Raises:
        DecodeError: If the payload is not valid base64 or decodes to nothing
    """
    try:
        image_bytes = base64.b64decode(strip_data_uri(payload))
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f'Invalid base64 image data: {str(e)}') from e

    if not image_bytes:
        raise DecodeError('Image payload is empty')
    return image_bytes


def read_metadata(img: Image.Image, byte_length: int) -> Metadata:
    return Metadata(
        width=img.width,
        height=img.height,
        format=img.format.lower() if img.format else None,
        channels=len(img.getbands()),
        has_alpha=has_alpha(img),
        has_profile=bool(img.info.get('icc_profile')),
        byte_length=byte_length,
    )


def decode(image_bytes: Union[bytes, str]) -> Tuple[Image.Image, ImageAsset]:
    """
    Decodes an image and probes it in one pass.

    Args:
        image_bytes: Encoded image, raw or as a (data URI) base64 payload

    Returns:
        Tuple of (loaded Pillow image, ImageAsset)
    """
    if isinstance(image_bytes, str):
        image_bytes = decode_image_payload(image_bytes)
    elif DATA_URI_PREFIX.match(image_bytes[:64].decode('ascii', errors='ignore')):
        image_bytes = decode_image_payload(image_bytes.decode('ascii', errors='ignore'))

    img = open_image(image_bytes)
    return img, ImageAsset(data=image_bytes, metadata=read_metadata(img, len(image_bytes)))


def probe(image_bytes: Union[bytes, str]) -> ImageAsset:
    """Reads metadata only; the decoded pixels are discarded."""
    _, asset = decode(image_bytes)
    return asset
