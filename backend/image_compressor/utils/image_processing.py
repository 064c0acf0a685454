"""
Pillow helpers for decoding, resizing and encoding images in memory.
"""
import io
from PIL import Image, UnidentifiedImageError
from typing import Tuple

from image_compressor.engine.errors import DecodeError, EncodeError


# Modes each Pillow encoder can write without conversion
ENCODER_MODES = {
    'JPEG': ('L', 'RGB', 'CMYK'),
    'PNG': ('1', 'L', 'LA', 'P', 'RGB', 'RGBA', 'I', 'I;16'),
    'WEBP': ('RGB', 'RGBA'),
}


def open_image(image_bytes: bytes) -> Image.Image:
    """
    Decodes image bytes into a fully loaded Pillow image.

    Args:
        image_bytes: Encoded image bytes

    Returns:
        Loaded Pillow image

    Raises:
        DecodeError: If the bytes are empty, truncated, not an image or over
            Pillow's pixel limit
    """
    if not image_bytes:
        raise DecodeError('Image payload is empty')

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except UnidentifiedImageError:
        raise DecodeError('Unrecognized image format') from None
    except Image.DecompressionBombError as e:
        raise DecodeError(f'Image too large to decode: {str(e)}') from e
    except (OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f'Corrupt image data: {str(e)}') from e

    return img


def has_alpha(img: Image.Image) -> bool:
    return 'A' in img.getbands() or 'transparency' in img.info


def resize_to(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Returns a resized copy of the image, or the image itself if the size
    already matches. Never enlarges.
    """
    width, height = size
    if (width, height) == img.size:
        return img
    if width > img.width or height > img.height:
        raise ValueError(f'Refusing to upscale {img.size} to {size}')

    return img.resize((width, height), Image.Resampling.LANCZOS)


def convert_for_encoder(img: Image.Image, encoder: str) -> Image.Image:
    """
    Converts the image to a mode the encoder can write.

    Args:
        img: Source image (left untouched)
        encoder: Pillow format name (JPEG, PNG, WEBP)

    Returns:
        The image itself when compatible, otherwise a converted copy
    """
    if img.mode in ENCODER_MODES[encoder]:
        return img

    # JPEG cannot store alpha; keep it for the formats that can
    if encoder != 'JPEG' and has_alpha(img):
        return img.convert('RGBA')
    if encoder == 'PNG' and img.mode.startswith('I;16'):
        return img.convert('I')
    return img.convert('RGB')


def save_image(img: Image.Image, encoder: str, **options) -> bytes:
    """
    Encodes the image to bytes.

    Args:
        img: Image to encode
        encoder: Pillow format name (JPEG, PNG, WEBP)
        **options: Encoder specific save options

    Returns:
        Encoded image bytes

    Raises:
        EncodeError: If Pillow fails to encode
    """
    output = io.BytesIO()
    try:
        convert_for_encoder(img, encoder).save(output, format=encoder, **options)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f'{encoder} encoding failed: {str(e)}') from e

    return output.getvalue()
