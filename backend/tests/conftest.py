"""
Shared fixtures for the compressor test suite.
"""
import io
import os

import pytest
from PIL import Image

# Set test environment variables BEFORE importing app modules
os.environ['FLASK_ENV'] = 'testing'
os.environ['LOG_LEVEL'] = 'WARNING'


def encode_image(size, image_format='JPEG', mode='RGB', color=None, **save_options):
    """Create an in-memory image with a gradient so codecs have real work to do."""
    if color is not None:
        img = Image.new(mode, size, color=color)
    else:
        img = Image.linear_gradient('L').resize(size).convert(mode)
    output = io.BytesIO()
    img.save(output, format=image_format, **save_options)
    return output.getvalue()


@pytest.fixture
def make_image():
    """Factory fixture returning encoded image bytes."""
    return encode_image
