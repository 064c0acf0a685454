"""
End-to-end tests for the compression pipeline with real Pillow codecs.
"""
import io

import pytest
from PIL import Image
from unittest.mock import patch

from image_compressor.engine.errors import DecodeError, EncodeError, NotLandscapeError
from image_compressor.engine.models import CompressionRequest, OutputFormat
from image_compressor.engine.pipeline import CompressionPipeline


def noisy_image(size, image_format='JPEG', **save_options):
    """Noise compresses badly, which keeps the original file large."""
    img = Image.effect_noise(size, 80).convert('RGB')
    output = io.BytesIO()
    img.save(output, format=image_format, **save_options)
    return output.getvalue()


def dimensions_of(data):
    return Image.open(io.BytesIO(data)).size


@pytest.fixture
def pipeline():
    return CompressionPipeline()


class TestStandardPath:
    """Tests for /api/compress semantics."""

    def test_large_landscape_jpeg(self, pipeline):
        image_bytes = noisy_image((4000, 2000), quality=95)
        result = pipeline.compress(image_bytes, CompressionRequest(format='jpeg', quality=80))

        assert result.high_res_optimized is True
        assert result.quality_adjusted is True
        assert result.final_quality == 50
        assert result.requested_quality == 80
        assert result.original_dimensions == '4000 × 2000'
        assert result.new_dimensions == '1920 × 960'
        assert result.compression_type == 'high-resolution'
        assert result.escalated is False
        assert dimensions_of(result.data) == (1920, 960)
        assert result.compressed_size < result.original_size

    def test_small_png_is_not_resized_or_escalated(self, pipeline, make_image):
        image_bytes = make_image((500, 300), 'PNG')
        result = pipeline.compress(image_bytes, CompressionRequest(format='png', quality=80))

        assert result.new_dimensions == '500 × 300'
        assert result.final_quality == 80
        assert result.quality_adjusted is False
        assert result.high_res_optimized is False
        assert result.escalated is False
        assert result.compression_type == 'standard'
        assert result.reduction.endswith('%')
        assert result.mime_type == 'image/png'

    def test_explicit_width(self, pipeline, make_image):
        result = pipeline.compress(make_image((800, 600)), CompressionRequest(format='webp', width=400))

        assert result.new_dimensions == '400 × 300'
        assert result.resized is True
        assert dimensions_of(result.data) == (400, 300)

    def test_requested_bounds_never_enlarge(self, pipeline, make_image):
        result = pipeline.compress(make_image((300, 200)), CompressionRequest(width=900, height=900))
        assert result.new_dimensions == '300 × 200'
        assert dimensions_of(result.data) == (300, 200)

    def test_deterministic_output(self, pipeline, make_image):
        image_bytes = make_image((640, 480))
        request = CompressionRequest(format='webp', quality=70)
        assert pipeline.compress(image_bytes, request).data == pipeline.compress(image_bytes, request).data

    def test_ineffective_first_pass_escalates(self, pipeline, make_image):
        image_bytes = make_image((2400, 1200))
        inflated = b'\x00' * (len(image_bytes) + 1)

        with patch('image_compressor.engine.pipeline.render', return_value=inflated):
            result = pipeline.compress(image_bytes, CompressionRequest(format='jpeg', quality=80))

        assert result.escalated is True
        assert result.new_dimensions == '1680 × 840'
        assert result.final_quality == 60
        assert result.compressed_size == len(result.data)
        assert result.compressed_size < len(inflated)
        assert dimensions_of(result.data) == (1680, 840)

    def test_failed_first_pass_escalates(self, pipeline, make_image):
        with patch('image_compressor.engine.pipeline.render', side_effect=EncodeError('codec crashed')):
            result = pipeline.compress(make_image((2400, 1200)), CompressionRequest(format='png'))

        assert result.escalated is True
        assert dimensions_of(result.data) == (1680, 840)

    def test_failed_first_pass_on_small_image_is_fatal(self, pipeline, make_image):
        with patch('image_compressor.engine.pipeline.render', side_effect=EncodeError('codec crashed')):
            with pytest.raises(EncodeError):
                pipeline.compress(make_image((400, 300)), CompressionRequest())

    def test_landscape_only_flag(self, pipeline, make_image):
        result = pipeline.compress(make_image((3000, 1000)), CompressionRequest(landscape_only=True))
        assert result.is_landscape is True
        assert result.compression_type == 'landscape'

    def test_corrupt_input(self, pipeline):
        with pytest.raises(DecodeError):
            pipeline.compress(b'\xff\xd8\xff garbage', CompressionRequest())


class TestLandscapePath:
    """Tests for /api/compress-landscape semantics."""

    def test_caps_width(self, pipeline, make_image):
        result = pipeline.compress_landscape(make_image((3000, 1000)), CompressionRequest(quality=90))

        assert result.new_dimensions == '1920 × 640'
        assert result.final_quality == 90
        assert result.quality_adjusted is False
        assert result.is_landscape is True
        assert dimensions_of(result.data) == (1920, 640)

    def test_custom_max_width(self, pipeline, make_image):
        result = pipeline.compress_landscape(make_image((1200, 600)), CompressionRequest(max_width=600))
        assert result.new_dimensions == '600 × 300'

    def test_pipeline_default_max_width(self, make_image):
        result = CompressionPipeline(landscape_max_width=1000).compress_landscape(
            make_image((1200, 600)), CompressionRequest()
        )
        assert result.new_dimensions == '1000 × 500'

    def test_rejects_portrait(self, pipeline, make_image):
        with pytest.raises(NotLandscapeError):
            pipeline.compress_landscape(make_image((600, 1200)), CompressionRequest())


class TestUltraPath:
    """Tests for /api/compress-ultra semantics."""

    def test_clamps_larger_side(self, pipeline, make_image):
        result = pipeline.compress_ultra(make_image((1000, 3000)), CompressionRequest(quality=95))

        assert result.new_dimensions == '533 × 1600'
        assert result.final_quality == 40
        assert result.compression_type == 'ultra'
        assert dimensions_of(result.data) == (533, 1600)

    @pytest.mark.parametrize('output_format', list(OutputFormat))
    def test_every_format(self, pipeline, make_image, output_format):
        result = pipeline.compress_ultra(
            make_image((2000, 1000)), CompressionRequest(format=output_format, max_dimension=500)
        )
        assert result.format is output_format
        assert Image.open(io.BytesIO(result.data)).format == output_format.name
        assert result.new_dimensions == '500 × 250'

    def test_small_image_not_enlarged(self, pipeline, make_image):
        result = pipeline.compress_ultra(make_image((200, 100)), CompressionRequest())
        assert result.new_dimensions == '200 × 100'


class TestInspect:
    """Tests for metadata-only inspection."""

    def test_inspect(self, pipeline, make_image):
        asset = pipeline.inspect(make_image((64, 32), 'PNG'))
        assert asset.metadata.width == 64
        assert asset.metadata.format == 'png'
