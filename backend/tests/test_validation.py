"""
Tests for request validation utilities and the request model.
"""
import pytest

from image_compressor.engine.errors import UnsupportedFormatError, ValidationError
from image_compressor.engine.models import CompressionRequest, OutputFormat
from image_compressor.utils.validation import parse_int_field, sanitize_string, validate_payload


class TestValidatePayload:
    """Tests for JSON body validation."""

    def test_valid_payload(self):
        is_valid, error = validate_payload({'imageBase64': 'AAAA'})
        assert is_valid
        assert error == ""

    def test_missing_body(self):
        is_valid, error = validate_payload(None)
        assert not is_valid
        assert 'json' in error.lower()

    def test_missing_image(self):
        is_valid, error = validate_payload({'quality': 80})
        assert not is_valid
        assert 'imageBase64' in error

    def test_image_not_a_string(self):
        is_valid, error = validate_payload({'imageBase64': 123})
        assert not is_valid


class TestParseIntField:
    """Tests for optional integer fields."""

    def test_missing_uses_default(self):
        assert parse_int_field({}, 'quality', 80) == (True, 80, "")

    def test_null_and_empty_use_default(self):
        assert parse_int_field({'width': None}, 'width') == (True, None, "")
        assert parse_int_field({'width': ''}, 'width') == (True, None, "")

    def test_integer(self):
        assert parse_int_field({'width': 640}, 'width') == (True, 640, "")

    def test_numeric_string(self):
        assert parse_int_field({'quality': ' 75 '}, 'quality') == (True, 75, "")

    def test_whole_float(self):
        assert parse_int_field({'height': 480.0}, 'height') == (True, 480, "")

    @pytest.mark.parametrize('value', ['abc', 12.5, True, [1]])
    def test_invalid(self, value):
        is_valid, parsed, error = parse_int_field({'width': value}, 'width')
        assert not is_valid
        assert parsed is None
        assert 'width' in error


class TestSanitizeString:
    """Tests for string sanitization."""

    def test_strips_null_bytes_and_whitespace(self):
        assert sanitize_string('  png\x00 ') == 'png'

    def test_empty(self):
        assert sanitize_string(None) == ""

    def test_truncates(self):
        assert len(sanitize_string('x' * 1000)) == 256


class TestCompressionRequest:
    """Tests for request model validation."""

    def test_defaults(self):
        request = CompressionRequest()
        assert request.format is OutputFormat.JPEG
        assert request.quality == 80
        assert request.width is None
        assert request.landscape_only is False

    def test_format_parsed(self):
        assert CompressionRequest(format='JPG').format is OutputFormat.JPEG

    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError):
            CompressionRequest(format='bmp')

    @pytest.mark.parametrize('quality', [0, 101, -5])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(ValidationError):
            CompressionRequest(quality=quality)

    def test_quality_must_be_int(self):
        with pytest.raises(ValidationError):
            CompressionRequest(quality='80')

    def test_non_positive_dimension(self):
        with pytest.raises(ValidationError):
            CompressionRequest(width=0)

    def test_immutable(self):
        request = CompressionRequest()
        with pytest.raises(AttributeError):
            request.quality = 10
