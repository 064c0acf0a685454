"""
Compression endpoints: standard, landscape-only and ultra.
"""
import base64
from datetime import datetime
from flask import request, jsonify
from werkzeug.exceptions import BadRequest, RequestEntityTooLarge

# Import utilities
from image_compressor.engine.errors import CompressionError, ValidationError
from image_compressor.engine.metadata import decode_image_payload
from image_compressor.engine.models import CompressionRequest
from image_compressor.utils.validation import validate_payload, parse_int_field, sanitize_string


def read_image_payload():
    """
    Parses and validates the JSON body shared by all image endpoints.

    Returns:
        Tuple of (payload dict, decoded image bytes)
    """
    payload = request.get_json(silent=True)

    is_valid, error_msg = validate_payload(payload)
    if not is_valid:
        raise ValidationError(error_msg)

    return payload, decode_image_payload(payload['imageBase64'])


def build_request(payload: dict, app, *int_fields) -> CompressionRequest:
    """
    Builds a CompressionRequest from the payload.

    Args:
        payload: Validated JSON body
        app: Flask app, for configured defaults
        *int_fields: (json field, request option) pairs to parse as integers

    Raises:
        ValidationError: If an integer field is malformed
    """
    values = {}
    for field, option in int_fields:
        default = app.config['DEFAULT_QUALITY'] if field == 'quality' else None
        is_valid, value, error_msg = parse_int_field(payload, field, default)
        if not is_valid:
            raise ValidationError(error_msg)
        if value is not None:
            values[option] = value

    output_format = sanitize_string(payload.get('format') or app.config['DEFAULT_FORMAT'])
    landscape_only = payload.get('landscapeOnly') in (True, 'true')

    return CompressionRequest(format=output_format, landscape_only=landscape_only, **values)


def build_response(result, **extra) -> dict:
    """Serializes a CompressionResult into the API response body."""
    encoded = base64.b64encode(result.data).decode('utf-8')
    response_data = {
        'status': 'success',
        'originalSize': result.original_size,
        'compressedSize': result.compressed_size,
        'reduction': result.reduction,
        'compressedImage': f'data:{result.mime_type};base64,{encoded}',
        'format': result.format.value,
        'mimeType': result.mime_type,
        'quality': result.requested_quality,
        'finalQuality': result.final_quality,
        'resized': result.resized,
        'qualityAdjusted': result.quality_adjusted,
        'highResOptimized': result.high_res_optimized,
        'escalated': result.escalated,
        'isLandscape': result.is_landscape,
        'compressionType': result.compression_type,
        'originalDimensions': result.original_dimensions,
        'newDimensions': result.new_dimensions,
    }
    response_data.update(extra)
    return response_data


def register_compress_routes(app):
    """Register the compression endpoints with the Flask app."""

    def handle(endpoint, compress):
        start_time = datetime.utcnow()

        try:
            response_data = compress()

            duration_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)
            app.logger.info('Request completed', extra={
                'endpoint': endpoint,
                'compression_type': response_data['compressionType'],
                'original_size': response_data['originalSize'],
                'compressed_size': response_data['compressedSize'],
                'duration_ms': duration_ms,
                'status': 'success'
            })

            return jsonify(response_data), 200

        except (BadRequest, RequestEntityTooLarge, CompressionError):
            # Re-raise so the registered error handlers answer
            raise

        except Exception as e:
            # Log and return 500 for unexpected errors
            duration_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)
            app.logger.error(f'Request failed: {str(e)}', exc_info=True, extra={
                'endpoint': endpoint,
                'duration_ms': duration_ms,
                'status': 'error'
            })

            return jsonify({
                'status': 'error',
                'error': 'Internal server error',
                'error_code': 'INTERNAL_ERROR',
                'message': 'An unexpected error occurred',
                'details': str(e)
            }), 500

    @app.route('/api/compress', methods=['POST'])
    def compress():
        """
        Adaptive compression endpoint.

        Accepts JSON with:
        - imageBase64: str (required, optionally a data URI)
        - quality: int (1-100, default 80)
        - format: str (jpeg, jpg, png or webp, default jpeg)
        - width / height: int (optional upper bounds, never enlarges)
        - landscapeOnly: bool (optional, use the landscape path)

        Returns JSON with the compressed image and size statistics.
        """
        def run():
            payload, image_bytes = read_image_payload()
            compression_request = build_request(
                payload, app, ('quality', 'quality'), ('width', 'width'), ('height', 'height'),
                ('maxWidth', 'max_width')
            )
            result = app.compressor.compress(image_bytes, compression_request)
            if result.is_landscape:
                return build_response(result, maxWidthApplied=compression_request.max_width or app.compressor.landscape_max_width)
            return build_response(result)

        return handle('/api/compress', run)

    @app.route('/api/compress-landscape', methods=['POST'])
    def compress_landscape():
        """
        Landscape-only compression; portrait and square images are rejected.

        Accepts JSON with imageBase64, quality, format and maxWidth (default 1920).
        """
        def run():
            payload, image_bytes = read_image_payload()
            compression_request = build_request(payload, app, ('quality', 'quality'), ('maxWidth', 'max_width'))
            result = app.compressor.compress_landscape(image_bytes, compression_request)
            max_width = compression_request.max_width or app.compressor.landscape_max_width
            return build_response(result, maxWidthApplied=max_width)

        return handle('/api/compress-landscape', run)

    @app.route('/api/compress-ultra', methods=['POST'])
    def compress_ultra():
        """
        Ultra compression: larger side clamped to maxDimension (default 1600),
        quality fixed at 40 whatever the request says.

        Accepts JSON with imageBase64, format and maxDimension.
        """
        def run():
            payload, image_bytes = read_image_payload()
            compression_request = build_request(payload, app, ('maxDimension', 'max_dimension'))
            result = app.compressor.compress_ultra(image_bytes, compression_request)
            max_dimension = compression_request.max_dimension or app.compressor.ultra_max_dimension
            return build_response(result, maxDimension=max_dimension)

        return handle('/api/compress-ultra', run)
