"""
/api/image-info endpoint for reading image metadata without compressing.
"""
from flask import jsonify

from image_compressor.routes.compress import read_image_payload


def register_info_route(app):
    """Register the /api/image-info endpoint with the Flask app."""

    @app.route('/api/image-info', methods=['POST'])
    def image_info():
        """
        Accepts JSON with imageBase64 and returns size, dimensions, detected
        format, channel count and alpha/profile flags.
        """
        _, image_bytes = read_image_payload()
        asset = app.compressor.inspect(image_bytes)
        metadata = asset.metadata

        app.logger.info(f'Inspected {metadata.format} image {metadata.dimensions}', extra={
            'endpoint': '/api/image-info',
            'original_size': asset.size,
            'status': 'success'
        })

        return jsonify({
            'status': 'success',
            'size': asset.size,
            'width': metadata.width,
            'height': metadata.height,
            'format': metadata.format,
            'channels': metadata.channels,
            'hasProfile': metadata.has_profile,
            'hasAlpha': metadata.has_alpha
        }), 200
