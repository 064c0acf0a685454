"""
Main Flask application with configuration, logging, and error handlers.
"""
import os
import json
import logging
from datetime import datetime
from flask import Flask, jsonify, send_from_directory
from dotenv import load_dotenv

from image_compressor.engine.errors import CompressionError
from image_compressor.engine.pipeline import CompressionPipeline

# Load environment variables
load_dotenv()

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    """Configuration class to load environment variables."""

    FLASK_ENV = os.getenv('FLASK_ENV', 'production')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 50 * 1024 * 1024))  # 50MB default
    DEFAULT_QUALITY = int(os.getenv('DEFAULT_QUALITY', 80))
    DEFAULT_FORMAT = os.getenv('DEFAULT_FORMAT', 'jpeg')
    LANDSCAPE_MAX_WIDTH = int(os.getenv('LANDSCAPE_MAX_WIDTH', 1920))
    ULTRA_MAX_DIMENSION = int(os.getenv('ULTRA_MAX_DIMENSION', 1600))
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    STATIC_DIR = os.getenv('STATIC_DIR', os.path.join(BACKEND_DIR, 'public'))


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    EXTRA_FIELDS = (
        'endpoint',
        'duration_ms',
        'status',
        'compression_type',
        'output_format',
        'original_size',
        'compressed_size',
        'escalated',
    )

    def format(self, record):
        log_data = {
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(app):
    """Set up JSON logging for the application and the compression engine."""
    log_level = getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)

    for logger in (app.logger, logging.getLogger('image_compressor')):
        # Remove default handlers
        logger.handlers.clear()

        # Create console handler with JSON formatter
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        handler.setLevel(log_level)

        logger.setLevel(log_level)
        logger.addHandler(handler)

        # Prevent propagation to avoid duplicate logs
        logger.propagate = False


def create_app():
    """Create and configure the Flask application."""
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)

    # Set up JSON logging
    setup_logging(app)

    # Engine is stateless, one instance serves every request
    app.compressor = CompressionPipeline(
        landscape_max_width=Config.LANDSCAPE_MAX_WIDTH,
        ultra_max_dimension=Config.ULTRA_MAX_DIMENSION
    )

    # Register error handlers
    register_error_handlers(app)

    # Register routes
    register_routes(app)

    app.logger.info('Flask application initialized', extra={
        'flask_env': Config.FLASK_ENV,
        'log_level': Config.LOG_LEVEL
    })

    return app


def register_error_handlers(app):
    """Register error handlers for engine errors and common HTTP status codes."""

    @app.errorhandler(CompressionError)
    def compression_error(error):
        """Handle errors raised by the compression engine."""
        if error.status_code >= 500:
            app.logger.error(f'Compression failed: {error.message}', exc_info=True)
        else:
            app.logger.warning(f'Rejected request: {error.message}')
        return jsonify({
            'status': 'error',
            'error': type(error).__name__,
            'error_code': error.error_code,
            'message': error.message
        }), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        app.logger.warning(f'Bad request: {str(error)}')
        return jsonify({
            'status': 'error',
            'error': 'Bad request',
            'error_code': 'BAD_REQUEST',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request data'
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        app.logger.warning(f'Resource not found: {str(error)}')
        return jsonify({
            'status': 'error',
            'error': 'Not found',
            'error_code': 'NOT_FOUND',
            'message': 'Route not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        app.logger.warning(f'Method not allowed: {str(error)}')
        return jsonify({
            'status': 'error',
            'error': 'Method not allowed',
            'error_code': 'METHOD_NOT_ALLOWED',
            'message': str(error.description) if hasattr(error, 'description') else 'Method not allowed'
        }), 405

    @app.errorhandler(413)
    def request_entity_too_large(error):
        """Handle 413 Request Entity Too Large errors."""
        app.logger.warning(f'Request too large: {str(error)}')
        return jsonify({
            'status': 'error',
            'error': 'Request entity too large',
            'error_code': 'IMAGE_TOO_LARGE',
            'message': f'Request exceeds maximum size of {app.config["MAX_CONTENT_LENGTH"]} bytes'
        }), 413

    @app.errorhandler(500)
    def internal_server_error(error):
        """Handle 500 Internal Server Error."""
        app.logger.error(f'Internal server error: {str(error)}', exc_info=True)
        return jsonify({
            'status': 'error',
            'error': 'Internal server error',
            'error_code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred'
        }), 500


def register_routes(app):
    """Register application routes."""

    # Import and register compression routes
    from image_compressor.routes.compress import register_compress_routes
    register_compress_routes(app)

    # Import and register image info route
    from image_compressor.routes.info import register_info_route
    register_info_route(app)

    @app.after_request
    def add_cors_headers(response):
        """Allow browser clients from the configured origins."""
        response.headers['Access-Control-Allow-Origin'] = app.config['CORS_ORIGINS']
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        return response

    @app.route('/', methods=['GET'])
    def index():
        """Serve the browser client."""
        return send_from_directory(app.config['STATIC_DIR'], 'index.html')

    @app.route('/api/health', methods=['GET'])
    def health():
        """Liveness check."""
        return jsonify({
            'status': 'OK',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'service': 'Image Compressor API'
        }), 200


# Create the Flask app instance
app = create_app()


if __name__ == '__main__':
    # For local development only
    port = int(os.environ.get('PORT', 3000))
    app.run(host='0.0.0.0', port=port, debug=(Config.FLASK_ENV != 'production'))
