"""
Error taxonomy for the compression engine.

Every error carries a stable ``error_code`` and the HTTP status the service
layer answers with, so routes can re-raise them untouched.
"""


class CompressionError(Exception):
    """Base class for all engine errors."""

    error_code = 'COMPRESSION_ERROR'
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CompressionError):
    """The request cannot be served as given. Never retried."""

    error_code = 'VALIDATION_ERROR'
    status_code = 400


class UnsupportedFormatError(ValidationError):
    error_code = 'UNSUPPORTED_FORMAT'


class NotLandscapeError(ValidationError):
    error_code = 'NOT_LANDSCAPE'


class DecodeError(CompressionError):
    """The payload is not a decodable image."""

    error_code = 'DECODE_ERROR'
    status_code = 400


class EncodeError(CompressionError):
    """The codec failed while producing output bytes."""

    error_code = 'ENCODE_ERROR'
    status_code = 500
