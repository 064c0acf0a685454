"""
Input validation utilities for the backend API.
"""
from typing import Optional, Tuple


def validate_payload(payload) -> Tuple[bool, str]:
    """
    Validates the JSON body of an image request.

    Args:
        payload: Parsed JSON body (None if the body was not JSON)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(payload, dict):
        return False, "Request body must be a JSON object"

    image_base64 = payload.get('imageBase64')
    if not image_base64:
        return False, "An image in base64 is required (imageBase64)"

    if not isinstance(image_base64, str):
        return False, "imageBase64 must be a string"

    return True, ""


def parse_int_field(payload: dict, name: str, default: Optional[int] = None) -> Tuple[bool, Optional[int], str]:
    """
    Parses an optional integer field, accepting numeric strings.

    Args:
        payload: Parsed JSON body
        name: Field name
        default: Value used when the field is missing, null or empty

    Returns:
        Tuple of (is_valid, value, error_message)
    """
    value = payload.get(name)
    if value is None or value == '':
        return True, default, ""

    # bool is an int subclass, but true/false is never a valid size or quality
    if isinstance(value, bool):
        return False, None, f"{name} must be an integer"

    if isinstance(value, float):
        if not value.is_integer():
            return False, None, f"{name} must be an integer"
        return True, int(value), ""

    try:
        return True, int(str(value).strip()), ""
    except ValueError:
        return False, None, f"{name} must be an integer"


def sanitize_string(input_str: str) -> str:
    """
    Sanitize string input to prevent injection attacks.

    Args:
        input_str: String to sanitize

    Returns:
        Sanitized string
    """
    if not input_str:
        return ""

    # Remove any null bytes
    sanitized = str(input_str).replace('\x00', '')

    # Strip whitespace
    sanitized = sanitized.strip()

    # Limit length to prevent DoS
    max_length = 256
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
