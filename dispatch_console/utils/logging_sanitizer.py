"""
Logging Sanitizer Utility

Strips credentials out of API payloads, request headers and console form data
before they are written to the log.
"""

from typing import Dict, Any, Mapping
from werkzeug.datastructures import ImmutableMultiDict


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'authorization',
    'password',
    'secret',
    'secret_key',
    'token',
    'api_key',
    'apikey',
    'api_token',
    'auth_token',
    'access_token',
    'refresh_token',
    'session_id',
    'csrf_token',
    'cookie',
    'set-cookie',
    'x-csrftoken',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Example:
        >>> sanitize_dict({'booking_id': 42, 'access_token': 'abc'})
        {'booking_id': 42, 'access_token': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, redact_text) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_headers(headers: Mapping[str, str], redact_text: str = '[REDACTED]') -> Dict[str, str]:
    """Sanitize HTTP headers (Authorization, cookies, CSRF tokens)."""
    return sanitize_dict(dict(headers or {}), redact_text)


def sanitize_form_data(form_data: ImmutableMultiDict, redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """Sanitize Flask request.form data for safe logging."""
    return sanitize_dict(form_data.to_dict(), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Sanitize exception messages to ensure they don't contain sensitive data.
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
