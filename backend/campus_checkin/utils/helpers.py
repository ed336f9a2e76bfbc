"""Helper functions for the application."""
from datetime import datetime, timezone
from flask import jsonify
from typing import Any

# Stable codes for failures that do not come from the check-in pipeline
STATUS_CODES = {
    400: 'invalid_request',
    401: 'unauthorized',
    403: 'forbidden',
    404: 'not_found',
    405: 'method_not_allowed',
    409: 'conflict',
    429: 'rate_limited',
    500: 'internal_error'
}

def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    message = getattr(error, 'description', None) or str(error)
    return error_response(message, status_code)

def success_response(data: Any = None, message: str = None, status_code: int = 200, **fields):
    """Return consistent success response."""
    response = {'success': True}
    response.update(fields)

    if message is not None:
        response['message'] = message

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code

def error_response(message: str, status_code: int = 400, code: str = None, **fields):
    """Return consistent error response."""
    response = {
        'success': False,
        'code': code or STATUS_CODES.get(status_code, 'error'),
        'message': message
    }
    response.update(fields)
    return jsonify(response), status_code
