"""
Standardized API response helpers.

Provides consistent JSON response format across all API endpoints:

    Success:  {"success": true, "data": {...}, "message": "..."}
    Error:    {"success": false, "error": "Error message"}
    Warning:  {"success": true, "data": {...}, "warning": "..."}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(data={'id': 1}, message='Created')
    return api_error('Missing data', status=400)
"""

from flask import jsonify
from typing import Any


def api_success(
    data: dict | list | None = None,
    message: str | None = None,
    warning: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional dict or list to include as 'data' key.
        message: Optional success message.
        warning: Optional warning message.
        status: HTTP status code (default 200).
        **extra_fields: Additional top-level fields to include in the response.

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if warning:
        response['warning'] = warning

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        error: Error message.
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g., conflicting_rooms).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error}

    # Merge extra fields for additional error context
    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status
