"""
Domain exceptions.

Every error the models and services raise for the caller derives from
HotelError. The app-level error handler turns them into the standard JSON
error envelope (see utils.api_response.api_error), using status_code and
any extra detail fields.
"""

import sqlite3


class HotelError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(HotelError):
    """Malformed input. Never retried."""

    status_code = 400


class NotFoundError(HotelError):
    """Operating on a nonexistent record."""

    status_code = 404


class ConflictError(HotelError):
    """Overlapping booking, duplicate unique value, or blocked delete."""

    status_code = 409


class ReferentialError(HotelError):
    """Reference to a customer or room that does not exist."""

    status_code = 400

    def __init__(self, message: str = 'Invalid customer or room reference', **details):
        super().__init__(message, **details)


def translate_integrity_error(error: sqlite3.IntegrityError, conflict_message: str) -> HotelError:
    """
    Map a SQLite integrity failure to the matching domain error.

    Args:
        error: The IntegrityError raised by sqlite3
        conflict_message: Message to use when a UNIQUE constraint failed

    Returns:
        HotelError: ReferentialError, ConflictError, or ValidationError
    """
    text = str(error)
    if 'FOREIGN KEY' in text:
        return ReferentialError()
    if 'UNIQUE' in text:
        return ConflictError(conflict_message)
    return ValidationError(f'Invalid data: {text}')
