"""
Miscellaneous utility helper functions.
Provides formatting and JSON conversion used across the application.
"""

import os
from datetime import date, datetime
from decimal import Decimal


def to_json(value):
    """
    Convert model data into JSON-safe values.

    Dates become ISO strings (YYYY-MM-DD), datetimes ISO strings with a
    space separator, Decimals two-place strings. Dicts, lists and tuples are
    converted recursively.

    Args:
        value: Any model value

    Returns:
        JSON-serializable value
    """
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f'{value:.2f}'
    return value


def format_date(value, format_str: str = '%d/%m/%Y') -> str:
    """
    Format a date for display.

    Args:
        value: date, datetime or YYYY-MM-DD string
        format_str: Output format (default: DD/MM/YYYY)

    Returns:
        Formatted date string or original if invalid
    """
    if isinstance(value, (date, datetime)):
        return value.strftime(format_str)
    try:
        date_obj = datetime.strptime(value, '%Y-%m-%d')
        return date_obj.strftime(format_str)
    except (ValueError, TypeError):
        return value or ''


def format_money(value) -> str:
    """Format an amount with thousands separators and two decimals."""
    if value is None:
        return ''
    return f'{Decimal(value):,.2f}'


def get_file_extension(filename: str) -> str:
    """
    Get file extension from filename.

    Args:
        filename: Filename

    Returns:
        Extension without dot (lowercase)
    """
    if not filename:
        return ''

    return os.path.splitext(filename)[1][1:].lower()


def allowed_file(filename: str, allowed_extensions: set) -> bool:
    """
    Check if file extension is allowed.

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions

    Returns:
        True if extension is allowed
    """
    return get_file_extension(filename) in allowed_extensions
