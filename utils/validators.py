"""
Input validation helper functions.
Provides validation and parsing for common input types.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from utils.errors import ValidationError


def validate_date_range(start_date, end_date) -> bool:
    """
    Validate that the end date is strictly after the start date.

    A stay must cover at least one night, so equal dates are invalid.

    Args:
        start_date: Start date (date or YYYY-MM-DD string)
        end_date: End date (date or YYYY-MM-DD string)

    Returns:
        True if valid date range
    """
    try:
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
    except ValidationError:
        return False
    return end > start


def validate_password(password: str, min_length: int = 6) -> tuple:
    """
    Validate password strength.

    Args:
        password: Password to validate
        min_length: Minimum password length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, 'Password is required'

    if len(password) < min_length:
        return False, f'Password must be at least {min_length} characters'

    return True, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = str(text).strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


# =============================================================================
# PARSERS (raise ValidationError)
# =============================================================================

def parse_iso_date(value, field: str = 'date') -> date:
    """
    Parse a date from a YYYY-MM-DD string or a full ISO-8601 datetime.

    Datetime strings (e.g. '2024-06-01T00:00:00.000Z') keep only the date part.

    Args:
        value: date, datetime, or string
        field: Field name for the error message

    Returns:
        date

    Raises:
        ValidationError: If the value is missing or not a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required', field=field)
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise ValidationError(f'{field} must be a date in YYYY-MM-DD format', field=field)


def parse_decimal(value, field: str = 'amount', minimum: Decimal = None) -> Decimal:
    """
    Parse a monetary value into a Decimal with two places.

    Args:
        value: Number or numeric string
        field: Field name for the error message
        minimum: Optional inclusive lower bound

    Returns:
        Decimal quantized to 0.01

    Raises:
        ValidationError: If the value is not a finite number or is below minimum
    """
    if isinstance(value, bool) or value is None or value == '':
        raise ValidationError(f'{field} must be a number', field=field)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} must be a number', field=field)
    if not amount.is_finite():
        raise ValidationError(f'{field} must be a number', field=field)
    if minimum is not None and amount < minimum:
        raise ValidationError(f'{field} must be at least {minimum}', field=field)
    return amount.quantize(Decimal('0.01'))


def parse_bool(value, field: str = 'flag') -> bool:
    """
    Parse a boolean from JSON or form input.

    Accepts real booleans, 0/1, and 'true'/'false'/'1'/'0'/'on'/'off' strings.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'on', 'yes'):
            return True
        if lowered in ('false', '0', 'off', 'no', ''):
            return False
    raise ValidationError(f'{field} must be true or false', field=field)


def parse_id(value, field: str = 'id') -> int:
    """Parse a positive integer identifier."""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer id', field=field)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer id', field=field)
    if parsed <= 0:
        raise ValidationError(f'{field} must be an integer id', field=field)
    return parsed


def parse_id_list(values, field: str = 'room_ids') -> list:
    """
    Parse a list of ids, dropping duplicates while keeping first-seen order.

    Raises:
        ValidationError: If values is not a list or any element is not an id
    """
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f'{field} must be a list', field=field)
    ids = []
    for value in values:
        parsed = parse_id(value, field)
        if parsed not in ids:
            ids.append(parsed)
    return ids
