"""
Reservation payload parsing.

Turns raw JSON bodies into typed inputs for ReservationService. Both
snake_case keys and the camelCase keys used by the booking front end
(customerId, roomIds, checkInDate, checkOutDate, totalAmount, extraBed)
are accepted.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from utils.errors import ValidationError
from utils.messages import MESSAGES
from utils.validators import (
    parse_bool,
    parse_decimal,
    parse_id,
    parse_id_list,
    parse_iso_date,
    sanitize_input,
    validate_date_range,
)

FIELD_ALIASES = {
    'customer_id': 'customerId',
    'room_ids': 'roomIds',
    'check_in_date': 'checkInDate',
    'check_out_date': 'checkOutDate',
    'total_amount': 'totalAmount',
    'extra_bed': 'extraBed',
    'notes': 'notes',
}


@dataclass
class ReservationInput:
    """Validated fields for a new reservation."""

    customer_id: int
    room_ids: List[int]
    check_in_date: date
    check_out_date: date
    extra_bed: bool = False
    total_amount: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass
class ReservationPatch:
    """
    Partial update of a reservation.

    Only the names listed in `fields` were present in the request; the
    attribute values of absent fields are meaningless.
    """

    fields: set = field(default_factory=set)
    customer_id: Optional[int] = None
    room_ids: Optional[List[int]] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    extra_bed: Optional[bool] = None
    total_amount: Optional[Decimal] = None
    notes: Optional[str] = None

    def has(self, name: str) -> bool:
        return name in self.fields


def _lookup(data: Mapping[str, Any], name: str):
    """Return (present, value) for a field under its snake or camel key."""
    if name in data:
        return True, data[name]
    alias = FIELD_ALIASES[name]
    if alias in data:
        return True, data[alias]
    return False, None


def _parse_field(name: str, value):
    if name == 'customer_id':
        if value in (None, ''):
            raise ValidationError(MESSAGES['customer_required'], field=name)
        return parse_id(value, name)
    if name == 'room_ids':
        room_ids = parse_id_list(value, name)
        if not room_ids:
            raise ValidationError(MESSAGES['rooms_required'], field=name)
        return room_ids
    if name in ('check_in_date', 'check_out_date'):
        return parse_iso_date(value, name)
    if name == 'total_amount':
        if value is None or value == '':
            return None
        return parse_decimal(value, name, minimum=Decimal('0'))
    if name == 'extra_bed':
        return parse_bool(value, name)
    if name == 'notes':
        return sanitize_input(value, max_length=2000) or None
    raise KeyError(name)


def parse_reservation_payload(data) -> ReservationInput:
    """
    Parse a create-reservation request body.

    Args:
        data: Decoded JSON object

    Returns:
        ReservationInput

    Raises:
        ValidationError: If a required field is missing or malformed
    """
    if not isinstance(data, Mapping):
        raise ValidationError('Request body must be a JSON object')

    values = {}
    for name in FIELD_ALIASES:
        present, raw = _lookup(data, name)
        if present:
            values[name] = _parse_field(name, raw)

    if 'customer_id' not in values:
        raise ValidationError(MESSAGES['customer_required'], field='customer_id')
    if 'room_ids' not in values:
        raise ValidationError(MESSAGES['rooms_required'], field='room_ids')
    for name in ('check_in_date', 'check_out_date'):
        if name not in values:
            raise ValidationError(MESSAGES['field_required'].format(field=name), field=name)

    if not validate_date_range(values['check_in_date'], values['check_out_date']):
        raise ValidationError(MESSAGES['invalid_date_range'], field='check_out_date')

    return ReservationInput(
        customer_id=values['customer_id'],
        room_ids=values['room_ids'],
        check_in_date=values['check_in_date'],
        check_out_date=values['check_out_date'],
        extra_bed=values.get('extra_bed', False),
        total_amount=values.get('total_amount'),
        notes=values.get('notes'),
    )


def parse_reservation_patch(data) -> ReservationPatch:
    """
    Parse an update-reservation request body. Every field is optional.

    Cross-field rules (check-out after check-in) are checked by the service
    on the merged values, since a patch may move only one end of the stay.

    Raises:
        ValidationError: If a present field is malformed
    """
    if not isinstance(data, Mapping):
        raise ValidationError('Request body must be a JSON object')

    patch = ReservationPatch()
    for name in FIELD_ALIASES:
        present, raw = _lookup(data, name)
        if not present:
            continue
        setattr(patch, name, _parse_field(name, raw))
        patch.fields.add(name)
    return patch
