"""
Pricing Service - Business logic for reservation totals.

Handles:
- Night count for a stay
- Room and extra-bed charges
- Quote breakdowns for previews and invoices
"""

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Sequence

logger = logging.getLogger(__name__)

EXTRA_BED_RATE = Decimal('100')
CENTS = Decimal('0.01')


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def calculate_nights(check_in, check_out) -> int:
    """
    Number of nights charged for a stay.

    Partial days round up and the result is never below one.

    Args:
        check_in: Check-in date or datetime
        check_out: Check-out date or datetime

    Returns:
        int: Nights to charge (>= 1)
    """
    delta = _as_datetime(check_out) - _as_datetime(check_in)
    days = delta.total_seconds() / 86400
    return max(1, math.ceil(days))


def calculate_total(
    rooms: Sequence[Mapping[str, Any]],
    check_in,
    check_out,
    extra_bed: bool,
    extra_bed_rate: Decimal = EXTRA_BED_RATE
) -> Decimal:
    """
    Total amount for a stay.

    total = sum(room price x nights) + (nights x extra_bed_rate if extra_bed)

    Args:
        rooms: Rooms booked, each with a 'price' key
        check_in: Check-in date
        check_out: Check-out date
        extra_bed: Whether an extra bed was requested
        extra_bed_rate: Fee per night for the extra bed

    Returns:
        Decimal: Total quantized to 0.01
    """
    nights = calculate_nights(check_in, check_out)
    total = sum((Decimal(room['price']) * nights for room in rooms), Decimal('0'))
    if extra_bed:
        total += Decimal(extra_bed_rate) * nights
    return total.quantize(CENTS)


def build_quote(
    rooms: Sequence[Mapping[str, Any]],
    check_in,
    check_out,
    extra_bed: bool,
    extra_bed_rate: Decimal = EXTRA_BED_RATE
) -> Dict[str, Any]:
    """
    Pricing breakdown for a stay, without persisting anything.

    Args:
        rooms: Rooms booked, each with 'name' and 'price' keys
        check_in: Check-in date
        check_out: Check-out date
        extra_bed: Whether an extra bed was requested
        extra_bed_rate: Fee per night for the extra bed

    Returns:
        dict with nights, lines (one per room), extra_bed_fee and total
    """
    nights = calculate_nights(check_in, check_out)

    lines: List[Dict[str, Any]] = []
    for room in rooms:
        price = Decimal(room['price']).quantize(CENTS)
        lines.append({
            'room_id': room.get('id'),
            'name': room.get('name'),
            'price': price,
            'nights': nights,
            'subtotal': (price * nights).quantize(CENTS),
        })

    rate = Decimal(extra_bed_rate).quantize(CENTS)
    extra_bed_fee = (rate * nights).quantize(CENTS) if extra_bed else Decimal('0.00')
    total = calculate_total(rooms, check_in, check_out, extra_bed, extra_bed_rate)

    logger.debug(f"[Pricing] Quote: {len(lines)} rooms x {nights} nights, extra_bed={extra_bed}, total={total}")

    return {
        'check_in_date': check_in,
        'check_out_date': check_out,
        'nights': nights,
        'lines': lines,
        'extra_bed': bool(extra_bed),
        'extra_bed_rate': rate,
        'extra_bed_fee': extra_bed_fee,
        'total': total,
    }
