"""
Invoice Service - Printable invoice data for a reservation.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from flask import current_app

from blueprints.hotel.services.pricing_service import EXTRA_BED_RATE, build_quote

logger = logging.getLogger(__name__)


def format_invoice_number(reservation: dict) -> str:
    """Invoice number as '<year>/<number padded to 4 digits>'."""
    return f"{reservation['number_year']}/{reservation['number']:04d}"


def build_invoice(
    reservation: dict,
    issued_on: date,
    extra_bed_rate: Decimal = EXTRA_BED_RATE
) -> Dict[str, Any]:
    """
    Build the data behind a reservation invoice.

    Line items are priced from the rooms' current prices; the amount due is
    the reservation's stored total. When the two differ (a room price changed
    after booking) the invoice is flagged.

    Args:
        reservation: Reservation dict with 'customer' and 'rooms'
        issued_on: Invoice date
        extra_bed_rate: Fee per night for an extra bed

    Returns:
        dict with hotel, invoice_number, issued_on, customer, stay, lines,
        extra_bed_fee, subtotal, total, subtotal_matches
    """
    quote = build_quote(
        reservation['rooms'],
        reservation['check_in_date'],
        reservation['check_out_date'],
        reservation['extra_bed'],
        extra_bed_rate
    )
    total = Decimal(reservation['total_amount']).quantize(Decimal('0.01'))
    subtotal_matches = quote['total'] == total

    if not subtotal_matches:
        logger.info(
            f"[Invoice] Reservation id={reservation['id']}: line items total {quote['total']} "
            f"differ from stored total {total}"
        )

    config = current_app.config
    return {
        'hotel': {
            'name': config.get('HOTEL_NAME'),
            'address': config.get('HOTEL_ADDRESS'),
            'tax_id': config.get('HOTEL_TAX_ID'),
            'phone': config.get('HOTEL_PHONE'),
        },
        'currency': config.get('CURRENCY', 'THB'),
        'invoice_number': format_invoice_number(reservation),
        'issued_on': issued_on,
        'customer': reservation['customer'],
        'check_in_date': reservation['check_in_date'],
        'check_out_date': reservation['check_out_date'],
        'nights': quote['nights'],
        'lines': quote['lines'],
        'extra_bed': quote['extra_bed'],
        'extra_bed_rate': quote['extra_bed_rate'],
        'extra_bed_fee': quote['extra_bed_fee'],
        'subtotal': quote['total'],
        'total': total,
        'subtotal_matches': subtotal_matches,
        'notes': reservation.get('notes'),
    }
