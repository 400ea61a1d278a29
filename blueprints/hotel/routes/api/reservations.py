"""
Reservation API routes including availability checks and price quotes.
"""

from flask import request
from flask_login import current_user, login_required

from blueprints.hotel.routes.api import get_json_body
from blueprints.hotel.services.pricing_service import build_quote
from blueprints.hotel.services.reservation_payload import (
    parse_reservation_patch,
    parse_reservation_payload,
)
from blueprints.hotel.services.reservation_service import get_reservation_service
from models.room import get_rooms_by_ids
from utils.api_response import api_success
from utils.decorators import permission_required
from utils.errors import ReferentialError, ValidationError
from utils.helpers import to_json
from utils.messages import MESSAGES
from utils.validators import (
    parse_bool, parse_id, parse_id_list, parse_iso_date, validate_date_range
)


def _first(data: dict, *keys):
    for key in keys:
        if key in data:
            return data[key]
    return None


def _parse_stay(data: dict) -> tuple:
    """Room ids and stay dates shared by the quote and availability endpoints."""
    room_ids = parse_id_list(_first(data, 'room_ids', 'roomIds'), 'room_ids')
    if not room_ids:
        raise ValidationError(MESSAGES['rooms_required'], field='room_ids')
    check_in = parse_iso_date(_first(data, 'check_in_date', 'checkInDate'), 'check_in_date')
    check_out = parse_iso_date(_first(data, 'check_out_date', 'checkOutDate'), 'check_out_date')
    if not validate_date_range(check_in, check_out):
        raise ValidationError(MESSAGES['invalid_date_range'], field='check_out_date')
    return room_ids, check_in, check_out


def register_routes(bp):
    """Register reservation API routes on the blueprint."""

    # ============================================================================
    # RESERVATION API ROUTES
    # ============================================================================

    @bp.route('/reservations')
    @login_required
    @permission_required('hotel.reservations.view')
    def reservations_list():
        """
        List reservations, newest first.

        Query params:
            customer_id: Only this customer's reservations
            room_id: Only reservations that include this room
        """
        customer_id = request.args.get('customer_id') or request.args.get('customerId')
        room_id = request.args.get('room_id') or request.args.get('roomId')

        reservations = get_reservation_service().list_reservations(
            customer_id=parse_id(customer_id, 'customer_id') if customer_id else None,
            room_id=parse_id(room_id, 'room_id') if room_id else None
        )
        return api_success(data=to_json(reservations), count=len(reservations))

    @bp.route('/reservations', methods=['POST'])
    @login_required
    @permission_required('hotel.reservations.manage')
    def reservations_create():
        """Create a reservation. 409 with conflicting_rooms if any room is booked."""
        data = parse_reservation_payload(get_json_body())
        result = get_reservation_service().create_reservation(data, created_by=current_user.username)
        return api_success(
            data=to_json(result.reservation),
            message=MESSAGES['reservation_created'],
            warning=result.warning,
            status=201
        )

    @bp.route('/reservations/<int:reservation_id>')
    @login_required
    @permission_required('hotel.reservations.view')
    def reservations_detail(reservation_id):
        """Get reservation details."""
        reservation = get_reservation_service().get_reservation(reservation_id)
        return api_success(data=to_json(reservation))

    @bp.route('/reservations/<int:reservation_id>', methods=['PUT', 'PATCH'])
    @login_required
    @permission_required('hotel.reservations.manage')
    def reservations_update(reservation_id):
        """Partially update a reservation."""
        patch = parse_reservation_patch(get_json_body())
        result = get_reservation_service().update_reservation(reservation_id, patch)
        return api_success(
            data=to_json(result.reservation),
            message=MESSAGES['reservation_updated'],
            warning=result.warning
        )

    @bp.route('/reservations/<int:reservation_id>', methods=['DELETE'])
    @login_required
    @permission_required('hotel.reservations.manage')
    def reservations_delete(reservation_id):
        """Delete a reservation and its room assignments."""
        get_reservation_service().delete_reservation(reservation_id)
        return api_success(message=MESSAGES['reservation_deleted'])

    # ============================================================================
    # PRICING AND AVAILABILITY
    # ============================================================================

    @bp.route('/reservations/quote', methods=['POST'])
    @login_required
    @permission_required('hotel.reservations.view')
    def reservations_quote():
        """Price breakdown for a candidate booking (nothing is saved)."""
        data = get_json_body()
        room_ids, check_in, check_out = _parse_stay(data)
        extra_bed = parse_bool(_first(data, 'extra_bed', 'extraBed') or False, 'extra_bed')

        rooms = get_rooms_by_ids(room_ids)
        if len(rooms) != len(room_ids):
            raise ReferentialError(field='room_ids')

        service = get_reservation_service()
        quote = build_quote(rooms, check_in, check_out, extra_bed, service.extra_bed_rate)
        return api_success(data=to_json(quote))

    @bp.route('/reservations/check-availability', methods=['POST'])
    @login_required
    @permission_required('hotel.reservations.view')
    def reservations_check_availability():
        """Names of the requested rooms already booked for the stay."""
        data = get_json_body()
        room_ids, check_in, check_out = _parse_stay(data)
        exclude = _first(data, 'exclude_reservation_id', 'excludeReservationId')

        conflicting = get_reservation_service().check_availability(
            room_ids, check_in, check_out,
            exclude_reservation_id=parse_id(exclude, 'exclude_reservation_id') if exclude else None
        )
        return api_success(data={
            'available': not conflicting,
            'conflicting_rooms': conflicting,
        })
