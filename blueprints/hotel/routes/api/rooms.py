"""
Room API routes.
"""

from flask import request
from flask_login import login_required

from blueprints.hotel.routes.api import get_json_body
from blueprints.hotel.services.reservation_service import get_reservation_service
from models.room import create_room, delete_room, get_all_rooms, get_room_by_id, update_room
from utils.api_response import api_error, api_success
from utils.decorators import permission_required
from utils.errors import ValidationError
from utils.helpers import to_json
from utils.messages import MESSAGES
from utils.validators import parse_bool, parse_decimal, parse_iso_date, sanitize_input


def _parse_room_fields(data: dict, partial: bool = False) -> dict:
    fields = {}

    if 'name' in data or not partial:
        name = sanitize_input(data.get('name'), max_length=100)
        if not name:
            raise ValidationError(MESSAGES['field_required'].format(field='name'), field='name')
        fields['name'] = name

    if 'price' in data or not partial:
        fields['price'] = parse_decimal(data.get('price'), 'price', minimum=0)

    return fields


def register_routes(bp):
    """Register room API routes on the blueprint."""

    # ============================================================================
    # ROOM API ROUTES
    # ============================================================================

    @bp.route('/rooms')
    @login_required
    @permission_required('hotel.rooms.view')
    def rooms_list():
        """
        List rooms.

        Query params:
            search: Case-insensitive substring of the room name
            available: 'true' to return only rooms free for check_in..check_out
            check_in, check_out: Stay dates (YYYY-MM-DD), required with available
        """
        if parse_bool(request.args.get('available', 'false'), 'available'):
            check_in = parse_iso_date(request.args.get('check_in'), 'check_in')
            check_out = parse_iso_date(request.args.get('check_out'), 'check_out')
            rooms = get_reservation_service().list_available_rooms(check_in, check_out)
        else:
            search = request.args.get('search', '').strip()
            rooms = get_all_rooms(search=search or None)

        return api_success(data=to_json(rooms), count=len(rooms))

    @bp.route('/rooms', methods=['POST'])
    @login_required
    @permission_required('hotel.rooms.manage')
    def rooms_create():
        """Create a room."""
        fields = _parse_room_fields(get_json_body())
        room_id = create_room(fields['name'], fields['price'])
        return api_success(
            data=to_json(get_room_by_id(room_id)),
            message=MESSAGES['room_created'],
            status=201
        )

    @bp.route('/rooms/<int:room_id>')
    @login_required
    @permission_required('hotel.rooms.view')
    def rooms_detail(room_id):
        """Get a room."""
        room = get_room_by_id(room_id)
        if not room:
            return api_error(MESSAGES['room_not_found'], 404)
        return api_success(data=to_json(room))

    @bp.route('/rooms/<int:room_id>', methods=['PUT'])
    @login_required
    @permission_required('hotel.rooms.manage')
    def rooms_update(room_id):
        """Update a room's name and/or price."""
        if not get_room_by_id(room_id):
            return api_error(MESSAGES['room_not_found'], 404)

        fields = _parse_room_fields(get_json_body(), partial=True)
        update_room(room_id, **fields)
        return api_success(data=to_json(get_room_by_id(room_id)), message=MESSAGES['room_updated'])

    @bp.route('/rooms/<int:room_id>', methods=['DELETE'])
    @login_required
    @permission_required('hotel.rooms.manage')
    def rooms_delete(room_id):
        """Delete a room that has no reservations."""
        if not get_room_by_id(room_id):
            return api_error(MESSAGES['room_not_found'], 404)

        delete_room(room_id)
        return api_success(message=MESSAGES['room_deleted'])

    @bp.route('/rooms/<int:room_id>/reservations')
    @login_required
    @permission_required('hotel.reservations.view')
    def rooms_reservations(room_id):
        """All reservations that include the room."""
        reservations = get_reservation_service().get_reservations_for_room(room_id)
        return api_success(data=to_json(reservations), count=len(reservations))
