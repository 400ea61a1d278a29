"""
Customer API routes.
"""

from flask import request
from flask_login import login_required

from blueprints.hotel.routes.api import get_json_body
from blueprints.hotel.services.reservation_service import get_reservation_service
from models.customer import (
    create_customer, delete_customer, get_all_customers,
    get_customer_by_id, update_customer
)
from utils.api_response import api_error, api_success
from utils.decorators import permission_required
from utils.errors import ValidationError
from utils.helpers import to_json
from utils.messages import MESSAGES
from utils.validators import sanitize_input

# JSON key -> (column, max length); taxId is accepted for older clients
CUSTOMER_FIELDS = {
    'name': ('name', 200),
    'address': ('address', 500),
    'tax_id': ('tax_id', 50),
    'taxId': ('tax_id', 50),
}


def _parse_customer_fields(data: dict, partial: bool = False) -> dict:
    fields = {}
    for key, (column, max_length) in CUSTOMER_FIELDS.items():
        if key in data:
            fields[column] = sanitize_input(data.get(key), max_length=max_length)

    for column in ('name', 'address', 'tax_id'):
        if column in fields and not fields[column]:
            raise ValidationError(MESSAGES['field_required'].format(field=column), field=column)
        if column not in fields and not partial:
            raise ValidationError(MESSAGES['field_required'].format(field=column), field=column)
    return fields


def register_routes(bp):
    """Register customer API routes on the blueprint."""

    # ============================================================================
    # CUSTOMER API ROUTES
    # ============================================================================

    @bp.route('/customers')
    @login_required
    @permission_required('hotel.customers.view')
    def customers_list():
        """List customers, optionally filtered by ?search= (name, address, tax id)."""
        search = request.args.get('search', '').strip()
        customers = get_all_customers(search=search or None)
        return api_success(data=to_json(customers), count=len(customers))

    @bp.route('/customers', methods=['POST'])
    @login_required
    @permission_required('hotel.customers.manage')
    def customers_create():
        """Create a customer."""
        fields = _parse_customer_fields(get_json_body())
        customer_id = create_customer(fields['name'], fields['address'], fields['tax_id'])
        return api_success(
            data=to_json(get_customer_by_id(customer_id)),
            message=MESSAGES['customer_created'],
            status=201
        )

    @bp.route('/customers/<int:customer_id>')
    @login_required
    @permission_required('hotel.customers.view')
    def customers_detail(customer_id):
        """Get a customer."""
        customer = get_customer_by_id(customer_id)
        if not customer:
            return api_error(MESSAGES['customer_not_found'], 404)
        return api_success(data=to_json(customer))

    @bp.route('/customers/<int:customer_id>', methods=['PUT'])
    @login_required
    @permission_required('hotel.customers.manage')
    def customers_update(customer_id):
        """Update customer fields."""
        if not get_customer_by_id(customer_id):
            return api_error(MESSAGES['customer_not_found'], 404)

        fields = _parse_customer_fields(get_json_body(), partial=True)
        update_customer(customer_id, **fields)
        return api_success(
            data=to_json(get_customer_by_id(customer_id)),
            message=MESSAGES['customer_updated']
        )

    @bp.route('/customers/<int:customer_id>', methods=['DELETE'])
    @login_required
    @permission_required('hotel.customers.manage')
    def customers_delete(customer_id):
        """Delete a customer that has no reservations."""
        if not get_customer_by_id(customer_id):
            return api_error(MESSAGES['customer_not_found'], 404)

        delete_customer(customer_id)
        return api_success(message=MESSAGES['customer_deleted'])

    @bp.route('/customers/<int:customer_id>/reservations')
    @login_required
    @permission_required('hotel.reservations.view')
    def customers_reservations(customer_id):
        """All reservations of the customer."""
        reservations = get_reservation_service().get_reservations_for_customer(customer_id)
        return api_success(data=to_json(reservations), count=len(reservations))
