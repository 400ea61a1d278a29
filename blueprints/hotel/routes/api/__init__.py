"""
Hotel API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint, request

from utils.errors import ValidationError

# Create the API blueprint
api_bp = Blueprint('api', __name__)


def get_json_body() -> dict:
    """
    Decoded JSON object of the current request.

    Raises:
        ValidationError: If the body is missing or not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


# Import and register routes from submodules
from blueprints.hotel.routes.api import rooms  # noqa: E402
from blueprints.hotel.routes.api import customers  # noqa: E402
from blueprints.hotel.routes.api import reservations  # noqa: E402

# Register all route functions on the blueprint
rooms.register_routes(api_bp)
customers.register_routes(api_bp)
reservations.register_routes(api_bp)
