"""
API routes for application-level JSON endpoints.
Provides the health check and dashboard statistics.
"""

from flask import current_app, jsonify, Blueprint
from flask_login import login_required

from models.dashboard import get_dashboard_stats
from utils.api_response import api_success
from utils.datetime_helpers import get_today
from utils.decorators import permission_required
from utils.helpers import to_json

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'HotelDesk')
    })


@api_bp.route('/dashboard/stats')
@login_required
@permission_required('hotel.dashboard.view')
def dashboard_stats():
    """
    Dashboard numbers as JSON.

    Returns:
        JSON with totals, revenue, today's movements and upcoming arrivals
    """
    stats = get_dashboard_stats(get_today())
    return api_success(data=to_json(stats))
