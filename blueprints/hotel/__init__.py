"""
Hotel blueprint initialization.
Registers the dashboard and invoice pages and the hotel JSON API.

Route logic for the API is in:
- routes/api/rooms.py - Room CRUD
- routes/api/customers.py - Customer CRUD
- routes/api/reservations.py - Reservation lifecycle, quotes, availability
"""

from flask import Blueprint, current_app, render_template
from flask_login import login_required

from blueprints.hotel.services.invoice_service import build_invoice
from blueprints.hotel.services.reservation_service import get_reservation_service
from models.dashboard import get_dashboard_stats
from utils.datetime_helpers import get_today
from utils.decorators import permission_required

# Create main hotel blueprint
hotel_bp = Blueprint('hotel', __name__, template_folder='../../templates/hotel')

# =============================================================================
# REGISTER SUB-BLUEPRINTS
# =============================================================================

# API routes (all REST endpoints)
from blueprints.hotel.routes.api import api_bp  # noqa: E402
hotel_bp.register_blueprint(api_bp, url_prefix='/api')


# =============================================================================
# PAGES
# =============================================================================

@hotel_bp.route('/dashboard')
@login_required
@permission_required('hotel.dashboard.view')
def dashboard():
    """Display the back-office dashboard."""
    stats = get_dashboard_stats(get_today())
    return render_template('hotel/dashboard.html', stats=stats)


@hotel_bp.route('/reservations/<int:reservation_id>/invoice')
@login_required
@permission_required('hotel.reservations.view')
def invoice(reservation_id):
    """Printable invoice for a reservation."""
    reservation = get_reservation_service().get_reservation(reservation_id)
    invoice_data = build_invoice(
        reservation,
        issued_on=get_today(),
        extra_bed_rate=current_app.config.get('EXTRA_BED_RATE')
    )
    return render_template('hotel/invoice.html', invoice=invoice_data)
