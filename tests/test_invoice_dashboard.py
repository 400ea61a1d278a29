"""
Tests for invoices and dashboard statistics.
"""

from datetime import date
from decimal import Decimal

from blueprints.hotel.services.invoice_service import build_invoice, format_invoice_number


def _book(app, hotel_data, clock, rooms, check_in, check_out, extra_bed=False, customer='acme'):
    from database import get_db
    from blueprints.hotel.services.reservation_payload import ReservationInput
    from blueprints.hotel.services.reservation_service import ReservationService

    with app.app_context():
        return ReservationService(get_db(), clock=clock).create_reservation(ReservationInput(
            customer_id=hotel_data[customer],
            room_ids=[hotel_data[key] for key in rooms],
            check_in_date=check_in,
            check_out_date=check_out,
            extra_bed=extra_bed,
        )).reservation


class TestInvoice:
    """Invoice data and page."""

    def test_invoice_number_is_zero_padded(self):
        assert format_invoice_number({'number': 7, 'number_year': 2024}) == '2024/0007'
        assert format_invoice_number({'number': 12345, 'number_year': 2025}) == '2025/12345'

    def test_invoice_lines_and_extra_bed(self, app, hotel_data, fixed_clock):
        reservation = _book(
            app, hotel_data, fixed_clock, ['r101', 'r201'], date(2024, 6, 1), date(2024, 6, 4), extra_bed=True
        )

        with app.app_context():
            invoice = build_invoice(reservation, issued_on=date(2024, 6, 4))

        assert invoice['invoice_number'] == '2024/0001'
        assert invoice['customer']['tax_id'] == '0105551234567'
        assert invoice['nights'] == 3
        assert [(line['name'], line['subtotal']) for line in invoice['lines']] == [
            ('101', Decimal('4500.00')), ('201', Decimal('6000.00'))
        ]
        assert invoice['extra_bed_fee'] == Decimal('300.00')
        assert invoice['total'] == Decimal('10800.00')
        assert invoice['subtotal_matches'] is True

    def test_invoice_flags_price_change_after_booking(self, app, hotel_data, fixed_clock):
        from models.room import update_room

        reservation = _book(app, hotel_data, fixed_clock, ['r101'], date(2024, 6, 1), date(2024, 6, 2))

        with app.app_context():
            update_room(hotel_data['r101'], price=Decimal('1700'))
            from models.reservation import get_reservation_by_id
            invoice = build_invoice(get_reservation_by_id(reservation['id']), issued_on=date(2024, 6, 2))

        assert invoice['subtotal'] == Decimal('1700.00')
        assert invoice['total'] == Decimal('1500.00')
        assert invoice['subtotal_matches'] is False

    def test_invoice_page(self, app, authenticated_client, hotel_data, fixed_clock):
        reservation = _book(
            app, hotel_data, fixed_clock, ['r101'], date(2024, 6, 1), date(2024, 6, 3), extra_bed=True
        )

        response = authenticated_client.get(f"/reservations/{reservation['id']}/invoice")

        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert '2024/0001' in html
        assert 'Acme Co.' in html
        assert 'Extra bed' in html
        assert '3,200.00' in html

    def test_invoice_page_missing_reservation(self, authenticated_client):
        assert authenticated_client.get('/reservations/9999/invoice').status_code == 404


class TestDashboard:
    """Dashboard numbers."""

    def test_stats_for_a_day(self, app, hotel_data, fixed_clock):
        from models.dashboard import get_dashboard_stats

        _book(app, hotel_data, fixed_clock, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
        _book(app, hotel_data, fixed_clock, ['r102', 'r201'], date(2024, 6, 3), date(2024, 6, 5), customer='beta')

        with app.app_context():
            stats = get_dashboard_stats(date(2024, 6, 3))

        assert stats['total_reservations'] == 2
        assert stats['total_rooms'] == 3
        assert stats['total_customers'] == 2
        assert stats['total_users'] == 1
        # 2 x 1500 + 2 x (1500 + 2000)
        assert stats['total_revenue'] == Decimal('10000.00')
        assert stats['check_ins_today'] == 1
        assert stats['check_outs_today'] == 1
        # Room 101 checks out on the 3rd, so only 102 and 201 are occupied
        assert sorted(room['room_name'] for room in stats['rooms_occupied_today']) == ['102', '201']
        assert stats['occupancy_rate'] == 66.7
        assert [r['customer_name'] for r in stats['upcoming_reservations']] == ['Beta Ltd.']

    def test_empty_database(self, app):
        from models.dashboard import get_dashboard_stats

        with app.app_context():
            stats = get_dashboard_stats(date(2024, 6, 3))

        assert stats['total_revenue'] == Decimal('0')
        assert stats['occupancy_rate'] == 0.0
        assert stats['upcoming_reservations'] == []

    def test_stats_endpoint_and_page(self, authenticated_client, hotel_data):
        response = authenticated_client.get('/api/dashboard/stats')
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['total_rooms'] == 3
        assert data['total_revenue'] == '0.00'

        page = authenticated_client.get('/dashboard')
        assert page.status_code == 200
