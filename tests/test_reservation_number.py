"""
Tests for yearly reservation numbering.
"""

from datetime import date, datetime


def _service(app, clock_times):
    from database import get_db
    from blueprints.hotel.services.reservation_service import ReservationService

    times = iter(clock_times)
    return ReservationService(get_db(), clock=lambda: next(times))


def _booking(hotel_data, room_key, day):
    from blueprints.hotel.services.reservation_payload import ReservationInput

    return ReservationInput(
        customer_id=hotel_data['acme'],
        room_ids=[hotel_data[room_key]],
        check_in_date=date(2025, 2, day),
        check_out_date=date(2025, 2, day + 1),
    )


def test_numbers_increment_within_year_and_reset(app, hotel_data):
    from models.reservation_number import generate_reservation_number

    with app.app_context():
        assert generate_reservation_number(2024) == 1

        service = _service(app, [
            datetime(2024, 5, 1, 10, 0, 0),
            datetime(2024, 12, 31, 23, 59, 59),
            datetime(2025, 1, 1, 0, 0, 0),
        ])
        first = service.create_reservation(_booking(hotel_data, 'r101', 1)).reservation
        second = service.create_reservation(_booking(hotel_data, 'r101', 2)).reservation
        third = service.create_reservation(_booking(hotel_data, 'r101', 3)).reservation

        assert (first['number'], first['number_year']) == (1, 2024)
        assert (second['number'], second['number_year']) == (2, 2024)
        assert (third['number'], third['number_year']) == (1, 2025)

        assert generate_reservation_number(2024) == 3
        assert generate_reservation_number(2025) == 2
        assert generate_reservation_number(2026) == 1


def test_sub_second_timestamps_at_year_end(app, hotel_data):
    """Fractional seconds in the last second of a year still count for that year."""
    with app.app_context():
        service = _service(app, [
            datetime(2024, 12, 31, 23, 59, 59, 200000),
            datetime(2024, 12, 31, 23, 59, 59, 700000),
        ])
        first = service.create_reservation(_booking(hotel_data, 'r101', 1)).reservation
        second = service.create_reservation(_booking(hotel_data, 'r102', 1)).reservation

    assert (first['number'], first['number_year']) == (1, 2024)
    assert (second['number'], second['number_year']) == (2, 2024)
