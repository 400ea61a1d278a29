"""
Tests for the reservation lifecycle (ReservationService).
"""

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from blueprints.hotel.services.reservation_payload import ReservationInput, ReservationPatch
from blueprints.hotel.services.reservation_service import ReservationService
from utils.errors import ConflictError, NotFoundError, ReferentialError, ValidationError


def make_input(hotel_data, rooms, check_in, check_out, customer='acme', **kwargs):
    return ReservationInput(
        customer_id=hotel_data[customer],
        room_ids=[hotel_data[key] for key in rooms],
        check_in_date=check_in,
        check_out_date=check_out,
        **kwargs
    )


def make_patch(**fields):
    return ReservationPatch(fields=set(fields), **fields)


@pytest.fixture
def service_factory(app, fixed_clock):
    """Build a ReservationService on the app-context connection."""
    from database import get_db

    def factory():
        return ReservationService(get_db(), clock=fixed_clock)
    return factory


class TestCreate:
    """create_reservation."""

    def test_create_computes_total_and_joins_details(self, app, hotel_data, service_factory):
        with app.app_context():
            result = service_factory().create_reservation(make_input(
                hotel_data, ['r101', 'r201'], date(2024, 6, 1), date(2024, 6, 3), extra_bed=True
            ))

        reservation = result.reservation
        assert result.warnings == []
        # 2 nights x (1500 + 2000) + 2 x 100
        assert reservation['total_amount'] == Decimal('7200.00')
        assert reservation['number'] == 1
        assert reservation['number_year'] == 2024
        assert reservation['extra_bed'] is True
        assert reservation['check_in_date'] == date(2024, 6, 1)
        assert reservation['created_at'] == datetime(2024, 3, 1, 9, 30, 0)
        assert reservation['customer']['name'] == 'Acme Co.'
        assert [room['name'] for room in reservation['rooms']] == ['101', '201']

    def test_overlap_is_rejected_with_room_names(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            service.create_reservation(make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 4)))

            with pytest.raises(ConflictError) as exc_info:
                service.create_reservation(make_input(
                    hotel_data, ['r102', 'r101'], date(2024, 6, 3), date(2024, 6, 5), customer='beta'
                ))

            assert exc_info.value.details['conflicting_rooms'] == ['101']
            assert '101' in exc_info.value.message
            # Nothing was written for the rejected booking
            assert len(service.list_reservations()) == 1

    def test_same_day_turnover_is_accepted(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            service.create_reservation(make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3)))
            second = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 3), date(2024, 6, 5))
            ).reservation
        assert second['number'] == 2

    def test_client_total_mismatch_warns_and_stores_computed(self, app, hotel_data, service_factory, caplog):
        with app.app_context():
            result = service_factory().create_reservation(make_input(
                hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3), total_amount=Decimal('100.00')
            ))

        assert result.reservation['total_amount'] == Decimal('3000.00')
        assert len(result.warnings) == 1
        assert '3000.00' in result.warning
        assert any(record.levelname == 'WARNING' for record in caplog.records)

    def test_matching_client_total_has_no_warning(self, app, hotel_data, service_factory):
        with app.app_context():
            result = service_factory().create_reservation(make_input(
                hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3), total_amount=Decimal('3000')
            ))
        assert result.warning is None

    def test_unknown_room_is_referential_error(self, app, hotel_data, service_factory):
        with app.app_context():
            data = make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            data.room_ids.append(9999)
            with pytest.raises(ReferentialError) as exc_info:
                service_factory().create_reservation(data)
        assert exc_info.value.details['missing_room_ids'] == [9999]

    def test_unknown_customer_is_referential_error(self, app, hotel_data, service_factory):
        with app.app_context():
            data = make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            data.customer_id = 9999
            with pytest.raises(ReferentialError):
                service_factory().create_reservation(data)

    @pytest.mark.parametrize('check_in, check_out', [
        (date(2024, 6, 3), date(2024, 6, 3)),
        (date(2024, 6, 3), date(2024, 6, 1)),
    ])
    def test_invalid_date_range(self, app, hotel_data, service_factory, check_in, check_out):
        with app.app_context():
            with pytest.raises(ValidationError):
                service_factory().create_reservation(make_input(hotel_data, ['r101'], check_in, check_out))

    def test_empty_room_list(self, app, hotel_data, service_factory):
        with app.app_context():
            with pytest.raises(ValidationError):
                service_factory().create_reservation(make_input(hotel_data, [], date(2024, 6, 1), date(2024, 6, 2)))

    def test_repeated_room_ids_are_booked_once(self, app, hotel_data, service_factory):
        from database import get_db

        with app.app_context():
            result = service_factory().create_reservation(make_input(
                hotel_data, ['r101', 'r101', 'r102'], date(2024, 6, 1), date(2024, 6, 2)
            ))
            rows = get_db().execute(
                'SELECT COUNT(*) FROM reservation_rooms WHERE reservation_id = ?',
                (result.reservation['id'],)
            ).fetchone()[0]

        assert rows == 2
        assert [room['name'] for room in result.reservation['rooms']] == ['101', '102']
        assert result.reservation['total_amount'] == Decimal('3000.00')


class TestUpdate:
    """update_reservation."""

    def test_room_set_is_replaced_and_total_recomputed(self, app, hotel_data, service_factory):
        from database import get_db

        with app.app_context():
            service = service_factory()
            created = service.create_reservation(
                make_input(hotel_data, ['r101', 'r102'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation

            updated = service.update_reservation(
                created['id'], make_patch(room_ids=[hotel_data['r201']])
            ).reservation
            room_ids = [row[0] for row in get_db().execute(
                'SELECT room_id FROM reservation_rooms WHERE reservation_id = ?', (created['id'],)
            )]

        assert room_ids == [hotel_data['r201']]
        assert [room['name'] for room in updated['rooms']] == ['201']
        assert updated['total_amount'] == Decimal('4000.00')
        assert updated['number'] == created['number']

    def test_failed_update_keeps_rooms_and_fields(self, app, hotel_data, service_factory):
        from database import get_db

        with app.app_context():
            service = service_factory()
            created = service.create_reservation(
                make_input(hotel_data, ['r101', 'r102'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation

            db = get_db()
            # Fails the row update after the room assignments were replaced
            db.execute('''
                CREATE TRIGGER block_reservation_update BEFORE UPDATE ON reservations
                BEGIN SELECT RAISE(ABORT, 'reservation locked'); END
            ''')
            db.commit()

            with pytest.raises(ValidationError):
                service.update_reservation(created['id'], make_patch(
                    room_ids=[hotel_data['r201']], notes='Moved to 201'
                ))

            room_ids = [row[0] for row in db.execute(
                'SELECT room_id FROM reservation_rooms WHERE reservation_id = ? ORDER BY id',
                (created['id'],)
            )]
            stored = service.get_reservation(created['id'])

        assert room_ids == [hotel_data['r101'], hotel_data['r102']]
        assert stored['total_amount'] == Decimal('6000.00')
        assert stored['notes'] is None

    def test_date_only_patch_into_other_booking_is_rejected(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            service.create_reservation(make_input(hotel_data, ['r101'], date(2024, 6, 10), date(2024, 6, 12)))
            mine = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3), customer='beta')
            ).reservation

            with pytest.raises(ConflictError) as exc_info:
                service.update_reservation(mine['id'], make_patch(
                    check_in_date=date(2024, 6, 9), check_out_date=date(2024, 6, 11)
                ))
            assert exc_info.value.details['conflicting_rooms'] == ['101']

            unchanged = service.get_reservation(mine['id'])
            assert unchanged['check_in_date'] == date(2024, 6, 1)

    def test_extending_own_stay_is_not_a_conflict(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            mine = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation
            updated = service.update_reservation(
                mine['id'], make_patch(check_out_date=date(2024, 6, 5))
            ).reservation
        assert updated['check_out_date'] == date(2024, 6, 5)
        assert updated['total_amount'] == Decimal('6000.00')

    def test_merged_dates_must_stay_ordered(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            mine = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation
            with pytest.raises(ValidationError):
                service.update_reservation(mine['id'], make_patch(check_in_date=date(2024, 6, 5)))

    def test_notes_only_patch_keeps_total(self, app, hotel_data, service_factory):
        from models.room import update_room

        with app.app_context():
            service = service_factory()
            mine = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation
            update_room(hotel_data['r101'], price=Decimal('9999'))

            updated = service.update_reservation(mine['id'], make_patch(notes='Late arrival')).reservation
        assert updated['notes'] == 'Late arrival'
        assert updated['total_amount'] == Decimal('3000.00')

    def test_unknown_reservation(self, app, hotel_data, service_factory):
        with app.app_context():
            with pytest.raises(NotFoundError):
                service_factory().update_reservation(9999, make_patch(notes='x'))


class TestDeleteAndQueries:
    """delete_reservation and read operations."""

    def test_delete_cascades_room_assignments(self, app, hotel_data, service_factory):
        from database import get_db

        with app.app_context():
            service = service_factory()
            mine = service.create_reservation(
                make_input(hotel_data, ['r101', 'r102'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation
            service.delete_reservation(mine['id'])

            count = get_db().execute(
                'SELECT COUNT(*) FROM reservation_rooms WHERE reservation_id = ?', (mine['id'],)
            ).fetchone()[0]
            assert count == 0
            with pytest.raises(NotFoundError):
                service.delete_reservation(mine['id'])

    def test_filters_by_room_and_customer(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            a = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation
            b = service.create_reservation(
                make_input(hotel_data, ['r102'], date(2024, 6, 1), date(2024, 6, 3), customer='beta')
            ).reservation

            assert [r['id'] for r in service.get_reservations_for_room(hotel_data['r101'])] == [a['id']]
            assert [r['id'] for r in service.get_reservations_for_customer(hotel_data['beta'])] == [b['id']]
            assert service.get_reservations_for_room(hotel_data['r201']) == []

            with pytest.raises(NotFoundError):
                service.get_reservations_for_room(9999)

    def test_check_availability_and_available_rooms(self, app, hotel_data, service_factory):
        with app.app_context():
            service = service_factory()
            mine = service.create_reservation(
                make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3))
            ).reservation

            assert service.check_availability([hotel_data['r101']], date(2024, 6, 2), date(2024, 6, 4)) == ['101']
            assert service.check_availability(
                [hotel_data['r101']], date(2024, 6, 2), date(2024, 6, 4), exclude_reservation_id=mine['id']
            ) == []
            names = [room['name'] for room in service.list_available_rooms(date(2024, 6, 1), date(2024, 6, 2))]
            assert names == ['102', '201']


class TestConcurrency:
    """Concurrent writers on separate connections."""

    def _run_in_threads(self, app, bookings):
        from database import connect_db

        barrier = threading.Barrier(len(bookings))
        outcomes = [None] * len(bookings)

        def worker(index, data):
            conn = connect_db(app.config['DATABASE_PATH'], timeout=10.0)
            service = ReservationService(conn, clock=lambda: datetime(2024, 3, 1, 12, 0, 0))
            try:
                barrier.wait()
                outcomes[index] = service.create_reservation(data).reservation
            except ConflictError as e:
                outcomes[index] = e
            finally:
                conn.close()

        threads = [threading.Thread(target=worker, args=(i, data)) for i, data in enumerate(bookings)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return outcomes

    def test_same_room_only_one_wins(self, app, hotel_data):
        outcomes = self._run_in_threads(app, [
            make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3)),
            make_input(hotel_data, ['r101'], date(2024, 6, 2), date(2024, 6, 4), customer='beta'),
        ])

        winners = [o for o in outcomes if isinstance(o, dict)]
        losers = [o for o in outcomes if isinstance(o, ConflictError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert losers[0].details['conflicting_rooms'] == ['101']

    def test_different_rooms_get_distinct_numbers(self, app, hotel_data):
        outcomes = self._run_in_threads(app, [
            make_input(hotel_data, ['r101'], date(2024, 6, 1), date(2024, 6, 3)),
            make_input(hotel_data, ['r102'], date(2024, 6, 1), date(2024, 6, 3)),
            make_input(hotel_data, ['r201'], date(2024, 6, 1), date(2024, 6, 3)),
        ])

        assert all(isinstance(o, dict) for o in outcomes)
        assert sorted(o['number'] for o in outcomes) == [1, 2, 3]
