"""
Reservation Service - Lifecycle of hotel reservations.

Runs the availability check, number allocation, pricing and persistence of
a reservation write inside one BEGIN IMMEDIATE transaction, so concurrent
writers cannot double-book a room or draw the same yearly number.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from flask import current_app

from database import get_db, immediate_transaction
from models.customer import get_customer_by_id
from models.reservation import (
    delete_reservation_row,
    generate_reservation_number,
    get_available_rooms,
    get_conflicting_room_names,
    get_reservation_by_id,
    get_reservation_room_ids,
    get_reservations_filtered,
    insert_reservation,
    insert_reservation_rooms,
    replace_reservation_rooms,
    update_reservation_fields,
)
from models.room import get_room_by_id, get_rooms_by_ids
from utils.datetime_helpers import get_local_now
from utils.errors import (
    ConflictError,
    NotFoundError,
    ReferentialError,
    ValidationError,
    translate_integrity_error,
)
from utils.messages import MESSAGES
from utils.validators import validate_date_range

from blueprints.hotel.services.pricing_service import EXTRA_BED_RATE, calculate_total
from blueprints.hotel.services.reservation_payload import ReservationInput, ReservationPatch

logger = logging.getLogger(__name__)


@dataclass
class ReservationResult:
    """A persisted reservation plus any non-fatal warnings."""

    reservation: dict
    warnings: List[str] = field(default_factory=list)

    @property
    def warning(self) -> Optional[str]:
        return ' '.join(self.warnings) if self.warnings else None


class ReservationService:
    """
    Create, update, delete and query reservations.

    Args:
        db: Open SQLite connection (the request connection in the web app)
        clock: Zero-argument callable returning the current naive local datetime
        extra_bed_rate: Fee per night for an extra bed
    """

    def __init__(
        self,
        db: sqlite3.Connection,
        clock: Callable[[], datetime] = get_local_now,
        extra_bed_rate: Decimal = EXTRA_BED_RATE
    ):
        self.db = db
        self.clock = clock
        self.extra_bed_rate = Decimal(extra_bed_rate)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _validate_stay(room_ids, check_in, check_out) -> list:
        """Check the stay and return the room ids without duplicates, in order."""
        if not room_ids:
            raise ValidationError(MESSAGES['rooms_required'], field='room_ids')
        if not validate_date_range(check_in, check_out):
            raise ValidationError(MESSAGES['invalid_date_range'], field='check_out_date')
        return list(dict.fromkeys(room_ids))

    @staticmethod
    def _load_customer(customer_id: int, cursor) -> dict:
        customer = get_customer_by_id(customer_id, cursor=cursor)
        if not customer:
            raise ReferentialError(field='customer_id')
        return customer

    @staticmethod
    def _load_rooms(room_ids: list, cursor) -> list:
        rooms = get_rooms_by_ids(room_ids, cursor=cursor)
        if len(rooms) != len(room_ids):
            missing = sorted(set(room_ids) - {room['id'] for room in rooms})
            raise ReferentialError(field='room_ids', missing_room_ids=missing)
        return rooms

    @staticmethod
    def _ensure_available(room_ids, check_in, check_out, cursor, exclude_reservation_id=None) -> None:
        conflicts = get_conflicting_room_names(
            room_ids, check_in, check_out,
            exclude_reservation_id=exclude_reservation_id,
            cursor=cursor
        )
        if conflicts:
            logger.info(
                f"[Reservations] Rejected booking {check_in}..{check_out}: "
                f"rooms already booked {conflicts}"
            )
            raise ConflictError(
                MESSAGES['rooms_unavailable'].format(rooms=', '.join(conflicts)),
                conflicting_rooms=conflicts
            )

    @staticmethod
    def _compare_client_total(submitted: Optional[Decimal], computed: Decimal) -> List[str]:
        if submitted is None or submitted == computed:
            return []
        logger.warning(
            f"[Reservations] Client total {submitted} differs from computed total {computed}; "
            f"storing the computed total"
        )
        return [MESSAGES['total_mismatch'].format(submitted=submitted, computed=computed)]

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def create_reservation(self, data: ReservationInput, created_by: str = None) -> ReservationResult:
        """
        Create a reservation for one or more rooms.

        Args:
            data: Parsed reservation input
            created_by: Username recorded on the reservation

        Returns:
            ReservationResult with the reservation (customer and rooms joined)

        Raises:
            ValidationError: Empty room list or check-out not after check-in
            ReferentialError: Unknown customer or room
            ConflictError: A requested room is booked for an overlapping stay
        """
        room_ids = self._validate_stay(data.room_ids, data.check_in_date, data.check_out_date)

        with immediate_transaction(self.db) as cursor:
            self._load_customer(data.customer_id, cursor)
            rooms = self._load_rooms(room_ids, cursor)
            self._ensure_available(room_ids, data.check_in_date, data.check_out_date, cursor)

            created_at = self.clock()
            number = generate_reservation_number(created_at.year, cursor=cursor)
            total = calculate_total(
                rooms, data.check_in_date, data.check_out_date,
                data.extra_bed, self.extra_bed_rate
            )
            warnings = self._compare_client_total(data.total_amount, total)

            try:
                reservation_id = insert_reservation(
                    cursor,
                    number=number,
                    number_year=created_at.year,
                    customer_id=data.customer_id,
                    check_in_date=data.check_in_date,
                    check_out_date=data.check_out_date,
                    total_amount=total,
                    extra_bed=data.extra_bed,
                    notes=data.notes,
                    created_by=created_by,
                    created_at=created_at
                )
            except sqlite3.IntegrityError as e:
                raise translate_integrity_error(e, MESSAGES['duplicate_reservation_number'])

            try:
                insert_reservation_rooms(cursor, reservation_id, room_ids)
            except sqlite3.IntegrityError as e:
                raise translate_integrity_error(e, MESSAGES['invalid_reference'])

            reservation = get_reservation_by_id(reservation_id, cursor=cursor)

        logger.info(
            f"[Reservations] Created #{number}/{created_at.year} (id={reservation_id}) "
            f"rooms={room_ids} {data.check_in_date}..{data.check_out_date} total={total}"
        )
        return ReservationResult(reservation, warnings)

    def update_reservation(self, reservation_id: int, patch: ReservationPatch) -> ReservationResult:
        """
        Apply a partial update to a reservation.

        The patch is merged over the stored values. Availability is re-checked
        whenever the merged room set or stay dates differ from the stored ones,
        and the room assignments are replaced whenever the patch names rooms.

        Args:
            reservation_id: Reservation to update
            patch: Parsed partial update

        Returns:
            ReservationResult with the updated reservation

        Raises:
            NotFoundError: Unknown reservation
            ValidationError: Merged values are inconsistent
            ReferentialError: Unknown customer or room
            ConflictError: The new stay overlaps another booking
        """
        with immediate_transaction(self.db) as cursor:
            stored = get_reservation_by_id(reservation_id, cursor=cursor)
            if not stored:
                raise NotFoundError(MESSAGES['reservation_not_found'])

            stored_room_ids = get_reservation_room_ids(reservation_id, cursor=cursor)

            customer_id = patch.customer_id if patch.has('customer_id') else stored['customer_id']
            room_ids = patch.room_ids if patch.has('room_ids') else stored_room_ids
            check_in = patch.check_in_date if patch.has('check_in_date') else stored['check_in_date']
            check_out = patch.check_out_date if patch.has('check_out_date') else stored['check_out_date']
            extra_bed = patch.extra_bed if patch.has('extra_bed') else stored['extra_bed']

            room_ids = self._validate_stay(room_ids, check_in, check_out)

            if customer_id != stored['customer_id']:
                self._load_customer(customer_id, cursor)
            rooms = self._load_rooms(room_ids, cursor)

            dates_changed = (check_in, check_out) != (stored['check_in_date'], stored['check_out_date'])
            rooms_changed = set(room_ids) != set(stored_room_ids)
            if dates_changed or rooms_changed:
                self._ensure_available(
                    room_ids, check_in, check_out, cursor,
                    exclude_reservation_id=reservation_id
                )

            fields = {
                'customer_id': customer_id,
                'check_in_date': check_in,
                'check_out_date': check_out,
                'extra_bed': extra_bed,
            }
            if patch.has('notes'):
                fields['notes'] = patch.notes

            warnings = []
            pricing_changed = dates_changed or rooms_changed or extra_bed != stored['extra_bed']
            if pricing_changed or patch.has('total_amount'):
                total = calculate_total(rooms, check_in, check_out, extra_bed, self.extra_bed_rate)
                warnings = self._compare_client_total(patch.total_amount, total)
                fields['total_amount'] = total

            try:
                if patch.has('room_ids'):
                    replace_reservation_rooms(cursor, reservation_id, room_ids)
                update_reservation_fields(cursor, reservation_id, self.clock(), **fields)
            except sqlite3.IntegrityError as e:
                raise translate_integrity_error(e, MESSAGES['invalid_reference'])

            reservation = get_reservation_by_id(reservation_id, cursor=cursor)

        logger.info(
            f"[Reservations] Updated id={reservation_id} fields={sorted(patch.fields)} "
            f"total={reservation['total_amount']}"
        )
        return ReservationResult(reservation, warnings)

    def delete_reservation(self, reservation_id: int) -> None:
        """
        Delete a reservation and its room assignments.

        Raises:
            NotFoundError: Unknown reservation
        """
        with immediate_transaction(self.db) as cursor:
            if not delete_reservation_row(cursor, reservation_id):
                raise NotFoundError(MESSAGES['reservation_not_found'])
        logger.info(f"[Reservations] Deleted id={reservation_id}")

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def get_reservation(self, reservation_id: int) -> dict:
        """
        Get a reservation with customer and rooms.

        Raises:
            NotFoundError: Unknown reservation
        """
        reservation = get_reservation_by_id(reservation_id, cursor=self.db.cursor())
        if not reservation:
            raise NotFoundError(MESSAGES['reservation_not_found'])
        return reservation

    def list_reservations(self, customer_id: int = None, room_id: int = None) -> list:
        """List reservations, optionally filtered by customer and/or room."""
        return get_reservations_filtered(
            customer_id=customer_id, room_id=room_id, cursor=self.db.cursor()
        )

    def get_reservations_for_room(self, room_id: int) -> list:
        """
        All reservations that include a room.

        Raises:
            NotFoundError: Unknown room
        """
        if not get_room_by_id(room_id, cursor=self.db.cursor()):
            raise NotFoundError(MESSAGES['room_not_found'])
        return self.list_reservations(room_id=room_id)

    def get_reservations_for_customer(self, customer_id: int) -> list:
        """
        All reservations of a customer.

        Raises:
            NotFoundError: Unknown customer
        """
        if not get_customer_by_id(customer_id, cursor=self.db.cursor()):
            raise NotFoundError(MESSAGES['customer_not_found'])
        return self.list_reservations(customer_id=customer_id)

    def list_available_rooms(self, check_in, check_out) -> list:
        """
        Rooms free for the whole stay.

        Raises:
            ValidationError: check-out not after check-in
        """
        if not validate_date_range(check_in, check_out):
            raise ValidationError(MESSAGES['invalid_date_range'], field='check_out_date')
        return get_available_rooms(check_in, check_out, cursor=self.db.cursor())

    def check_availability(self, room_ids: list, check_in, check_out,
                           exclude_reservation_id: int = None) -> list:
        """
        Names of requested rooms already booked for the stay (empty if free).

        Raises:
            ValidationError: Empty room list or check-out not after check-in
        """
        room_ids = self._validate_stay(room_ids, check_in, check_out)
        return get_conflicting_room_names(
            room_ids, check_in, check_out,
            exclude_reservation_id=exclude_reservation_id,
            cursor=self.db.cursor()
        )


def get_reservation_service() -> ReservationService:
    """ReservationService bound to the request connection and app config."""
    return ReservationService(
        get_db(),
        clock=get_local_now,
        extra_bed_rate=current_app.config.get('EXTRA_BED_RATE', EXTRA_BED_RATE)
    )
