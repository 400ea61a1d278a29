"""
Room availability checking.
Detects booking overlaps between reservations that share a room.

Stays are half-open intervals [check_in, check_out): a guest checking out
on a given day does not block a guest checking in on that same day.
"""

from database import get_db


# =============================================================================
# INTERVAL RULE
# =============================================================================

def ranges_overlap(a_start, a_end, b_start, b_end) -> bool:
    """
    Check whether two stay intervals overlap.

    Args:
        a_start: Check-in of the first stay
        a_end: Check-out of the first stay
        b_start: Check-in of the second stay
        b_end: Check-out of the second stay

    Returns:
        True if the intervals share at least one night
    """
    return a_start < b_end and a_end > b_start


# =============================================================================
# CONFLICT DETECTION
# =============================================================================

def find_room_conflicts(
    room_ids: list,
    check_in,
    check_out,
    exclude_reservation_id: int = None,
    cursor=None
) -> list:
    """
    Find existing bookings that overlap a candidate stay on any requested room.

    Args:
        room_ids: Room IDs requested by the candidate booking
        check_in: Candidate check-in date
        check_out: Candidate check-out date
        exclude_reservation_id: Reservation ID to ignore (the one being edited)
        cursor: Optional cursor of an open transaction

    Returns:
        list: One dict per (conflicting reservation, room) pair:
            {'room_id', 'room_name', 'reservation_id', 'reservation_number',
             'check_in_date', 'check_out_date'}
    """
    if not room_ids:
        return []

    cur = cursor or get_db().cursor()

    placeholders = ','.join('?' * len(room_ids))
    query = f'''
        SELECT rr.room_id, rm.name as room_name,
               r.id as reservation_id, r.number as reservation_number,
               r.check_in_date, r.check_out_date
        FROM reservation_rooms rr
        JOIN reservations r ON rr.reservation_id = r.id
        JOIN rooms rm ON rr.room_id = rm.id
        WHERE rr.room_id IN ({placeholders})
          AND r.check_in_date < ?
          AND r.check_out_date > ?
    '''
    params = list(room_ids) + [check_out, check_in]

    # Exclude specific reservation (for updates)
    if exclude_reservation_id is not None:
        query += ' AND r.id != ?'
        params.append(exclude_reservation_id)

    query += ' ORDER BY r.check_in_date, r.id, rm.name'

    cur.execute(query, params)
    return [dict(row) for row in cur.fetchall()]


def get_conflicting_room_names(
    room_ids: list,
    check_in,
    check_out,
    exclude_reservation_id: int = None,
    cursor=None
) -> list:
    """
    Names of the requested rooms that are already booked for the stay.

    Args:
        room_ids: Room IDs requested
        check_in: Candidate check-in date
        check_out: Candidate check-out date
        exclude_reservation_id: Reservation ID to ignore
        cursor: Optional cursor of an open transaction

    Returns:
        list: Distinct room names in first-seen order; empty if no conflict
    """
    conflicts = find_room_conflicts(
        room_ids, check_in, check_out,
        exclude_reservation_id=exclude_reservation_id,
        cursor=cursor
    )
    names = []
    for conflict in conflicts:
        if conflict['room_name'] not in names:
            names.append(conflict['room_name'])
    return names


def get_available_rooms(check_in, check_out, cursor=None) -> list:
    """
    Rooms with no booking that overlaps the given stay.

    Args:
        check_in: Stay check-in date
        check_out: Stay check-out date
        cursor: Optional cursor of an open transaction

    Returns:
        list: Room dicts ordered by name
    """
    cur = cursor or get_db().cursor()
    cur.execute('''
        SELECT rm.*
        FROM rooms rm
        WHERE NOT EXISTS (
            SELECT 1
            FROM reservation_rooms rr
            JOIN reservations r ON rr.reservation_id = r.id
            WHERE rr.room_id = rm.id
              AND r.check_in_date < ?
              AND r.check_out_date > ?
        )
        ORDER BY rm.name
    ''', (check_out, check_in))
    return [dict(row) for row in cur.fetchall()]
