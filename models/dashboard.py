"""
Dashboard model.
Summary queries for the back-office dashboard.
"""

from datetime import date
from decimal import Decimal

from database import get_db, retry_on_locked

UPCOMING_LIMIT = 5


# =============================================================================
# TOTALS
# =============================================================================

def _count(cursor, table: str) -> int:
    cursor.execute(f'SELECT COUNT(*) FROM {table}')
    return cursor.fetchone()[0]


def get_total_revenue(cursor=None) -> Decimal:
    """Sum of stored reservation totals."""
    cur = cursor or get_db().cursor()
    # CAST to TEXT keeps SQLite from returning a float
    cur.execute('SELECT CAST(COALESCE(SUM(total_amount), 0) AS TEXT) FROM reservations')
    return Decimal(cur.fetchone()[0]).quantize(Decimal('0.01'))


# =============================================================================
# TODAY'S METRICS
# =============================================================================

def get_rooms_occupied_on(day: date, cursor=None) -> list:
    """
    Rooms whose stay interval contains the given day.

    Args:
        day: Date to check (a room is occupied from check-in up to,
             but not including, check-out)

    Returns:
        list: [{'room_id', 'room_name', 'reservation_id', 'reservation_number',
                'customer_name'}] ordered by room name
    """
    cur = cursor or get_db().cursor()
    cur.execute('''
        SELECT rm.id as room_id, rm.name as room_name,
               r.id as reservation_id, r.number as reservation_number,
               c.name as customer_name
        FROM reservation_rooms rr
        JOIN reservations r ON rr.reservation_id = r.id
        JOIN rooms rm ON rr.room_id = rm.id
        JOIN customers c ON r.customer_id = c.id
        WHERE r.check_in_date <= ? AND r.check_out_date > ?
        ORDER BY rm.name
    ''', (day, day))
    return [dict(row) for row in cur.fetchall()]


def get_upcoming_reservations(day: date, limit: int = UPCOMING_LIMIT, cursor=None) -> list:
    """Next check-ins from the given day on, soonest first."""
    cur = cursor or get_db().cursor()
    cur.execute('''
        SELECT r.id, r.number, r.number_year, r.check_in_date, r.check_out_date,
               r.total_amount, c.name as customer_name
        FROM reservations r
        JOIN customers c ON r.customer_id = c.id
        WHERE r.check_in_date >= ?
        ORDER BY r.check_in_date, r.id
        LIMIT ?
    ''', (day, limit))
    return [dict(row) for row in cur.fetchall()]


@retry_on_locked
def get_dashboard_stats(today: date) -> dict:
    """
    Get dashboard numbers.

    Args:
        today: Current date in the hotel's timezone

    Returns:
        dict with keys:
            - total_reservations, total_rooms, total_customers, total_users: int
            - total_revenue: Decimal
            - check_ins_today, check_outs_today: int
            - rooms_occupied_today: list of occupied room dicts
            - occupancy_rate: float (percentage 0-100)
            - upcoming_reservations: list (at most 5)
    """
    cursor = get_db().cursor()

    total_rooms = _count(cursor, 'rooms')

    cursor.execute('SELECT COUNT(*) FROM reservations WHERE check_in_date = ?', (today,))
    check_ins_today = cursor.fetchone()[0]

    cursor.execute('SELECT COUNT(*) FROM reservations WHERE check_out_date = ?', (today,))
    check_outs_today = cursor.fetchone()[0]

    occupied = get_rooms_occupied_on(today, cursor=cursor)
    occupied_room_count = len({room['room_id'] for room in occupied})

    return {
        'total_reservations': _count(cursor, 'reservations'),
        'total_rooms': total_rooms,
        'total_customers': _count(cursor, 'customers'),
        'total_users': _count(cursor, 'users'),
        'total_revenue': get_total_revenue(cursor=cursor),
        'check_ins_today': check_ins_today,
        'check_outs_today': check_outs_today,
        'rooms_occupied_today': occupied,
        'occupancy_rate': round(occupied_room_count / total_rooms * 100, 1) if total_rooms else 0.0,
        'upcoming_reservations': get_upcoming_reservations(today, cursor=cursor),
    }
