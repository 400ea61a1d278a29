"""
Yearly reservation number allocation.

Numbers restart at 1 every calendar year. The year of a reservation is the
year of its created_at timestamp, stored alongside the number as number_year.
"""

from database import get_db


def generate_reservation_number(year: int, cursor=None) -> int:
    """
    Next reservation number for a year: highest number of that year plus one.

    Must run inside the same BEGIN IMMEDIATE transaction as the insert that
    uses the number; UNIQUE(number_year, number) rejects any duplicate that
    slips through.

    Args:
        year: Calendar year of the new reservation's created_at
        cursor: Optional cursor of an open transaction

    Returns:
        int: 1 if no reservation was numbered in that year yet
    """
    cur = cursor or get_db().cursor()

    cur.execute('''
        SELECT MAX(number) as max_number
        FROM reservations
        WHERE number_year = ?
    ''', (year,))
    row = cur.fetchone()

    if row is None or row['max_number'] is None:
        return 1
    return row['max_number'] + 1
