"""
Room data access functions.
Handles room CRUD and name search. Availability lives in
reservation_availability.py.
"""

import sqlite3
from decimal import Decimal

from database import get_db, retry_on_locked
from utils.errors import ConflictError, translate_integrity_error
from utils.messages import MESSAGES


# =============================================================================
# READ
# =============================================================================

@retry_on_locked
def get_all_rooms(search: str = None) -> list:
    """
    Get all rooms ordered by name.

    Args:
        search: Optional case-insensitive substring of the room name

    Returns:
        List of room dicts
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM rooms WHERE 1=1'
    params = []

    if search:
        query += ' AND name LIKE ?'
        params.append(f'%{search}%')

    query += ' ORDER BY name'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_room_by_id(room_id: int, cursor=None) -> dict:
    """
    Get room by ID.

    Args:
        room_id: Room ID
        cursor: Optional cursor of an open transaction

    Returns:
        Room dict or None if not found
    """
    cur = cursor or get_db().cursor()
    cur.execute('SELECT * FROM rooms WHERE id = ?', (room_id,))
    row = cur.fetchone()
    return dict(row) if row else None


def get_rooms_by_ids(room_ids: list, cursor=None) -> list:
    """
    Get rooms for a list of IDs, in the order the IDs were given.

    Unknown IDs are silently absent from the result.
    """
    if not room_ids:
        return []

    cur = cursor or get_db().cursor()
    placeholders = ','.join('?' * len(room_ids))
    cur.execute(f'SELECT * FROM rooms WHERE id IN ({placeholders})', list(room_ids))
    by_id = {row['id']: dict(row) for row in cur.fetchall()}
    return [by_id[room_id] for room_id in room_ids if room_id in by_id]


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def create_room(name: str, price: Decimal) -> int:
    """
    Create new room.

    Args:
        name: Unique display name
        price: Nightly price (non-negative)

    Returns:
        New room ID

    Raises:
        ConflictError: If a room with this name exists
    """
    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('INSERT INTO rooms (name, price) VALUES (?, ?)', (name, price))
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, MESSAGES['room_name_exists'])
    return cursor.lastrowid


def update_room(room_id: int, **kwargs) -> bool:
    """
    Update room fields.

    Args:
        room_id: Room ID to update
        **kwargs: Fields to update (name, price)

    Returns:
        True if a row was updated
    """
    db = get_db()

    allowed_fields = ['name', 'price']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(room_id)

    cursor = db.cursor()
    try:
        cursor.execute(f'UPDATE rooms SET {", ".join(updates)} WHERE id = ?', values)
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, MESSAGES['room_name_exists'])

    return cursor.rowcount > 0


def delete_room(room_id: int) -> bool:
    """
    Delete room (hard delete).
    Refused while any reservation references the room.

    Args:
        room_id: Room ID to delete

    Returns:
        True if deleted successfully

    Raises:
        ConflictError: If the room has reservations
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute(
        'SELECT COUNT(*) AS count FROM reservation_rooms WHERE room_id = ?',
        (room_id,)
    )
    if cursor.fetchone()['count'] > 0:
        raise ConflictError(MESSAGES['room_has_reservations'])

    try:
        cursor.execute('DELETE FROM rooms WHERE id = ?', (room_id,))
        db.commit()
    except sqlite3.IntegrityError:
        db.rollback()
        raise ConflictError(MESSAGES['room_has_reservations'])

    return cursor.rowcount > 0
