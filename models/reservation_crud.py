"""
Reservation CRUD operations.
Row-level reads and writes for reservations and their room assignments.

Write functions take the cursor of an open transaction and never commit;
the caller (ReservationService) owns the transaction boundary.
"""

from database import get_db, retry_on_locked


# =============================================================================
# HELPERS
# =============================================================================

def _attach_details(cursor, rows: list) -> list:
    """
    Join customer and room data onto reservation rows.

    Args:
        cursor: Cursor to query with
        rows: Reservation rows as dicts (with customer_* columns)

    Returns:
        list: Reservation dicts with 'customer' and 'rooms' keys
    """
    if not rows:
        return []

    reservation_ids = [row['id'] for row in rows]
    placeholders = ','.join('?' * len(reservation_ids))
    cursor.execute(f'''
        SELECT rr.reservation_id, rm.id, rm.name, rm.price
        FROM reservation_rooms rr
        JOIN rooms rm ON rr.room_id = rm.id
        WHERE rr.reservation_id IN ({placeholders})
        ORDER BY rr.id
    ''', reservation_ids)

    rooms_by_reservation = {}
    for room in cursor.fetchall():
        rooms_by_reservation.setdefault(room['reservation_id'], []).append({
            'id': room['id'],
            'name': room['name'],
            'price': room['price'],
        })

    result = []
    for row in rows:
        reservation = {
            key: value for key, value in row.items()
            if not key.startswith('customer_') or key == 'customer_id'
        }
        reservation['extra_bed'] = bool(reservation['extra_bed'])
        reservation['customer'] = {
            'id': row['customer_id'],
            'name': row['customer_name'],
            'address': row['customer_address'],
            'tax_id': row['customer_tax_id'],
        }
        reservation['rooms'] = rooms_by_reservation.get(row['id'], [])
        result.append(reservation)
    return result


_SELECT_WITH_CUSTOMER = '''
    SELECT r.*,
           c.name as customer_name,
           c.address as customer_address,
           c.tax_id as customer_tax_id
    FROM reservations r
    JOIN customers c ON r.customer_id = c.id
'''


# =============================================================================
# READ
# =============================================================================

def get_reservation_by_id(reservation_id: int, cursor=None) -> dict:
    """
    Get reservation with its customer and rooms.

    Args:
        reservation_id: Reservation ID
        cursor: Optional cursor of an open transaction

    Returns:
        Reservation dict or None if not found
    """
    cur = cursor or get_db().cursor()
    cur.execute(_SELECT_WITH_CUSTOMER + ' WHERE r.id = ?', (reservation_id,))
    row = cur.fetchone()
    if not row:
        return None
    return _attach_details(cur, [dict(row)])[0]


def get_reservation_room_ids(reservation_id: int, cursor=None) -> list:
    """Room IDs assigned to a reservation, in assignment order."""
    cur = cursor or get_db().cursor()
    cur.execute(
        'SELECT room_id FROM reservation_rooms WHERE reservation_id = ? ORDER BY id',
        (reservation_id,)
    )
    return [row['room_id'] for row in cur.fetchall()]


@retry_on_locked
def get_reservations_filtered(customer_id: int = None, room_id: int = None, cursor=None) -> list:
    """
    List reservations with customer and rooms, newest first.

    Args:
        customer_id: Only reservations of this customer
        room_id: Only reservations that include this room
        cursor: Optional cursor to query with

    Returns:
        list: Reservation dicts
    """
    cursor = cursor or get_db().cursor()

    query = _SELECT_WITH_CUSTOMER + ' WHERE 1=1'
    params = []

    if customer_id:
        query += ' AND r.customer_id = ?'
        params.append(customer_id)

    if room_id:
        query += ' AND r.id IN (SELECT reservation_id FROM reservation_rooms WHERE room_id = ?)'
        params.append(room_id)

    query += ' ORDER BY r.created_at DESC, r.id DESC'

    cursor.execute(query, params)
    return _attach_details(cursor, [dict(row) for row in cursor.fetchall()])


# =============================================================================
# WRITE (inside an open transaction)
# =============================================================================

def insert_reservation(cursor, number: int, number_year: int, customer_id: int,
                       check_in_date, check_out_date, total_amount, extra_bed: bool,
                       notes: str, created_by: str, created_at) -> int:
    """
    Insert the reservation row.

    Returns:
        int: New reservation ID
    """
    cursor.execute('''
        INSERT INTO reservations (
            number, number_year, customer_id, check_in_date, check_out_date,
            total_amount, extra_bed, notes, created_by, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ''', (
        number, number_year, customer_id, check_in_date, check_out_date,
        total_amount, 1 if extra_bed else 0, notes, created_by, created_at, created_at
    ))
    return cursor.lastrowid


def insert_reservation_rooms(cursor, reservation_id: int, room_ids: list) -> None:
    """Assign rooms to a reservation."""
    cursor.executemany(
        'INSERT INTO reservation_rooms (reservation_id, room_id) VALUES (?, ?)',
        [(reservation_id, room_id) for room_id in room_ids]
    )


def replace_reservation_rooms(cursor, reservation_id: int, room_ids: list) -> None:
    """
    Replace the full set of rooms assigned to a reservation.

    Deletes all existing assignments, then inserts the new ones.
    """
    cursor.execute('DELETE FROM reservation_rooms WHERE reservation_id = ?', (reservation_id,))
    insert_reservation_rooms(cursor, reservation_id, room_ids)


def update_reservation_fields(cursor, reservation_id: int, updated_at, **fields) -> bool:
    """
    Update scalar reservation columns.

    Args:
        cursor: Cursor of an open transaction
        reservation_id: Reservation ID
        updated_at: Timestamp to stamp the row with
        **fields: customer_id, check_in_date, check_out_date, total_amount,
                  extra_bed, notes

    Returns:
        bool: True if the row was updated
    """
    allowed_fields = [
        'customer_id', 'check_in_date', 'check_out_date',
        'total_amount', 'extra_bed', 'notes'
    ]
    updates = []
    values = []

    for field in allowed_fields:
        if field in fields:
            value = fields[field]
            if field == 'extra_bed':
                value = 1 if value else 0
            updates.append(f'{field} = ?')
            values.append(value)

    updates.append('updated_at = ?')
    values.append(updated_at)
    values.append(reservation_id)

    cursor.execute(f'UPDATE reservations SET {", ".join(updates)} WHERE id = ?', values)
    return cursor.rowcount > 0


def delete_reservation_row(cursor, reservation_id: int) -> bool:
    """
    Delete a reservation. Room assignments cascade.

    Returns:
        bool: True if a row was deleted
    """
    cursor.execute('DELETE FROM reservations WHERE id = ?', (reservation_id,))
    return cursor.rowcount > 0
