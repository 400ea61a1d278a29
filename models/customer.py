"""
Customer data access functions.
Handles create, read, update, delete and search.
"""

import sqlite3

from database import get_db, retry_on_locked
from utils.errors import ConflictError, translate_integrity_error
from utils.messages import MESSAGES


# =============================================================================
# READ OPERATIONS
# =============================================================================

@retry_on_locked
def get_all_customers(search: str = None) -> list:
    """
    Get all customers with their reservation counts.

    Args:
        search: Optional substring matched against name, address and tax id

    Returns:
        List of customer dicts, newest first
    """
    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT c.*,
               (SELECT COUNT(*) FROM reservations WHERE customer_id = c.id) as reservation_count
        FROM customers c
        WHERE 1=1
    '''
    params = []

    if search:
        query += ' AND (c.name LIKE ? OR c.address LIKE ? OR c.tax_id LIKE ?)'
        params.extend([f'%{search}%'] * 3)

    query += ' ORDER BY c.created_at DESC, c.id DESC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_customer_by_id(customer_id: int, cursor=None) -> dict:
    """
    Get customer by ID.

    Args:
        customer_id: Customer ID
        cursor: Optional cursor of an open transaction

    Returns:
        Customer dict or None if not found
    """
    cur = cursor or get_db().cursor()
    cur.execute('SELECT * FROM customers WHERE id = ?', (customer_id,))
    row = cur.fetchone()
    return dict(row) if row else None


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

def create_customer(name: str, address: str, tax_id: str) -> int:
    """
    Create new customer.

    Args:
        name: Customer or company name
        address: Billing address
        tax_id: Tax identifier printed on invoices

    Returns:
        New customer ID
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('''
        INSERT INTO customers (name, address, tax_id)
        VALUES (?, ?, ?)
    ''', (name, address, tax_id))

    db.commit()
    return cursor.lastrowid


def update_customer(customer_id: int, **kwargs) -> bool:
    """
    Update customer fields.

    Args:
        customer_id: Customer ID to update
        **kwargs: Fields to update (name, address, tax_id)

    Returns:
        True if updated successfully
    """
    db = get_db()

    allowed_fields = ['name', 'address', 'tax_id']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(customer_id)

    query = f'UPDATE customers SET {", ".join(updates)} WHERE id = ?'

    cursor = db.cursor()
    cursor.execute(query, values)
    db.commit()

    return cursor.rowcount > 0


def delete_customer(customer_id: int) -> bool:
    """
    Delete customer (hard delete).
    Only allowed if the customer has no reservations.

    Args:
        customer_id: Customer ID to delete

    Returns:
        True if deleted successfully

    Raises:
        ConflictError: If customer has reservations
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute(
        'SELECT COUNT(*) AS count FROM reservations WHERE customer_id = ?',
        (customer_id,)
    )
    if cursor.fetchone()['count'] > 0:
        raise ConflictError(MESSAGES['customer_has_reservations'])

    try:
        cursor.execute('DELETE FROM customers WHERE id = ?', (customer_id,))
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, MESSAGES['customer_has_reservations'])

    return cursor.rowcount > 0
