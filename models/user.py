"""
User model and data access functions.
Handles staff authentication, CRUD operations, and Flask-Login integration.
"""

import sqlite3

from werkzeug.security import generate_password_hash, check_password_hash

from database import get_db, retry_on_locked
from utils.errors import ConflictError, ValidationError, translate_integrity_error
from utils.messages import MESSAGES
from utils.permissions import ROLES

PUBLIC_FIELDS = 'id, username, name, role, active, created_at, updated_at, last_login'


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.username = user_dict['username']
        self.name = user_dict['name']
        self.role = user_dict['role']
        self.active = user_dict['active']
        self.created_at = user_dict['created_at']
        self.last_login = user_dict.get('last_login')

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)


def _validate_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(MESSAGES['invalid_role'], field='role')


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID, including the password hash.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_username(username: str) -> dict:
    """
    Get user by username (case-insensitive).

    Args:
        username: Username to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE username = ? COLLATE NOCASE', (username,))
    row = cursor.fetchone()
    return dict(row) if row else None


@retry_on_locked
def get_all_users(search: str = None) -> list:
    """
    Get all users without password hashes.

    Args:
        search: Optional substring matched against name and username

    Returns:
        List of user dicts, newest first
    """
    db = get_db()
    cursor = db.cursor()

    query = f'SELECT {PUBLIC_FIELDS} FROM users WHERE 1=1'
    params = []

    if search:
        query += ' AND (name LIKE ? OR username LIKE ?)'
        params.extend([f'%{search}%'] * 2)

    query += ' ORDER BY created_at DESC, id DESC'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def username_taken(username: str, exclude_user_id: int = None) -> bool:
    """Check whether a username is used by another account (case-insensitive)."""
    db = get_db()
    cursor = db.cursor()
    query = 'SELECT id FROM users WHERE username = ? COLLATE NOCASE'
    params = [username]
    if exclude_user_id:
        query += ' AND id != ?'
        params.append(exclude_user_id)
    cursor.execute(query, params)
    return cursor.fetchone() is not None


def create_user(username: str, password: str, name: str, role: str = 'staff') -> int:
    """
    Create new user with hashed password.

    Args:
        username: Unique username (case-insensitive)
        password: Plain text password (will be hashed)
        name: Display name
        role: 'admin', 'staff' or 'manager'

    Returns:
        New user ID

    Raises:
        ConflictError: If the username already exists
        ValidationError: If the role is unknown
    """
    _validate_role(role)
    if username_taken(username):
        raise ConflictError(MESSAGES['username_exists'])

    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    try:
        cursor.execute('''
            INSERT INTO users (username, password_hash, name, role)
            VALUES (?, ?, ?, ?)
        ''', (username, password_hash, name, role))
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, MESSAGES['username_exists'])
    return cursor.lastrowid


def update_user(user_id: int, **kwargs) -> bool:
    """
    Update user fields.

    Args:
        user_id: User ID to update
        **kwargs: Fields to update (username, name, role, active, password)

    Returns:
        True if updated successfully

    Raises:
        ConflictError: If the new username belongs to another account
    """
    db = get_db()

    if 'role' in kwargs:
        _validate_role(kwargs['role'])
    if 'username' in kwargs and username_taken(kwargs['username'], exclude_user_id=user_id):
        raise ConflictError(MESSAGES['username_exists'])

    # Build dynamic update query
    allowed_fields = ['username', 'name', 'role', 'active']
    updates = []
    values = []

    for field in allowed_fields:
        if field in kwargs:
            updates.append(f'{field} = ?')
            values.append(kwargs[field])

    if kwargs.get('password'):
        updates.append('password_hash = ?')
        values.append(generate_password_hash(kwargs['password']))

    if not updates:
        return False

    updates.append('updated_at = CURRENT_TIMESTAMP')
    values.append(user_id)

    query = f'UPDATE users SET {", ".join(updates)} WHERE id = ?'

    cursor = db.cursor()
    try:
        cursor.execute(query, values)
        db.commit()
    except sqlite3.IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, MESSAGES['username_exists'])

    return cursor.rowcount > 0


def delete_user(user_id: int) -> bool:
    """
    Delete a user account.

    Args:
        user_id: User ID to delete

    Returns:
        True if deleted successfully
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('DELETE FROM users WHERE id = ?', (user_id,))
    db.commit()
    return cursor.rowcount > 0


def count_active_admins() -> int:
    """Number of active accounts with the admin role."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute("SELECT COUNT(*) AS count FROM users WHERE role = 'admin' AND active = 1")
    return cursor.fetchone()['count']


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET last_login = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))
    db.commit()


def check_password(user_dict: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        user_dict: User dictionary with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    return check_password_hash(user_dict['password_hash'], password)


def to_public_dict(user_dict: dict) -> dict:
    """Strip the password hash from a user row."""
    return {key: value for key, value in user_dict.items() if key != 'password_hash'}
