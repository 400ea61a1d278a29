"""
Permission checking and caching utilities.
Maps staff roles to permission codes and builds the navigation menu.
"""

from database import get_db


PERMISSIONS = {
    'hotel.dashboard.view': 'View dashboard',
    'hotel.rooms.view': 'View rooms',
    'hotel.rooms.manage': 'Create, edit and delete rooms',
    'hotel.customers.view': 'View customers',
    'hotel.customers.manage': 'Create, edit and delete customers',
    'hotel.reservations.view': 'View reservations and invoices',
    'hotel.reservations.manage': 'Create, edit and delete reservations',
    'admin.users.manage': 'Manage staff accounts',
}

ROLE_PERMISSIONS = {
    'admin': set(PERMISSIONS),
    'manager': {code for code in PERMISSIONS if code.startswith('hotel.')},
    'staff': {
        'hotel.dashboard.view',
        'hotel.rooms.view',
        'hotel.customers.view',
        'hotel.customers.manage',
        'hotel.reservations.view',
        'hotel.reservations.manage',
    },
}

ROLES = tuple(ROLE_PERMISSIONS)

MENU_ITEMS = [
    {'name': 'Dashboard', 'url': '/dashboard', 'permission': 'hotel.dashboard.view'},
    {'name': 'Rooms', 'url': '/api/rooms', 'permission': 'hotel.rooms.view'},
    {'name': 'Customers', 'url': '/api/customers', 'permission': 'hotel.customers.view'},
    {'name': 'Reservations', 'url': '/api/reservations', 'permission': 'hotel.reservations.view'},
    {'name': 'Users', 'url': '/admin/users', 'permission': 'admin.users.manage'},
]


def get_role_permissions(role: str) -> set:
    """Permission codes granted to a role (empty for unknown roles)."""
    return set(ROLE_PERMISSIONS.get(role, ()))


def load_user_permissions(user_id: int) -> set:
    """
    Load all permissions for a user based on their role.

    Args:
        user_id: User ID

    Returns:
        Set of permission codes
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('SELECT role, active FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()

    if not row or not row['active']:
        return set()

    return get_role_permissions(row['role'])


def has_permission(user, permission_code: str) -> bool:
    """
    Check if user has a specific permission.

    Args:
        user: User object (Flask-Login)
        permission_code: Permission code to check

    Returns:
        True if user has permission
    """
    return permission_code in load_user_permissions(user.id)


def get_menu_items(user) -> list:
    """
    Navigation entries visible to the user.

    Args:
        user: User object (Flask-Login)

    Returns:
        List of menu dicts (name, url)
    """
    user_permissions = load_user_permissions(user.id)
    return [
        {'name': item['name'], 'url': item['url']}
        for item in MENU_ITEMS
        if item['permission'] in user_permissions
    ]


def cache_user_permissions(user_id: int):
    """
    Cache user permissions in flask g object.

    Args:
        user_id: User ID
    """
    from flask import g
    g.user_permissions = load_user_permissions(user_id)
