"""
Business logic for admin operations.
Provides validation and business rules for staff account management.
"""

from models.user import count_active_admins, get_user_by_id, username_taken
from utils.messages import MESSAGES
from utils.permissions import ROLES
from utils.validators import validate_password


def validate_user_creation(username: str, name: str, password: str, role: str) -> tuple:
    """
    Validate user creation data.

    Args:
        username: Username to check (case-insensitive uniqueness)
        name: Display name
        password: Password to validate
        role: Requested role

    Returns:
        Tuple of (is_valid, error_message, status_code)
    """
    if not username or not username.strip():
        return False, MESSAGES['field_required'].format(field='username'), 400

    if not name or not name.strip():
        return False, MESSAGES['field_required'].format(field='name'), 400

    if role not in ROLES:
        return False, MESSAGES['invalid_role'], 400

    is_valid, error = validate_password(password)
    if not is_valid:
        return False, error, 400

    # Check username exists
    if username_taken(username.strip()):
        return False, MESSAGES['username_exists'], 409

    return True, '', 200


def can_delete_user(user_id: int, current_user_id: int) -> tuple:
    """
    Check if user can be deleted.

    Args:
        user_id: User ID to delete
        current_user_id: Current logged-in user ID

    Returns:
        Tuple of (can_delete, error_message, status_code)
    """
    # Cannot delete self
    if user_id == current_user_id:
        return False, MESSAGES['cannot_delete_self'], 409

    user = get_user_by_id(user_id)
    if not user:
        return False, MESSAGES['user_not_found'], 404

    # Check if last admin
    if user['role'] == 'admin' and user['active'] and count_active_admins() <= 1:
        return False, MESSAGES['cannot_delete_last_admin'], 409

    return True, '', 200
