"""
Admin routes for staff account management.
JSON endpoints under /admin/users.
"""

import logging

from flask import request, Blueprint
from flask_login import login_required, current_user

from blueprints.admin.services import validate_user_creation, can_delete_user
from models.user import (get_all_users, get_user_by_id, create_user, update_user,
                         delete_user, to_public_dict)
from utils.api_response import api_success, api_error
from utils.decorators import permission_required
from utils.errors import ValidationError
from utils.helpers import to_json
from utils.messages import MESSAGES
from utils.validators import parse_bool, sanitize_input, validate_password

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__, template_folder='../../templates/admin')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@admin_bp.route('/users')
@login_required
@permission_required('admin.users.manage')
def users():
    """List users, optionally filtered by ?search= on name or username."""
    search = request.args.get('search', '').strip()
    all_users = get_all_users(search=search or None)
    return api_success(data=to_json(all_users), count=len(all_users))


@admin_bp.route('/users', methods=['POST'])
@login_required
@permission_required('admin.users.manage')
def users_create():
    """Create new user. Role defaults to staff."""
    data = _json_body()
    username = sanitize_input(data.get('username'), max_length=100)
    name = sanitize_input(data.get('name'), max_length=200)
    password = data.get('password') or ''
    role = data.get('role') or 'staff'

    # Validate user creation
    is_valid, error_msg, status = validate_user_creation(username, name, password, role)
    if not is_valid:
        return api_error(error_msg, status)

    user_id = create_user(username=username, password=password, name=name, role=role)
    logger.info(f"[Admin] {current_user.username} created user {username} ({role})")

    return api_success(
        data=to_json(to_public_dict(get_user_by_id(user_id))),
        message=MESSAGES['user_created'],
        status=201
    )


@admin_bp.route('/users/<int:user_id>')
@login_required
@permission_required('admin.users.manage')
def users_detail(user_id):
    """Get a user without the password hash."""
    user = get_user_by_id(user_id)
    if not user:
        return api_error(MESSAGES['user_not_found'], 404)
    return api_success(data=to_json(to_public_dict(user)))


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required
@permission_required('admin.users.manage')
def users_edit(user_id):
    """Update username, name, role, active flag or password."""
    user = get_user_by_id(user_id)
    if not user:
        return api_error(MESSAGES['user_not_found'], 404)

    data = _json_body()
    fields = {}

    for key, max_length in (('username', 100), ('name', 200)):
        if key in data:
            value = sanitize_input(data.get(key), max_length=max_length)
            if not value:
                return api_error(MESSAGES['field_required'].format(field=key), 400)
            fields[key] = value

    if 'role' in data:
        fields['role'] = data['role']

    if 'active' in data:
        fields['active'] = 1 if parse_bool(data['active'], 'active') else 0

    if data.get('password'):
        is_valid, error_msg = validate_password(data['password'])
        if not is_valid:
            return api_error(error_msg, 400)
        fields['password'] = data['password']

    # An admin may not lock themselves out
    if user_id == current_user.id and (
        fields.get('active') == 0 or fields.get('role', user['role']) != user['role']
    ):
        return api_error(MESSAGES['permission_denied'], 409)

    update_user(user_id, **fields)
    logger.info(f"[Admin] {current_user.username} updated user id={user_id} fields={sorted(fields)}")

    return api_success(
        data=to_json(to_public_dict(get_user_by_id(user_id))),
        message=MESSAGES['user_updated']
    )


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@login_required
@permission_required('admin.users.manage')
def users_delete(user_id):
    """Delete user."""
    can_delete, error_msg, status = can_delete_user(user_id, current_user.id)
    if not can_delete:
        return api_error(error_msg, status)

    delete_user(user_id)
    logger.info(f"[Admin] {current_user.username} deleted user id={user_id}")
    return api_success(message=MESSAGES['user_deleted'])
