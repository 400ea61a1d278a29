"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask import redirect, request, url_for
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from utils.api_response import api_error

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()

# Configure Login Manager
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page'
login_manager.login_message_category = 'warning'

# Path prefixes answered with JSON instead of HTML
JSON_PREFIXES = ('/api/', '/admin/')


def wants_json() -> bool:
    """Whether the current request belongs to a JSON endpoint."""
    return request.path.startswith(JSON_PREFIXES) or request.is_json


@login_manager.user_loader
def load_user(user_id):
    """
    Load user by ID for Flask-Login.

    Args:
        user_id: The user ID as a string

    Returns:
        User object or None if not found
    """
    from models.user import get_user_by_id, User

    user_dict = get_user_by_id(int(user_id))
    if user_dict:
        return User(user_dict)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """401 JSON for API clients, redirect to the login form otherwise."""
    if wants_json():
        return api_error('Authentication required', 401)
    return redirect(url_for(login_manager.login_view, next=request.path))
