"""
Authentication routes: login, logout.
Handles staff authentication with Flask-Login.
"""

import logging

from flask import render_template, redirect, url_for, flash, request, Blueprint
from flask_login import login_user, logout_user, login_required, current_user
from urllib.parse import urlparse

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_username, update_last_login, check_password
from utils.messages import MESSAGES
from utils.permissions import cache_user_permissions

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, template_folder='../../templates/auth')


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Login route with form handling.

    GET: Display login form
    POST: Process login credentials
    """
    # Redirect if already logged in
    if current_user.is_authenticated:
        return redirect(url_for('hotel.dashboard'))

    form = LoginForm()

    if form.validate_on_submit():
        # Get user by username (case-insensitive)
        user_dict = get_user_by_username(form.username.data.strip())

        # Check credentials
        if user_dict is None or not check_password(user_dict, form.password.data):
            logger.info(f"[Auth] Failed login for username={form.username.data!r}")
            flash(MESSAGES['invalid_credentials'], 'error')
            return redirect(url_for('auth.login'))

        # Check if user is active
        if not user_dict.get('active'):
            flash(MESSAGES['account_disabled'], 'error')
            return redirect(url_for('auth.login'))

        user = User(user_dict)

        # Log user in
        login_user(user, remember=form.remember_me.data)

        # Update last login timestamp
        update_last_login(user.id)

        # Cache user permissions for this request
        cache_user_permissions(user.id)

        flash(MESSAGES['login_success'].format(name=user.name or user.username), 'success')
        logger.info(f"[Auth] {user.username} logged in")

        # Redirect to next page or default
        next_page = request.args.get('next')
        if not next_page or urlparse(next_page).netloc != '':
            next_page = url_for('hotel.dashboard')

        return redirect(next_page)

    return render_template('auth/login.html', form=form)


@auth_bp.route('/logout')
@login_required
def logout():
    """Logout current user."""
    logout_user()
    flash(MESSAGES['logout_success'], 'success')
    return redirect(url_for('auth.login'))
