"""
Authentication forms using Flask-WTF.
Provides the login form with CSRF protection.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length


class LoginForm(FlaskForm):
    """Login form with username and password."""

    username = StringField('Username', validators=[
        DataRequired(message='Username is required'),
        Length(max=100)
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])

    remember_me = BooleanField('Remember me')
