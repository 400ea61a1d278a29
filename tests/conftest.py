"""
Pytest configuration and fixtures.
Every test gets its own SQLite file under pytest's tmp_path.
"""

import os
from datetime import datetime
from decimal import Decimal

import pytest

os.environ['FLASK_ENV'] = 'test'

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 0)


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated, initialized database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'hotel_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def login(client, username, password):
    return client.post('/login', data={
        'username': username,
        'password': password
    }, follow_redirects=False)


@pytest.fixture
def authenticated_client(app, client):
    """Test client logged in as the seeded admin."""
    login(client, 'admin', 'admin123')
    return client


@pytest.fixture
def staff_client(app):
    """Test client logged in as a staff account."""
    from models.user import create_user

    with app.app_context():
        create_user('frontdesk', 'desk1234', 'Front Desk', role='staff')

    staff = app.test_client()
    login(staff, 'frontdesk', 'desk1234')
    return staff


@pytest.fixture
def hotel_data(app):
    """Three rooms and two customers; returns their ids."""
    from models.customer import create_customer
    from models.room import create_room

    with app.app_context():
        return {
            'r101': create_room('101', Decimal('1500')),
            'r102': create_room('102', Decimal('1500')),
            'r201': create_room('201', Decimal('2000')),
            'acme': create_customer('Acme Co.', '1 Main Rd, Bangkok', '0105551234567'),
            'beta': create_customer('Beta Ltd.', '9 River Rd, Chiang Mai', '0105559876543'),
        }


@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW
