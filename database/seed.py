"""
Database seed data.
Initial data population for fresh database installations.
"""

import os

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Create Admin User
    admin_password = os.environ.get('ADMIN_PASSWORD', 'admin123')
    password_hash = generate_password_hash(admin_password)
    db.execute('''
        INSERT INTO users (username, password_hash, name, role, active)
        VALUES (?, ?, ?, ?, ?)
    ''', ('admin', password_hash, 'System Administrator', 'admin', 1))
