"""
Database tests.
Tests database initialization, type conversion and constraints.
"""

import sqlite3
from datetime import date, datetime
from decimal import Decimal

import pytest

from database import get_db, immediate_transaction


def test_database_tables(app):
    """Test that all required tables exist."""
    with app.app_context():
        cursor = get_db().cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = [row[0] for row in cursor.fetchall()]

    for table in ['users', 'rooms', 'customers', 'reservations', 'reservation_rooms']:
        assert table in tables, f"Table {table} should exist"


def test_seed_data(app):
    """Test that seed data was created correctly."""
    with app.app_context():
        cursor = get_db().cursor()
        cursor.execute("SELECT username, role FROM users")
        users = [tuple(row) for row in cursor.fetchall()]

    assert users == [('admin', 'admin')]


def test_foreign_keys_enforced(app):
    with app.app_context():
        db = get_db()
        with pytest.raises(sqlite3.IntegrityError):
            db.execute('INSERT INTO reservation_rooms (reservation_id, room_id) VALUES (999, 999)')
        db.rollback()


def test_typed_columns_round_trip(app, hotel_data):
    with app.app_context():
        db = get_db()
        with immediate_transaction(db) as cursor:
            cursor.execute('''
                INSERT INTO reservations
                    (number, number_year, customer_id, check_in_date, check_out_date,
                     total_amount, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (1, 2024, hotel_data['acme'], date(2024, 6, 1), date(2024, 6, 2),
                  Decimal('1500.50'), datetime(2024, 3, 1, 9, 30)))

        row = db.execute('SELECT * FROM reservations').fetchone()

    assert row['check_in_date'] == date(2024, 6, 1)
    assert row['total_amount'] == Decimal('1500.50')
    assert row['created_at'] == datetime(2024, 3, 1, 9, 30)


def test_immediate_transaction_rolls_back_on_error(app, hotel_data):
    with app.app_context():
        db = get_db()
        with pytest.raises(RuntimeError):
            with immediate_transaction(db) as cursor:
                cursor.execute("UPDATE rooms SET price = 1 WHERE id = ?", (hotel_data['r101'],))
                raise RuntimeError('abort')

        price = db.execute('SELECT price FROM rooms WHERE id = ?', (hotel_data['r101'],)).fetchone()[0]

    assert price == Decimal('1500.00')


def test_checkout_must_follow_checkin(app, hotel_data):
    with app.app_context():
        db = get_db()
        with pytest.raises(sqlite3.IntegrityError):
            with immediate_transaction(db) as cursor:
                cursor.execute('''
                    INSERT INTO reservations
                        (number, number_year, customer_id, check_in_date, check_out_date, created_at)
                    VALUES (1, 2024, ?, '2024-06-02', '2024-06-02', '2024-03-01 09:30:00')
                ''', (hotel_data['acme'],))


def test_immediate_transaction_rolls_back_on_interrupt(app, hotel_data):
    with app.app_context():
        db = get_db()
        with pytest.raises(KeyboardInterrupt):
            with immediate_transaction(db) as cursor:
                cursor.execute("UPDATE rooms SET price = 1 WHERE id = ?", (hotel_data['r101'],))
                raise KeyboardInterrupt

        assert db.in_transaction is False
        price = db.execute('SELECT price FROM rooms WHERE id = ?', (hotel_data['r101'],)).fetchone()[0]

    assert price == Decimal('1500.00')
