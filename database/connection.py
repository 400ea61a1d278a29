"""
Database connection management.
Handles per-request connections, type adapters, transactions, and teardown.
"""

import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from functools import wraps

from flask import g, current_app

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


# =============================================================================
# TYPE ADAPTERS
# =============================================================================

def _convert_decimal(value: bytes) -> Decimal:
    return Decimal(value.decode()).quantize(CENTS)


def _convert_date(value: bytes) -> date:
    return date.fromisoformat(value.decode()[:10])


def _convert_timestamp(value: bytes) -> datetime:
    return datetime.fromisoformat(value.decode())


sqlite3.register_adapter(Decimal, str)
sqlite3.register_adapter(date, date.isoformat)
sqlite3.register_adapter(datetime, lambda value: value.isoformat(sep=' '))
sqlite3.register_converter('DECIMAL', _convert_decimal)
sqlite3.register_converter('DATE', _convert_date)
sqlite3.register_converter('TIMESTAMP', _convert_timestamp)


# =============================================================================
# CONNECTIONS
# =============================================================================

def connect_db(db_path: str, timeout: float = 10.0) -> sqlite3.Connection:
    """
    Open a configured SQLite connection.

    Used directly by CLI commands and tests that need a connection outside
    the request cycle; request handlers go through get_db().

    Args:
        db_path: Path to the database file
        timeout: Seconds to wait for the write lock before failing

    Returns:
        sqlite3.Connection: Connection with row factory and foreign keys on
    """
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(
        db_path,
        timeout=timeout,
        detect_types=sqlite3.PARSE_DECLTYPES
    )
    conn.row_factory = sqlite3.Row
    # Enable foreign key constraints
    conn.execute('PRAGMA foreign_keys = ON')
    # Enable WAL mode for better concurrency
    conn.execute('PRAGMA journal_mode = WAL')
    return conn


def get_db() -> sqlite3.Connection:
    """
    Get the request-scoped database connection.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        g.db = connect_db(
            current_app.config.get('DATABASE_PATH', 'instance/hotel.db'),
            timeout=current_app.config.get('DATABASE_TIMEOUT', 10.0)
        )
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


# =============================================================================
# TRANSACTIONS
# =============================================================================

@contextmanager
def immediate_transaction(db: sqlite3.Connection):
    """
    Run a block inside a BEGIN IMMEDIATE transaction.

    BEGIN IMMEDIATE takes SQLite's write lock up front, so any
    read-check-write sequence inside the block is serialized against every
    other writer. Commits on success, rolls back on any exception.

    Args:
        db: Connection to run the transaction on

    Yields:
        sqlite3.Cursor: Cursor bound to the transaction
    """
    cursor = db.cursor()
    cursor.execute('BEGIN IMMEDIATE')
    try:
        yield cursor
    except BaseException:
        db.rollback()
        raise
    db.commit()


def retry_on_locked(func=None, *, attempts: int = 3, delay: float = 0.05):
    """
    Retry a read-only function when SQLite reports a transient lock.

    Only for reads. Write paths must never be retried blindly, a repeated
    create could allocate a second reservation number.

    Args:
        attempts: Maximum number of attempts
        delay: Base back-off in seconds, multiplied by the attempt number
    """
    def decorator(read_func):
        @wraps(read_func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, attempts + 1):
                try:
                    return read_func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    if 'locked' not in str(e) or attempt == attempts:
                        raise
                    logger.warning(
                        f"[DB] {read_func.__name__} hit a locked database "
                        f"(attempt {attempt}/{attempts}), retrying"
                    )
                    time.sleep(delay * attempt)
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


# =============================================================================
# INITIALIZATION
# =============================================================================

def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    # Insert seed data
    seed_database(db)

    db.commit()
    logger.info('Database initialized')
