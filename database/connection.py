"""
Database connection management.
Handles per-request connections, write transactions, initialization, and teardown.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager

from flask import g, current_app

logger = logging.getLogger(__name__)


def get_db():
    """
    Get the request-scoped database connection with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/resourcehub.db')
        if db_path != ':memory:':
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        g.db = sqlite3.connect(
            db_path,
            timeout=current_app.config.get('DATABASE_TIMEOUT', 10),
            detect_types=sqlite3.PARSE_DECLTYPES
        )
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode for better concurrency
        g.db.execute('PRAGMA journal_mode = WAL')
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


def begin_immediate(db):
    """
    Open a ``BEGIN IMMEDIATE`` write transaction on a connection.

    Uncommitted statements left open on the connection are rolled back
    first, so they are never committed together with the new transaction.

    Returns:
        sqlite3.Cursor bound to the transaction
    """
    if db.in_transaction:
        logger.warning("Discarding uncommitted statements before BEGIN IMMEDIATE")
        db.rollback()

    cursor = db.cursor()
    cursor.execute('BEGIN IMMEDIATE')
    return cursor


@contextmanager
def immediate_transaction(db=None):
    """
    Run a block inside a ``BEGIN IMMEDIATE`` write transaction.

    SQLite hands the write lock to one connection at a time, so reads made
    inside the block cannot be invalidated by another writer before the
    block commits. Commits on success, rolls back and re-raises on error.

    Args:
        db: Connection to use (defaults to get_db())

    Yields:
        sqlite3.Cursor bound to the transaction
    """
    db = db or get_db()
    cursor = begin_immediate(db)
    try:
        yield cursor
        db.commit()
    except Exception:
        db.rollback()
        raise


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
    logger.info("Database initialized at %s", current_app.config.get('DATABASE_PATH'))
