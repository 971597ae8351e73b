"""
Database connection management.
Handles per-context connections, write transactions, initialization, and teardown.
"""

import sqlite3
import os
from flask import g, current_app


def get_db():
    """
    Get the database connection for the current app context, with row factory.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        db_path = current_app.config.get('DATABASE_PATH', 'instance/scheduler.db')
        if db_path != ':memory:':
            db_dir = os.path.dirname(db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
        g.db = sqlite3.connect(
            db_path,
            timeout=current_app.config.get('DATABASE_TIMEOUT', 10.0),
            detect_types=sqlite3.PARSE_DECLTYPES
        )
        g.db.row_factory = sqlite3.Row
        # Enable foreign key constraints
        g.db.execute('PRAGMA foreign_keys = ON')
        # Enable WAL mode so readers never wait on the writer
        g.db.execute('PRAGMA journal_mode = WAL')
    return g.db


def begin_immediate(db):
    """
    Open a write transaction holding SQLite's RESERVED lock from the start.

    Any read done afterwards on the same connection sees a snapshot no other
    writer can change until commit or rollback, so check-then-insert
    sequences cannot interleave across threads or processes.

    Args:
        db: sqlite3.Connection
    """
    if db.in_transaction:
        db.commit()
    db.execute('BEGIN IMMEDIATE')


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


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
    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
