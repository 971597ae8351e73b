"""
Database package for the Amenity Scheduler.

This package provides modular database operations:
- connection: Database connection management (get_db, close_db, init_db, begin_immediate)
- schema: Table creation and indexes
- seed: Initial seed data
"""

from database.connection import get_db, close_db, init_db, begin_immediate
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database, seed_items

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'begin_immediate',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
    'seed_items',
]
