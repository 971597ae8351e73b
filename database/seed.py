"""
Database seed data.
Initial data population for fresh database installations.
"""

from datetime import datetime, timezone


DEFAULT_ITEMS = [
    ('gs-1', 'Guest Suite', 'GUEST_SUITE', 'Book a suite for your guests. 2-night minimum.'),
    ('sl-1', 'Sky Lounge', 'SKY_LOUNGE', 'Reserve the lounge for events. 4-hour limit.'),
    ('kayak-1', 'Kayak 1', 'GEAR_SHED', 'Single kayak'),
    ('kayak-2', 'Kayak 2', 'GEAR_SHED', 'Single kayak'),
    ('bike-1', 'Mountain Bike 1', 'GEAR_SHED', 'Mountain bike'),
    ('bike-2', 'Mountain Bike 2', 'GEAR_SHED', 'Mountain bike'),
]

DEFAULT_STAFF = ['Staff Member 1', 'Staff Member 2']


def seed_items(db) -> int:
    """
    Insert the default catalog items that are not present yet.

    Returns:
        int: Number of items inserted
    """
    created_at = datetime.now(timezone.utc).isoformat(timespec='seconds')
    inserted = 0

    for item_id, name, resource_type, description in DEFAULT_ITEMS:
        cursor = db.execute('''
            INSERT OR IGNORE INTO scheduler_items
            (item_id, item, resource_type, description, service_status, created_at)
            VALUES (?, ?, ?, ?, 'In Service', ?)
        ''', (item_id, name, resource_type, description, created_at))
        inserted += cursor.rowcount

    return inserted


def seed_database(db):
    """Insert initial seed data."""

    # 1. Catalog
    seed_items(db)

    # 2. Staff
    for name in DEFAULT_STAFF:
        db.execute('INSERT OR IGNORE INTO staff (name) VALUES (?)', (name,))
