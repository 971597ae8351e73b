"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'reservation_status_history',
        'reservation_items',
        'reservations',
        'scheduler_items',
        'staff',
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Staff
    db.execute('''
        CREATE TABLE staff (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            active INTEGER DEFAULT 1,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Catalog
    db.execute('''
        CREATE TABLE scheduler_items (
            item_id TEXT PRIMARY KEY,
            item TEXT NOT NULL,
            resource_type TEXT NOT NULL
                CHECK (resource_type IN ('GUEST_SUITE', 'SKY_LOUNGE', 'GEAR_SHED')),
            description TEXT,
            service_status TEXT NOT NULL DEFAULT 'In Service'
                CHECK (service_status IN ('In Service', 'Not In Service')),
            service_notes TEXT,
            created_at TEXT NOT NULL,
            UNIQUE(resource_type, item)
        )
    ''')

    # 3. Reservations
    # start_time/end_time are UTC ISO-8601 strings, so text order is time order
    db.execute('''
        CREATE TABLE reservations (
            tx_id TEXT PRIMARY KEY,
            rented_to TEXT NOT NULL,
            item TEXT NOT NULL DEFAULT '',
            resource_type TEXT NOT NULL
                CHECK (resource_type IN ('GUEST_SUITE', 'SKY_LOUNGE', 'GEAR_SHED')),
            status TEXT NOT NULL DEFAULT 'Scheduled'
                CHECK (status IN ('Scheduled', 'Complete', 'Cancelled')),
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            total_cost REAL NOT NULL DEFAULT 0,
            scheduled_by TEXT NOT NULL,
            edit_by TEXT,
            last_update TEXT,
            rental_notes TEXT DEFAULT '',
            return_notes TEXT,
            completed_by TEXT,
            cancellation_fee REAL,
            override_lock INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            CHECK (start_time < end_time)
        )
    ''')

    db.execute('''
        CREATE TABLE reservation_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            tx_id TEXT NOT NULL REFERENCES reservations(tx_id) ON DELETE CASCADE,
            item_name TEXT NOT NULL,
            position INTEGER NOT NULL DEFAULT 0,
            UNIQUE(tx_id, item_name)
        )
    ''')

    db.execute('''
        CREATE TABLE reservation_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            tx_id TEXT NOT NULL REFERENCES reservations(tx_id) ON DELETE CASCADE,
            status TEXT NOT NULL,
            action TEXT NOT NULL,
            changed_by TEXT,
            notes TEXT,
            created_at TEXT NOT NULL
        )
    ''')


def create_indexes(db):
    """Create database indexes for performance."""
    indexes = [
        'CREATE INDEX idx_reservations_type_status ON reservations(resource_type, status)',
        'CREATE INDEX idx_reservations_start ON reservations(start_time)',
        'CREATE INDEX idx_reservation_items_name ON reservation_items(item_name)',
        'CREATE INDEX idx_status_history_tx ON reservation_status_history(tx_id)',
        'CREATE INDEX idx_scheduler_items_type ON scheduler_items(resource_type)',
    ]

    for index_sql in indexes:
        db.execute(index_sql)
