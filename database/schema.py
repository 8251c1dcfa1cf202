"""
Database schema definitions.
Table creation, indexes, and structure management.
"""

# ISO-8601 UTC timestamp default, comparable as text
_NOW = "(strftime('%Y-%m-%dT%H:%M:%S', 'now'))"


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'reservation_status_history',
        'audit_log',
        'app_config',
        'reservations',
        'package_resources',
        'resource_packages',
        'resources',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users
    db.execute(f'''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'student'
                CHECK(role IN ('student', 'faculty', 'admin')),
            department TEXT NOT NULL DEFAULT '',
            active INTEGER DEFAULT 1,
            created_at TEXT DEFAULT {_NOW},
            updated_at TEXT DEFAULT {_NOW},
            last_login TEXT
        )
    ''')

    # 2. Resource ledger
    db.execute(f'''
        CREATE TABLE resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            category TEXT NOT NULL CHECK(category IN ('rooms', 'equipment', 'av')),
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'available'
                CHECK(status IN ('available', 'reserved', 'maintenance')),
            location TEXT NOT NULL DEFAULT '',
            image TEXT NOT NULL DEFAULT '',
            quantity INTEGER NOT NULL DEFAULT 1 CHECK(quantity >= 0),
            specifications TEXT,
            created_at TEXT DEFAULT {_NOW},
            updated_at TEXT DEFAULT {_NOW}
        )
    ''')

    # 3. Packages
    db.execute(f'''
        CREATE TABLE resource_packages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            subject TEXT NOT NULL DEFAULT '',
            created_by INTEGER REFERENCES users(id) ON DELETE SET NULL,
            created_at TEXT DEFAULT {_NOW},
            updated_at TEXT DEFAULT {_NOW}
        )
    ''')

    db.execute(f'''
        CREATE TABLE package_resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            package_id INTEGER NOT NULL REFERENCES resource_packages(id) ON DELETE CASCADE,
            resource_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            quantity_needed INTEGER NOT NULL DEFAULT 1 CHECK(quantity_needed >= 1),
            created_at TEXT DEFAULT {_NOW},
            UNIQUE(package_id, resource_id)
        )
    ''')

    # 4. Reservations
    db.execute(f'''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id),
            resource_id INTEGER NOT NULL REFERENCES resources(id),
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            purpose TEXT NOT NULL,
            description TEXT,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK(status IN ('pending', 'approved', 'rejected')),
            priority TEXT NOT NULL DEFAULT 'normal'
                CHECK(priority IN ('low', 'normal', 'high', 'urgent')),
            attendees INTEGER,
            requirements TEXT,
            package_id INTEGER REFERENCES resource_packages(id) ON DELETE SET NULL,
            booking_ref TEXT,
            created_at TEXT DEFAULT {_NOW},
            updated_at TEXT DEFAULT {_NOW},
            CHECK(start_date < end_date)
        )
    ''')

    db.execute(f'''
        CREATE TABLE reservation_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id) ON DELETE CASCADE,
            old_status TEXT,
            new_status TEXT NOT NULL,
            changed_by INTEGER,
            comments TEXT,
            created_at TEXT DEFAULT {_NOW}
        )
    ''')

    # 5. Settings & audit
    db.execute(f'''
        CREATE TABLE app_config (
            key TEXT PRIMARY KEY,
            value TEXT,
            description TEXT,
            updated_at TEXT DEFAULT {_NOW}
        )
    ''')

    db.execute(f'''
        CREATE TABLE audit_log (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER,
            action TEXT NOT NULL,
            entity_type TEXT,
            entity_id INTEGER,
            changes TEXT,
            ip_address TEXT,
            user_agent TEXT,
            created_at TEXT DEFAULT {_NOW}
        )
    ''')


def create_indexes(db):
    """Create indexes for the overlap and listing queries."""
    indexes = [
        'CREATE INDEX IF NOT EXISTS idx_reservations_resource_window '
        'ON reservations(resource_id, status, start_date, end_date)',
        'CREATE INDEX IF NOT EXISTS idx_reservations_user '
        'ON reservations(user_id, status)',
        'CREATE INDEX IF NOT EXISTS idx_reservations_booking_ref '
        'ON reservations(booking_ref)',
        'CREATE INDEX IF NOT EXISTS idx_resources_category ON resources(category)',
        'CREATE INDEX IF NOT EXISTS idx_package_resources_package '
        'ON package_resources(package_id)',
        'CREATE INDEX IF NOT EXISTS idx_status_history_reservation '
        'ON reservation_status_history(reservation_id)',
        'CREATE INDEX IF NOT EXISTS idx_audit_log_entity ON audit_log(entity_type, entity_id)',
    ]

    for statement in indexes:
        db.execute(statement)
