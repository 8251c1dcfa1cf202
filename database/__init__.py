"""
Database package for the ResourceHub reservation service.

This package provides modular database operations:
- connection: Database connection management (get_db, close_db, init_db,
  begin_immediate, immediate_transaction)
- schema: Table creation and indexes
- seed: Initial seed data and demo catalogue
"""

from database.connection import (
    get_db, close_db, init_db, begin_immediate, immediate_transaction
)
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database, seed_demo_data

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'begin_immediate',
    'immediate_transaction',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
    'seed_demo_data',
]
