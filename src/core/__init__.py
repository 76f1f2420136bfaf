"""
Core module - Settings persistence

This module provides:
- database: app_config CRUD operations
- schema: Database initialization and migrations
"""

from src.core.database import (
    DB_FILE,
    get_connection,
    # App config operations
    get_app_config,
    set_app_config,
    delete_app_config,
    get_all_app_config,
)

from src.core.schema import (
    DB_VERSION,
    get_db_version,
    set_db_version,
    initialize_database,
    ensure_all_schemas,
    migrate_database,
)
