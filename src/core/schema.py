"""
Settings Schema Module

Creates the settings tables and upgrades older settings files. The schema
version is kept in SQLite's ``user_version`` pragma.
For CRUD operations, see core/database.py
"""

import src.core.database as db  # module import so tests can repoint DB_FILE

DB_VERSION = 1  # Increment when schema changes

APP_CONFIG_DDL = """
    CREATE TABLE IF NOT EXISTS app_config (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

# version -> statements that bring a settings file up to that version
MIGRATIONS = {
    1: [APP_CONFIG_DDL],
}


def get_db_version() -> int:
    """Schema version of the settings file (0 for a new or foreign file)."""
    if not db.DB_FILE.exists():
        return 0
    with db.get_connection() as conn:
        return conn.execute("PRAGMA user_version").fetchone()[0]


def set_db_version(version: int):
    with db.get_connection() as conn:
        # PRAGMA does not accept bound parameters
        conn.execute(f"PRAGMA user_version = {int(version)}")


def ensure_app_config_schema():
    """Ensure the app_config table exists."""
    with db.get_connection() as conn:
        conn.execute(APP_CONFIG_DDL)


def ensure_all_schemas():
    ensure_app_config_schema()


def migrate_database(from_version: int, to_version: int):
    """Apply every migration step between the two versions, in order."""
    from src.logger import get_logger
    logger = get_logger(__name__)

    logger.info(f"Migrating settings database from v{from_version} to v{to_version}")
    with db.get_connection() as conn:
        for version in range(from_version + 1, to_version + 1):
            for statement in MIGRATIONS.get(version, []):
                conn.execute(statement)
    set_db_version(to_version)
    logger.info("Migration complete")


def initialize_database():
    """Create the settings file on first start, or upgrade it if it is outdated."""
    from src.logger import get_logger
    logger = get_logger(__name__)

    is_new = not db.DB_FILE.exists()
    if is_new:
        db.DB_FILE.parent.mkdir(parents=True, exist_ok=True)

    current_version = get_db_version()
    if current_version < DB_VERSION:
        migrate_database(current_version, DB_VERSION)
    else:
        ensure_all_schemas()

    if is_new:
        logger.info(f"Created settings database: {db.DB_FILE}")
