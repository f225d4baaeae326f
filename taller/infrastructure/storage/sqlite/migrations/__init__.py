"""Schema migrations for the pipeline database."""

from taller.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    MigrationResult,
    backup_database,
    discover_migrations,
    get_migration_status,
    initialize_database,
    restore_database,
    verify_schema_integrity,
)

__all__ = [
    "MigrationInfo",
    "MigrationResult",
    "backup_database",
    "discover_migrations",
    "get_migration_status",
    "initialize_database",
    "restore_database",
    "verify_schema_integrity",
]
