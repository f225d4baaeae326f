"""
Versioned schema migrations for the pipeline database.

Migrations are ``vNNN_name.sql`` files next to this module, applied in
version order and recorded with a content checksum in ``schema_migrations``.
A recorded migration whose file has since changed stops the run. The
database file is copied aside before a run and restored if the run raises.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from taller.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE = re.compile(r"^v(\d+)_(\w+)\.sql$")

REQUIRED_TABLES = (
    "clients",
    "quotations",
    "work_orders",
    "work_order_parts",
    "inventory_items",
    "warehouse_locations",
    "stock_movements",
    "caf_folios",
    "invoices",
    "invoice_lines",
    "schema_migrations",
)


@dataclass
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE.match(path.name)
        if match is None:
            raise ValueError(f"Migration file must be named vNNN_name.sql, got {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest[:16])


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are logged and ignored."""
    found = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("migration_file_ignored", path=str(path), error=str(e))
    return found


async def _recorded(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum. Empty before the first migration."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    started = time.monotonic()
    logger.info("migration_applying", version=migration.version, name=migration.name)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (
                migration.version,
                migration.name,
                migration.checksum,
                int((time.monotonic() - started) * 1000),
            ),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.monotonic() - started) * 1000),
            error=str(e),
        )

    elapsed = int((time.monotonic() - started) * 1000)
    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def backup_database(db_path: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backed_up", backup_path=str(backup_path))
    return backup_path


def restore_database(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored", backup_path=str(backup_path))


async def _migrate(conn: aiosqlite.Connection) -> list[MigrationResult]:
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")

    results: list[MigrationResult] = []
    recorded = await _recorded(conn)

    for migration in discover_migrations():
        if migration.version in recorded:
            if recorded[migration.version] != migration.checksum:
                logger.error(
                    "migration_checksum_mismatch",
                    version=migration.version,
                    recorded=recorded[migration.version],
                    found=migration.checksum,
                )
                break
            continue

        result = await _apply(conn, migration)
        results.append(result)
        if not result.success:
            break

        violations = await _foreign_key_violations(conn)
        if violations:
            logger.error(
                "migration_left_fk_violations",
                version=migration.version,
                violations=violations,
            )
            break

    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Args:
        db_path: Database file; the configured one when omitted
        create_backup_before: Copy an existing file aside first

    Returns:
        Results of the migrations attempted in this run
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("database_migrating", db_path=str(db_path))

    backup_path = backup_database(db_path) if create_backup_before and db_path.exists() else None

    try:
        async with aiosqlite.connect(db_path) as conn:
            results = await _migrate(conn)
    except Exception as e:
        logger.error("database_migration_aborted", error=str(e))
        if backup_path is not None:
            restore_database(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    logger.info(
        "database_migrated",
        applied=sum(r.success for r in results),
        failed=sum(not r.success for r in results),
    )
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        recorded = await _recorded(conn)

    return {
        "exists": True,
        "current_version": max(recorded) if recorded else None,
        "applied_migrations": sorted(recorded),
        "pending_migrations": [m.version for m in discovered if m.version not in recorded],
    }


def _check(name: str, passed: bool, **info) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **info}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """SQLite integrity, foreign keys, required tables and orphaned ledger rows."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]

        checks = [
            _check("foreign_keys", violations == 0, violations=violations),
            _check("integrity", integrity == "ok", result=integrity),
            _check("required_tables", not missing, missing=missing),
        ]

        if "stock_movements" in tables:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM stock_movements "
                "WHERE inventory_item_id NOT IN (SELECT id FROM inventory_items)"
            )
            orphans = (await cursor.fetchone())[0]
            checks.append(_check("movement_ledger", orphans == 0, orphaned_movements=orphans))

    return checks


def main() -> None:
    """``taller-migrate`` entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Migrate the taller pipeline database")
    parser.add_argument("--db-path", type=Path, help="Database file (default from settings)")
    parser.add_argument("--status", action="store_true", help="List applied and pending migrations")
    parser.add_argument("--verify", action="store_true", help="Run the schema integrity checks")
    parser.add_argument("--no-backup", action="store_true", help="Do not copy the database first")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            for key, value in status.items():
                print(f"{key}: {value}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                extra = {k: v for k, v in check.items() if k not in ("check", "status")}
                print(f"{check['status']:<4} {check['check']} {extra}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        if not results:
            print("Schema is up to date")
        for result in results:
            outcome = "ok" if result.success else f"FAILED: {result.error}"
            print(f"v{result.version}_{result.name} ({result.execution_time_ms}ms) {outcome}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
