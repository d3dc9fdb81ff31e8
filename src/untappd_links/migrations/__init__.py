"""
Schema migrations for the beer game database.

Each ``NNNN_name.sql`` file in this directory is one schema version. A
migration and its ``schema_migrations`` row are committed together, so a
failed script leaves the version unrecorded.
"""

import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_VERSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY,
    applied_ts TEXT NOT NULL
)
"""


def get_migration_files() -> list[tuple[int, Path]]:
    """Get all migration files sorted by version number."""
    migrations = []
    for path in MIGRATIONS_DIR.glob("*.sql"):
        prefix, _, _ = path.stem.partition("_")
        if prefix.isdigit():
            migrations.append((int(prefix), path))
    migrations.sort()
    return migrations


def get_applied_versions(conn: sqlite3.Connection) -> set[int]:
    try:
        return {row[0] for row in conn.execute("SELECT version FROM schema_migrations")}
    except sqlite3.OperationalError:
        # Fresh database
        return set()


def apply_migration(conn: sqlite3.Connection, version: int, path: Path) -> None:
    """Run one migration script and record its version in the same transaction."""
    script = (
        "BEGIN;\n"
        f"{path.read_text()}\n"
        "INSERT INTO schema_migrations (version, applied_ts) "
        f"VALUES ({int(version)}, '{datetime.now(UTC).isoformat()}');\n"
        "COMMIT;"
    )
    try:
        conn.executescript(script)
    except sqlite3.Error:
        if conn.in_transaction:
            conn.rollback()
        raise


def get_pending_versions(db_path: Path) -> list[int]:
    """Versions that exist on disk but have not been applied to ``db_path``."""
    if not db_path.exists():
        return [version for version, _ in get_migration_files()]

    conn = sqlite3.connect(db_path)
    try:
        applied = get_applied_versions(conn)
    finally:
        conn.close()
    return [version for version, _ in get_migration_files() if version not in applied]


def run_migrations(db_path: Path) -> list[int]:
    """
    Bring the database at ``db_path`` up to the latest schema.

    The file is created if needed. Returns the versions applied by this call,
    oldest first.
    """
    conn = sqlite3.connect(db_path)
    applied: list[int] = []
    try:
        conn.execute(_VERSIONS_TABLE)
        conn.commit()

        done = get_applied_versions(conn)
        for version, path in get_migration_files():
            if version in done:
                continue
            logger.info(f"Applying migration {version}: {path.name}")
            apply_migration(conn, version, path)
            applied.append(version)
    finally:
        conn.close()

    if not applied:
        logger.debug(f"Schema at {db_path} already up to date")
    return applied


def get_current_version(db_path: Path) -> int:
    """Highest applied schema version, 0 for a missing or empty database."""
    if not db_path.exists():
        return 0

    conn = sqlite3.connect(db_path)
    try:
        return max(get_applied_versions(conn), default=0)
    finally:
        conn.close()
