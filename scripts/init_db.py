#!/usr/bin/env python3
"""Create or upgrade the beer game database."""

import argparse
import sqlite3
from pathlib import Path

from untappd_links.migrations import run_migrations


def init_db(db_path: Path) -> None:
    """Apply all pending migrations and show the resulting schema."""
    print(f"Initializing database: {db_path}")

    applied = run_migrations(db_path)
    if applied:
        print(f"Applied {len(applied)} migration(s): {', '.join(f'v{v}' for v in applied)}")
    else:
        print("Schema already up to date.")

    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.execute(
            "SELECT version, applied_ts FROM schema_migrations ORDER BY version"
        )
        print("\nSchema versions:")
        for row in cursor:
            print(f"  v{row[0]} applied at {row[1]}")

        cursor = conn.execute("PRAGMA table_info(beers)")
        columns = [row[1] for row in cursor]
        print(f"\nbeers columns: {', '.join(columns)}")
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialize the beer game database")
    parser.add_argument(
        "--db",
        type=Path,
        default=Path("beer_game.db"),
        help="Path to the SQLite database file (default: beer_game.db)",
    )
    args = parser.parse_args()

    init_db(args.db)


if __name__ == "__main__":
    main()
