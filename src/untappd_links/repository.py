"""
Game and beer storage.
"""

import sqlite3
from dataclasses import replace
from pathlib import Path
from typing import Protocol

from .models import BeerLinkRow, EnrichedBeer, Game, StoredBeer, UntappdMetaUpdate, utc_now_iso

_BEER_COLUMNS = (
    "id, name, image_url, sort_order, untappd_url, untappd_source, "
    "untappd_confidence, untappd_resolved_at"
)


class BeerRepository(Protocol):
    """Storage operations needed by the link maintenance pass."""

    def list_beers_for_maintenance(self, game_id: int) -> list[BeerLinkRow]: ...

    def update_untappd_meta(self, game_id: int, updates: list[UntappdMetaUpdate]) -> None: ...


class GameDatabase:
    """SQLite storage for games and their beers."""

    def __init__(self, db_path: Path):
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    # -------------------------------------------------------------------------
    # Games
    # -------------------------------------------------------------------------

    def create_game(self, name: str) -> int:
        """Create a game and return its ID."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "INSERT INTO games (name, created_ts) VALUES (?, ?)",
                (name, utc_now_iso()),
            )
            conn.commit()
            return int(cursor.lastrowid)
        finally:
            conn.close()

    def get_game(self, game_id: int) -> Game | None:
        """Get a single game by ID."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                "SELECT id, name, created_ts, updated_ts FROM games WHERE id = ?",
                (game_id,),
            )
            row = cursor.fetchone()
            return Game(**dict(row)) if row else None
        finally:
            conn.close()

    def game_exists(self, game_id: int) -> bool:
        conn = self._connect()
        try:
            cursor = conn.execute("SELECT 1 FROM games WHERE id = ?", (game_id,))
            return cursor.fetchone() is not None
        finally:
            conn.close()

    def update_game_name(self, game_id: int, name: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "UPDATE games SET name = ?, updated_ts = ? WHERE id = ?",
                (name, utc_now_iso(), game_id),
            )
            conn.commit()
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Beers
    # -------------------------------------------------------------------------

    def get_beers_by_game_id(self, game_id: int) -> list[StoredBeer]:
        """Get a game's beers in display order."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                f"SELECT {_BEER_COLUMNS} FROM beers WHERE game_id = ? "
                "ORDER BY sort_order ASC, id ASC",
                (game_id,),
            )
            return [StoredBeer(**dict(row)) for row in cursor.fetchall()]
        finally:
            conn.close()

    def list_beer_ids_by_game_id(self, game_id: int) -> list[int]:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "SELECT id FROM beers WHERE game_id = ? ORDER BY sort_order ASC, id ASC",
                (game_id,),
            )
            return [row["id"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def insert_beers(self, game_id: int, beers: list[EnrichedBeer]) -> None:
        """Insert beers as new rows, ignoring any IDs they carry."""
        self.upsert_beers_for_game(game_id, [replace(beer, id=None) for beer in beers])

    def upsert_beers_for_game(self, game_id: int, beers: list[EnrichedBeer]) -> None:
        """Insert beers without an ID and update the ones that have one."""
        if not beers:
            return

        conn = self._connect()
        try:
            with conn:
                for beer in beers:
                    meta = beer.meta
                    if beer.id is None:
                        conn.execute(
                            """
                            INSERT INTO beers
                                (game_id, name, image_url, sort_order, untappd_url,
                                 untappd_source, untappd_confidence, untappd_resolved_at)
                            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                            """,
                            (
                                game_id,
                                beer.name,
                                beer.image_url,
                                beer.sort_order,
                                meta.untappd_url,
                                meta.untappd_source.value,
                                meta.untappd_confidence,
                                meta.untappd_resolved_at,
                            ),
                        )
                        continue

                    conn.execute(
                        """
                        UPDATE beers SET
                            name = ?,
                            image_url = ?,
                            sort_order = ?,
                            untappd_url = ?,
                            untappd_source = ?,
                            untappd_confidence = ?,
                            untappd_resolved_at = ?
                        WHERE game_id = ? AND id = ?
                        """,
                        (
                            beer.name,
                            beer.image_url,
                            beer.sort_order,
                            meta.untappd_url,
                            meta.untappd_source.value,
                            meta.untappd_confidence,
                            meta.untappd_resolved_at,
                            game_id,
                            beer.id,
                        ),
                    )
        finally:
            conn.close()

    def delete_beers_by_ids(self, game_id: int, ids: list[int]) -> None:
        if not ids:
            return

        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    "DELETE FROM beers WHERE game_id = ? AND id = ?",
                    [(game_id, beer_id) for beer_id in ids],
                )
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Untappd link maintenance
    # -------------------------------------------------------------------------

    def list_beers_for_maintenance(self, game_id: int) -> list[BeerLinkRow]:
        """Get the stored link state of every beer in a game."""
        conn = self._connect()
        try:
            cursor = conn.execute(
                """
                SELECT id, name, untappd_url, untappd_source, untappd_resolved_at
                FROM beers WHERE game_id = ?
                """,
                (game_id,),
            )
            return [BeerLinkRow(**dict(row)) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_untappd_meta(self, game_id: int, updates: list[UntappdMetaUpdate]) -> None:
        """Write new link metadata for several beers in one transaction."""
        if not updates:
            return

        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    """
                    UPDATE beers SET
                        untappd_url = ?,
                        untappd_source = ?,
                        untappd_confidence = ?,
                        untappd_resolved_at = ?
                    WHERE game_id = ? AND id = ?
                    """,
                    [
                        (
                            u.meta.untappd_url,
                            u.meta.untappd_source.value,
                            u.meta.untappd_confidence,
                            u.meta.untappd_resolved_at,
                            game_id,
                            u.beer_id,
                        )
                        for u in updates
                    ],
                )
        finally:
            conn.close()
