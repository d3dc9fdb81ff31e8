"""
Game creation, editing and viewing.

Beers are enriched with Untappd links before they are written, and stored
links are repaired before a game is read.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .client import UntappdClient
from .config import AppConfig
from .enrichment import enrich_beers
from .maintenance import refresh_stale_links
from .models import BeerEntry, Game, StoredBeer
from .repository import GameDatabase

logger = logging.getLogger(__name__)

MAX_GAME_NAME_LENGTH = 120
MAX_BEERS_PER_GAME = 100


class GameServiceError(Exception):
    """Base error for game operations."""


class InvalidPayload(GameServiceError):
    """The submitted game or beer data is not acceptable."""


class GameNotFound(GameServiceError):
    """No game with the given ID exists."""


@dataclass
class GameWithBeers:
    game: Game
    beers: list[StoredBeer]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "game": {
                "id": self.game.id,
                "name": self.game.name,
                "created_ts": self.game.created_ts,
                "updated_ts": self.game.updated_ts,
            },
            "beers": [beer.to_dict() for beer in self.beers],
        }


def normalize_game_name(raw: Any) -> str:
    name = str(raw or "").strip()
    if not name:
        raise InvalidPayload("Game name is required")
    if len(name) > MAX_GAME_NAME_LENGTH:
        raise InvalidPayload(f"Game name is too long (max {MAX_GAME_NAME_LENGTH} characters)")
    return name


def _parse_beer_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise InvalidPayload("Invalid beer ID")
    try:
        number = float(raw)
    except (TypeError, ValueError, OverflowError):
        raise InvalidPayload("Invalid beer ID") from None
    if not number.is_integer() or number <= 0:
        raise InvalidPayload("Invalid beer ID")
    return int(number)


def normalize_beers_payload(items: Any, allow_ids: bool = False) -> list[BeerEntry]:
    """
    Validate submitted beers and turn them into entries.

    Blank names are dropped and ``sort_order`` follows the order of the
    remaining beers. IDs are only read when ``allow_ids`` is set.

    Raises:
        InvalidPayload: For malformed input, bad IDs or a bad beer count
    """
    if not isinstance(items, list):
        raise InvalidPayload("Invalid payload")

    beers: list[BeerEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            continue

        image_url = item.get("image_url")
        image_url = image_url.strip() if isinstance(image_url, str) and image_url.strip() else None

        entry = BeerEntry(name=name, image_url=image_url, sort_order=len(beers))
        raw_id = item.get("id")
        if allow_ids and raw_id is not None and raw_id != "":
            entry.id = _parse_beer_id(raw_id)
        beers.append(entry)

    if not beers:
        raise InvalidPayload("Add at least one beer")
    if len(beers) > MAX_BEERS_PER_GAME:
        raise InvalidPayload(f"Too many beers (max {MAX_BEERS_PER_GAME})")

    return beers


class GameService:
    """Game operations with Untappd link handling on the write and read paths."""

    def __init__(
        self,
        config: AppConfig,
        db: GameDatabase,
        untappd_client: UntappdClient | None = None,
    ):
        """
        Initialize the service.

        Args:
            config: Application configuration
            db: Game storage
            untappd_client: Optional UntappdClient (for testing)
        """
        self.config = config
        self.db = db
        self.untappd_client = untappd_client

    async def create_game(self, name: Any, beers: Any) -> int:
        """Create a game with its beers. Returns the new game ID."""
        game_name = normalize_game_name(name)
        entries = normalize_beers_payload(beers)
        enriched = await enrich_beers(self.config, entries, self.untappd_client)

        game_id = self.db.create_game(game_name)
        self.db.insert_beers(game_id, enriched)

        logger.info(f"Created game {game_id} with {len(enriched)} beers")
        return game_id

    async def update_game(self, game_id: int, name: Any, beers: Any) -> GameWithBeers:
        """
        Replace a game's name and beer list.

        Beers carrying an ID update the stored row, beers without one are
        inserted, and stored beers missing from the list are deleted.
        """
        game_name = normalize_game_name(name)
        entries = normalize_beers_payload(beers, allow_ids=True)
        enriched = await enrich_beers(self.config, entries, self.untappd_client)

        if not self.db.game_exists(game_id):
            raise GameNotFound(f"Game {game_id} not found")

        existing_ids = set(self.db.list_beer_ids_by_game_id(game_id))
        seen_ids: set[int] = set()
        for beer in enriched:
            if beer.id is None:
                continue
            if beer.id not in existing_ids:
                raise InvalidPayload(f"Invalid beer ID: {beer.id}")
            if beer.id in seen_ids:
                raise InvalidPayload(f"Beer ID appears twice: {beer.id}")
            seen_ids.add(beer.id)

        self.db.update_game_name(game_id, game_name)
        self.db.upsert_beers_for_game(game_id, enriched)
        self.db.delete_beers_by_ids(game_id, sorted(existing_ids - seen_ids))

        logger.info(f"Updated game {game_id}: {len(enriched)} beers")
        return self._load(game_id)

    def get_game(self, game_id: int) -> GameWithBeers:
        """Repair stale Untappd links, then read the game and its beers."""
        refresh_stale_links(self.config, self.db, game_id)
        return self._load(game_id)

    def _load(self, game_id: int) -> GameWithBeers:
        game = self.db.get_game(game_id)
        if game is None:
            raise GameNotFound(f"Game {game_id} not found")
        return GameWithBeers(game=game, beers=self.db.get_beers_by_game_id(game_id))
