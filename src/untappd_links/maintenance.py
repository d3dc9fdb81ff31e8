"""
Read-path repair of stored Untappd links.

Runs before a game is shown. Beers with a missing link, an unknown source tag
or an expired API match get a fresh search-link fallback. The Untappd API is
not called here; matches are only made when beers are created or edited.
"""

import logging
from datetime import UTC, datetime

from .config import AppConfig
from .links import is_api_record_expired, search_link_meta
from .models import BeerLinkRow, UntappdMetaUpdate, UntappdSource
from .repository import BeerRepository

logger = logging.getLogger(__name__)


def needs_repair(row: BeerLinkRow, now: datetime, config: AppConfig) -> bool:
    """Check whether a stored beer's link must be reset to a search link."""
    source = UntappdSource.parse(row.untappd_source)
    has_link = bool(str(row.untappd_url or "").strip())
    if not has_link or source is None:
        return True
    if source is UntappdSource.API_MATCH:
        return is_api_record_expired(
            row.untappd_resolved_at,
            now=now,
            max_age=config.resolution.max_api_age,
        )
    return False


def refresh_stale_links(
    config: AppConfig,
    repository: BeerRepository,
    game_id: int,
    now: datetime | None = None,
) -> int:
    """
    Reset missing, corrupt or expired Untappd links for a game.

    Call it before any read of a game's beers: game views here, and the
    results page once scoring is added.

    Returns:
        Number of beers rewritten
    """
    rows = repository.list_beers_for_maintenance(game_id)
    if not rows:
        return 0

    now = now or datetime.now(UTC)
    now_iso = now.isoformat()
    updates: list[UntappdMetaUpdate] = []

    for row in rows:
        if not row.name:
            continue
        if not needs_repair(row, now, config):
            continue
        updates.append(
            UntappdMetaUpdate(beer_id=row.id, meta=search_link_meta(row.name, now_iso))
        )

    if updates:
        repository.update_untappd_meta(game_id, updates)
        logger.info(f"Reset {len(updates)} Untappd link(s) for game {game_id}")

    return len(updates)
