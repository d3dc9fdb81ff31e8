"""
Attach Untappd links to beers before they are saved.
"""

import logging

from .client import UntappdClient
from .config import AppConfig
from .concurrency import run_bounded
from .links import search_link_meta
from .models import BeerEntry, EnrichedBeer, UntappdMeta, UntappdSource, utc_now_iso

logger = logging.getLogger(__name__)


async def enrich_beers(
    config: AppConfig,
    beers: list[BeerEntry],
    client: UntappdClient | None = None,
) -> list[EnrichedBeer]:
    """
    Give every beer an Untappd link.

    Every beer starts with a search-page fallback. When API credentials are
    configured, the first ``resolve_limit`` beers are looked up concurrently
    and confident matches replace the fallback.

    Args:
        config: Application configuration (credentials and limits)
        beers: Beers in display order
        client: Optional UntappdClient (for testing)

    Returns:
        Enriched beers in the same order as the input
    """
    now = utc_now_iso()
    enriched = [EnrichedBeer.from_entry(beer, search_link_meta(beer.name, now)) for beer in beers]

    credentials = config.credentials
    if credentials is None:
        logger.debug("No Untappd credentials configured, using search links only")
        return enriched

    settings = config.resolution
    client = client or UntappdClient(settings)
    targets = enriched[: settings.resolve_limit]
    if len(enriched) > len(targets):
        logger.info(
            f"Resolving first {len(targets)} of {len(enriched)} beers against Untappd"
        )

    async def resolve_one(beer: EnrichedBeer, index: int) -> None:
        match = await client.resolve(credentials, beer.name)
        if match is None:
            return
        enriched[index].meta = UntappdMeta(
            untappd_url=match.url,
            untappd_source=UntappdSource.API_MATCH,
            untappd_confidence=match.score,
            untappd_resolved_at=utc_now_iso(),
        )

    await run_bounded(targets, settings.resolve_concurrency, resolve_one)

    matched = sum(1 for beer in enriched if beer.meta.untappd_source is UntappdSource.API_MATCH)
    logger.info(f"Untappd enrichment: {matched}/{len(targets)} beers matched")
    return enriched
