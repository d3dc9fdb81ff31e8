"""
Untappd search API client.

Resolves a user-typed beer name to a canonical Untappd beer page. Every
failure mode (timeout, HTTP error, bad payload, weak match) is reported as
"no match" so callers can always fall back to a search link.

API Documentation: https://untappd.com/api/docs
"""

import asyncio
import logging
from typing import Any

import httpx

from .config import ResolutionSettings, UntappdCredentials
from .links import build_beer_url
from .matching import score_candidate
from .models import CandidateMatch, ResolutionFailure, ResolutionOutcome

logger = logging.getLogger(__name__)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_items(data: Any) -> list[Any] | None:
    """Pull ``response.beers.items`` out of a search payload. None if absent."""
    items = _as_dict(_as_dict(_as_dict(data).get("response")).get("beers")).get("items")
    return items if isinstance(items, list) else None


def score_item(query: str, item: Any) -> CandidateMatch | None:
    """
    Score one search result item against the query.

    Both the bare beer name and "<beer> <brewery>" are tried and the better
    score kept. Items without a name or a usable URL give None.
    """
    if not isinstance(item, dict):
        return None
    beer = item.get("beer")
    if not isinstance(beer, dict):
        beer = item
    brewery = _as_dict(item.get("brewery"))

    candidate_name = str(beer.get("beer_name") or item.get("beer_name") or "").strip()
    candidate_url = build_beer_url(item)
    if not candidate_name or not candidate_url:
        return None

    brewery_name = str(brewery.get("brewery_name") or "").strip()
    combined_name = f"{candidate_name} {brewery_name}" if brewery_name else candidate_name
    score = max(
        score_candidate(query, candidate_name),
        score_candidate(query, combined_name),
    )
    return CandidateMatch(score=score, url=candidate_url)


class UntappdClient:
    """
    Client for the Untappd beer search endpoint.

    One search request per beer name, bounded by a hard deadline.
    """

    def __init__(self, settings: ResolutionSettings | None = None):
        """
        Initialize the Untappd client.

        Args:
            settings: Threshold, timeout and endpoint settings
        """
        self.settings = settings or ResolutionSettings()

    @property
    def search_url(self) -> str:
        return f"{self.settings.api_base.rstrip('/')}/search/beer"

    async def resolve(
        self,
        credentials: UntappdCredentials | None,
        beer_name: str,
    ) -> CandidateMatch | None:
        """
        Resolve a beer name to a confident Untappd match.

        Returns:
            CandidateMatch if a candidate scored at or above the threshold,
            None otherwise. Never raises for remote failures.
        """
        outcome = await self.resolve_outcome(credentials, beer_name)
        return outcome.match

    async def resolve_outcome(
        self,
        credentials: UntappdCredentials | None,
        beer_name: str,
    ) -> ResolutionOutcome:
        """Resolve a beer name and report why it failed when it did."""
        name = str(beer_name or "").strip()
        if credentials is None or not credentials.usable:
            return ResolutionOutcome(failure=ResolutionFailure.NO_CREDENTIALS)
        if not name:
            return ResolutionOutcome(failure=ResolutionFailure.BLANK_NAME)

        logger.debug(f"Searching Untappd for {name!r}")

        try:
            data = await asyncio.wait_for(
                self._search(credentials, name),
                timeout=self.settings.resolve_timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(f"Untappd search timed out for {name!r}")
            return ResolutionOutcome(failure=ResolutionFailure.TIMEOUT)
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Untappd search returned HTTP {e.response.status_code} for {name!r}"
            )
            return ResolutionOutcome(failure=ResolutionFailure.HTTP_STATUS)
        except httpx.HTTPError as e:
            logger.warning(f"Untappd search failed for {name!r}: {type(e).__name__}")
            return ResolutionOutcome(failure=ResolutionFailure.NETWORK_ERROR)
        except ValueError:
            logger.warning(f"Untappd search returned an unparseable body for {name!r}")
            return ResolutionOutcome(failure=ResolutionFailure.BAD_PAYLOAD)

        try:
            return self.pick_best(name, data)
        except Exception:
            logger.exception(f"Could not read Untappd search results for {name!r}")
            return ResolutionOutcome(failure=ResolutionFailure.BAD_PAYLOAD)

    async def _search(self, credentials: UntappdCredentials, name: str) -> Any:
        """Run the search request and return the decoded JSON body."""
        params = {
            "q": name,
            "limit": self.settings.search_result_limit,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }
        async with httpx.AsyncClient(timeout=self.settings.resolve_timeout_seconds) as client:
            response = await client.get(
                self.search_url,
                params=params,
                headers={"accept": "application/json"},
            )
            response.raise_for_status()
            return response.json()

    def pick_best(self, query: str, data: Any) -> ResolutionOutcome:
        """Choose the best candidate from a search payload."""
        items = extract_items(data)
        if items is None:
            logger.debug(f"Untappd payload for {query!r} has no result list")
            return ResolutionOutcome(failure=ResolutionFailure.BAD_PAYLOAD)

        best: CandidateMatch | None = None
        for item in items:
            candidate = score_item(query, item)
            if candidate is None:
                continue
            if best is None or candidate.score > best.score:
                best = candidate

        if best is None:
            return ResolutionOutcome(failure=ResolutionFailure.NO_CANDIDATES)

        if best.score < self.settings.match_threshold:
            logger.debug(
                f"Best Untappd candidate for {query!r} scored {best.score}, "
                f"below threshold {self.settings.match_threshold}"
            )
            return ResolutionOutcome(
                failure=ResolutionFailure.LOW_CONFIDENCE,
                best_score=best.score,
            )

        match = CandidateMatch(score=round(best.score, 3), url=best.url)
        return ResolutionOutcome(match=match, best_score=match.score)
