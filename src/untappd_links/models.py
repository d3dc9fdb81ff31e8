"""
Data models for beer entries and their Untappd link metadata.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class UntappdSource(str, Enum):
    """Where an Untappd link came from. Values are the persisted tags."""

    SEARCH_LINK = "search-link"  # Generic search page fallback
    API_MATCH = "untappd-api"  # Confident match from the search API

    @classmethod
    def parse(cls, value: Any) -> "UntappdSource | None":
        """Return the matching source, or None for unknown/corrupt tags."""
        raw = str(value or "").strip()
        for source in cls:
            if source.value == raw:
                return source
        return None


class ResolutionFailure(str, Enum):
    """Why a remote resolution did not produce a match."""

    NO_CREDENTIALS = "no_credentials"
    BLANK_NAME = "blank_name"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    NETWORK_ERROR = "network_error"
    BAD_PAYLOAD = "bad_payload"
    NO_CANDIDATES = "no_candidates"
    LOW_CONFIDENCE = "low_confidence"


@dataclass
class UntappdMeta:
    """Untappd link metadata attached to a beer."""

    untappd_url: str
    untappd_source: UntappdSource
    untappd_confidence: float | None = None
    untappd_resolved_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "untappd_url": self.untappd_url,
            "untappd_source": self.untappd_source.value,
            "untappd_confidence": self.untappd_confidence,
            "untappd_resolved_at": self.untappd_resolved_at,
        }


@dataclass
class BeerEntry:
    """A beer as entered by the game host."""

    name: str
    image_url: str | None = None
    sort_order: int = 0
    id: int | None = None


@dataclass
class EnrichedBeer:
    """A beer entry with its Untappd metadata, ready to be persisted."""

    name: str
    image_url: str | None
    sort_order: int
    meta: UntappdMeta
    id: int | None = None

    @classmethod
    def from_entry(cls, entry: BeerEntry, meta: UntappdMeta) -> "EnrichedBeer":
        return cls(
            name=entry.name,
            image_url=entry.image_url,
            sort_order=entry.sort_order,
            meta=meta,
            id=entry.id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "image_url": self.image_url,
            "sort_order": self.sort_order,
        }
        if self.id is not None:
            result["id"] = self.id
        result.update(self.meta.to_dict())
        return result


@dataclass
class CandidateMatch:
    """Best-scoring candidate from one search response."""

    score: float
    url: str


@dataclass
class ResolutionOutcome:
    """
    Result of one remote resolution attempt.

    Exactly one of ``match`` and ``failure`` is set. ``best_score`` carries the
    top candidate score even when it fell below the threshold.
    """

    match: CandidateMatch | None = None
    failure: ResolutionFailure | None = None
    best_score: float | None = None

    @property
    def matched(self) -> bool:
        return self.match is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"matched": self.matched}
        if self.match:
            result["url"] = self.match.url
            result["score"] = self.match.score
        if self.failure:
            result["failure"] = self.failure.value
        if self.best_score is not None:
            result["best_score"] = self.best_score
        return result


@dataclass
class BeerLinkRow:
    """Stored link state of one beer, as read by the maintenance pass."""

    id: int
    name: str | None
    untappd_url: str | None = None
    untappd_source: str | None = None
    untappd_resolved_at: str | None = None


@dataclass
class UntappdMetaUpdate:
    """A pending metadata write for one stored beer."""

    beer_id: int
    meta: UntappdMeta


@dataclass
class StoredBeer:
    """A beer row as stored in the database."""

    id: int
    name: str
    image_url: str | None
    sort_order: int
    untappd_url: str | None = None
    untappd_source: str | None = None
    untappd_confidence: float | None = None
    untappd_resolved_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "image_url": self.image_url,
            "sort_order": self.sort_order,
            "untappd_url": self.untappd_url,
            "untappd_source": self.untappd_source,
            "untappd_confidence": self.untappd_confidence,
            "untappd_resolved_at": self.untappd_resolved_at,
        }


@dataclass
class Game:
    """A rating game."""

    id: int
    name: str
    created_ts: str
    updated_ts: str | None = None
