"""
Untappd URL construction and validation.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

from .models import UntappdMeta, UntappdSource, utc_now_iso

UNTAPPD_BASE = "https://untappd.com"
UNTAPPD_SEARCH_URL = f"{UNTAPPD_BASE}/search?q="

DEFAULT_MAX_API_AGE = timedelta(hours=24)

# Characters left unescaped by JavaScript's encodeURIComponent, on top of
# the alphanumerics and "_.-~" that quote() never escapes.
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode a single URL component."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _is_untappd_host(hostname: str | None) -> bool:
    if not hostname:
        return False
    host = hostname.lower().rstrip(".")
    return host == "untappd.com" or host.endswith(".untappd.com")


def sanitize_untappd_url(value: Any) -> str | None:
    """
    Validate a URL that should point at Untappd.

    Protocol-relative and plain http URLs are upgraded to https. Returns None
    for anything that is not an http(s) URL on the untappd.com domain.
    """
    raw = str(value or "").strip()
    if not raw:
        return None
    if raw.startswith("//"):
        raw = f"https:{raw}"

    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
    except ValueError:
        return None

    if parts.scheme.lower() not in ("http", "https"):
        return None
    if not _is_untappd_host(hostname):
        return None

    return urlunsplit(("https", parts.netloc.lower(), parts.path or "/", parts.query, parts.fragment))


def create_search_url(name: Any) -> str:
    """Build the Untappd search page URL for a beer name."""
    return UNTAPPD_SEARCH_URL + encode_uri_component(str(name or "").strip())


def build_beer_url(item: Any) -> str | None:
    """
    Derive the canonical beer page URL from a search result item.

    Prefers a direct URL field; otherwise builds ``/b/<slug>/<bid>``.
    """
    if not isinstance(item, dict):
        return None
    beer = item.get("beer")
    if not isinstance(beer, dict):
        beer = item

    direct = (
        beer.get("beer_url")
        or beer.get("url")
        or item.get("url")
        or item.get("beer_url")
    )
    direct_url = sanitize_untappd_url(direct)
    if direct_url:
        return direct_url

    slug = str(beer.get("beer_slug") or "").strip()
    bid = beer.get("bid", item.get("bid"))
    if isinstance(bid, bool):
        return None
    try:
        bid_number = float(bid)
    except (TypeError, ValueError, OverflowError):
        return None
    if not slug or not bid_number.is_integer() or bid_number <= 0:
        return None

    return f"{UNTAPPD_BASE}/b/{encode_uri_component(slug)}/{int(bid_number)}"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    raw = str(value or "").strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_api_record_expired(
    resolved_at: Any,
    now: datetime | None = None,
    max_age: timedelta = DEFAULT_MAX_API_AGE,
) -> bool:
    """Check whether an API match is too old to trust. Bad timestamps count as expired."""
    resolved = parse_timestamp(resolved_at)
    if resolved is None:
        return True
    current = now or datetime.now(UTC)
    return current - resolved > max_age


def search_link_meta(name: str, resolved_at: str | None = None) -> UntappdMeta:
    """Fallback metadata pointing at the Untappd search page."""
    return UntappdMeta(
        untappd_url=create_search_url(name),
        untappd_source=UntappdSource.SEARCH_LINK,
        untappd_confidence=None,
        untappd_resolved_at=resolved_at or utc_now_iso(),
    )
