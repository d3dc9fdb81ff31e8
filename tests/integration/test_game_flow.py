"""End-to-end game flow with a faked Untappd API over httpx."""

import sqlite3
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from untappd_links.games import GameService
from untappd_links.repository import GameDatabase

SEARCH_RESULTS = {
    "karhu iii": [
        {
            "beer": {"bid": 12, "beer_name": "Karhu III", "beer_slug": "sinebrychoff-karhu-iii"},
            "brewery": {"brewery_name": "Sinebrychoff"},
        }
    ],
    "ipa deluxe": [
        {
            "beer": {
                "bid": 77,
                "beer_name": "Deluxe Double IPA Dry Hopped",
                "beer_slug": "acme-deluxe-double-ipa",
            },
            "brewery": {"brewery_name": "Acme"},
        }
    ],
}


def fake_search_response(url, params=None, headers=None):
    """Answer like the Untappd search endpoint."""
    items = SEARCH_RESULTS.get(params["q"].lower(), [])
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status = MagicMock()
    response.json.return_value = {"response": {"beers": {"count": len(items), "items": items}}}
    return response


@pytest.fixture
def fake_untappd():
    with patch("httpx.AsyncClient") as MockClient:
        mock_client = AsyncMock()
        mock_client.get.side_effect = fake_search_response
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = None
        MockClient.return_value = mock_client
        yield mock_client


def age_beer_links(db_path, game_id: int, hours: int) -> None:
    """Push every beer's resolution time into the past."""
    old = (datetime.now(UTC) - timedelta(hours=hours)).isoformat()
    conn = sqlite3.connect(db_path)
    conn.execute("UPDATE beers SET untappd_resolved_at = ? WHERE game_id = ?", (old, game_id))
    conn.commit()
    conn.close()


@pytest.mark.asyncio
async def test_create_view_and_expire(config, db_path, fake_untappd):
    db = GameDatabase(db_path)
    service = GameService(config, db)

    game_id = await service.create_game(
        "Sauna night",
        [{"name": "Karhu III"}, {"name": "IPA Deluxe"}, {"name": "Home Brew #3"}],
    )

    beers = service.get_game(game_id).beers
    assert fake_untappd.get.call_count == 3
    assert beers[0].untappd_url == "https://untappd.com/b/sinebrychoff-karhu-iii/12"
    assert beers[0].untappd_source == "untappd-api"
    assert beers[0].untappd_confidence == 1.0
    # Token overlap only (0.356) is not trusted
    assert beers[1].untappd_source == "search-link"
    assert beers[2].untappd_url == "https://untappd.com/search?q=Home%20Brew%20%233"

    # An hour later nothing changes on read
    age_beer_links(db_path, game_id, hours=1)
    assert service.get_game(game_id).beers[0].untappd_source == "untappd-api"

    # A day later the API match is no longer trusted
    age_beer_links(db_path, game_id, hours=25)
    beers = service.get_game(game_id).beers
    assert beers[0].untappd_source == "search-link"
    assert beers[0].untappd_url == "https://untappd.com/search?q=Karhu%20III"
    assert beers[0].untappd_confidence is None
    assert fake_untappd.get.call_count == 3


@pytest.mark.asyncio
async def test_without_credentials_no_requests(config_without_credentials, db_path, fake_untappd):
    service = GameService(config_without_credentials, GameDatabase(db_path))

    game_id = await service.create_game("Quiet night", [{"name": "Karhu III"}])

    beer = service.get_game(game_id).beers[0]
    assert beer.untappd_source == "search-link"
    fake_untappd.get.assert_not_called()


@pytest.mark.asyncio
async def test_corrupt_rows_repaired_on_read(config, db_path, fake_untappd):
    service = GameService(config, GameDatabase(db_path))
    game_id = await service.create_game("Repair", [{"name": "Karhu III"}, {"name": "Koff"}])

    conn = sqlite3.connect(db_path)
    conn.execute(
        "UPDATE beers SET untappd_url = NULL, untappd_source = 'bogus' WHERE game_id = ?",
        (game_id,),
    )
    conn.commit()
    conn.close()

    beers = service.get_game(game_id).beers

    assert {b.untappd_source for b in beers} == {"search-link"}
    assert all(b.untappd_url.startswith("https://untappd.com/search?q=") for b in beers)
