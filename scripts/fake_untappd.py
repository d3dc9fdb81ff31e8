#!/usr/bin/env python3
"""
Fake Untappd API server for local development and testing.

Implements the beer search endpoint:
- GET /v4/search/beer?q=...&limit=...&client_id=...&client_secret=...

Special queries exercise the failure paths:
- "slow ..." sleeps past the default resolve timeout
- "error ..." answers HTTP 500
- "garbage ..." answers a body that is not JSON

Run with: python scripts/fake_untappd.py --port 9010
Then set resolution.api_base to "http://127.0.0.1:9010/v4" in the config file.
"""

import argparse
import json
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

SLOW_RESPONSE_SECONDS = 5.0

# Fake beer database
FAKE_BEERS = [
    {
        "bid": 12,
        "beer_name": "Karhu III",
        "beer_slug": "sinebrychoff-karhu-iii",
        "beer_style": "Lager - Pale",
        "brewery_name": "Sinebrychoff",
    },
    {
        "bid": 77,
        "beer_name": "Deluxe Double IPA Dry Hopped",
        "beer_slug": "acme-deluxe-double-ipa-dry-hopped",
        "beer_style": "IPA - Imperial / Double",
        "brewery_name": "Acme Brewing",
    },
    {
        "bid": 301,
        "beer_name": "Koff Porter",
        "beer_slug": "sinebrychoff-koff-porter",
        "beer_style": "Porter - Baltic",
        "brewery_name": "Sinebrychoff",
    },
    {
        "bid": 455,
        "beer_name": "Lapin Kulta Premium",
        "beer_slug": "hartwall-lapin-kulta-premium",
        "beer_style": "Lager - Pale",
        "brewery_name": "Hartwall",
    },
]


def search_beers(query: str, limit: int) -> list[dict]:
    """Return items whose beer or brewery name shares a word with the query."""
    words = {word for word in query.lower().split() if word}
    items = []
    for beer in FAKE_BEERS:
        haystack = f"{beer['beer_name']} {beer['brewery_name']}".lower().split()
        if words & set(haystack):
            items.append(
                {
                    "checkin_count": 0,
                    "have_had": False,
                    "beer": {
                        "bid": beer["bid"],
                        "beer_name": beer["beer_name"],
                        "beer_slug": beer["beer_slug"],
                        "beer_style": beer["beer_style"],
                    },
                    "brewery": {"brewery_name": beer["brewery_name"]},
                }
            )
    return items[:limit]


class FakeUntappdHandler(BaseHTTPRequestHandler):
    """HTTP handler implementing the fake Untappd search endpoint."""

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        """Override to add prefix."""
        print(f"[FakeUntappd] {args[0]}")

    def send_json(self, data: dict, status: int = 200) -> None:
        """Send a JSON response."""
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def send_error_json(self, status: int, message: str) -> None:
        """Send an Untappd-style error response."""
        self.send_json(
            {
                "meta": {
                    "code": status,
                    "error_detail": message,
                    "error_type": "invalid_param",
                },
                "response": [],
            },
            status=status,
        )

    def do_GET(self) -> None:
        """Handle GET requests."""
        parsed = urlparse(self.path)
        params = parse_qs(parsed.query)

        if parsed.path == "/v4/search/beer":
            self.handle_search(params)
        else:
            self.send_error_json(404, f"Unknown endpoint: {parsed.path}")

    def handle_search(self, params: dict) -> None:
        """Handle beer search requests."""
        if not params.get("client_id") or not params.get("client_secret"):
            self.send_error_json(401, "Missing client_id or client_secret")
            return

        query = params.get("q", [""])[0].strip()
        if not query:
            self.send_error_json(400, "Missing search term")
            return

        lowered = query.lower()
        if lowered.startswith("slow"):
            time.sleep(SLOW_RESPONSE_SECONDS)
        elif lowered.startswith("error"):
            self.send_error_json(500, "Internal error")
            return
        elif lowered.startswith("garbage"):
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            self.wfile.write(b"<html>not json</html>")
            return

        limit = int(params.get("limit", ["25"])[0])
        items = search_beers(query, limit)

        self.send_json(
            {
                "meta": {"code": 200},
                "response": {
                    "found": len(items),
                    "term": query,
                    "beers": {"count": len(items), "items": items},
                },
            }
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Run fake Untappd API server")
    parser.add_argument(
        "--port",
        type=int,
        default=9010,
        help="Port to listen on (default: 9010)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    args = parser.parse_args()

    server = HTTPServer((args.host, args.port), FakeUntappdHandler)
    print(f"Fake Untappd API running at http://{args.host}:{args.port}")
    print("Known beers:")
    for beer in FAKE_BEERS:
        print(f"  {beer['beer_name']} ({beer['brewery_name']})")
    print()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    main()
