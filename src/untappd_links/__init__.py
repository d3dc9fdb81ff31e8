"""
untappd-links: Untappd link resolution for the beer rating game.

Attaches a canonical Untappd link to every beer in a game, using the Untappd
search API when credentials are available and a search-page link otherwise.
"""

__version__ = "0.1.0"
