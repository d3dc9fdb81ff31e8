"""
Configuration for Untappd link resolution.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

DEFAULT_API_BASE = "https://api.untappd.com/v4"


@dataclass(frozen=True)
class ResolutionSettings:
    """Tunable limits for resolution and link maintenance."""

    match_threshold: float = 0.9
    resolve_limit: int = 25  # Only the first N beers of a list hit the API
    resolve_concurrency: int = 4
    resolve_timeout_seconds: float = 3.5
    max_api_age_hours: float = 24.0
    search_result_limit: int = 10
    api_base: str = DEFAULT_API_BASE

    @property
    def max_api_age(self) -> timedelta:
        return timedelta(hours=self.max_api_age_hours)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolutionSettings":
        defaults = cls()
        return cls(
            match_threshold=float(data.get("match_threshold", defaults.match_threshold)),
            resolve_limit=int(data.get("resolve_limit", defaults.resolve_limit)),
            resolve_concurrency=int(
                data.get("resolve_concurrency", defaults.resolve_concurrency)
            ),
            resolve_timeout_seconds=float(
                data.get("resolve_timeout_seconds", defaults.resolve_timeout_seconds)
            ),
            max_api_age_hours=float(data.get("max_api_age_hours", defaults.max_api_age_hours)),
            search_result_limit=int(
                data.get("search_result_limit", defaults.search_result_limit)
            ),
            api_base=data.get("api_base", defaults.api_base),
        )


@dataclass(frozen=True)
class UntappdCredentials:
    """Untappd API client credentials."""

    client_id: str
    client_secret: str

    @property
    def usable(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret.strip())


@dataclass
class UntappdConfig:
    """Untappd API access configuration."""

    client_id: str | None = None
    client_secret: str | None = None
    client_id_env: str | None = "UNTAPPD_CLIENT_ID"
    client_secret_env: str | None = "UNTAPPD_CLIENT_SECRET"

    def get_credentials(self) -> UntappdCredentials | None:
        """Get credentials from config or environment. None when incomplete."""
        client_id = (self.client_id or "").strip()
        if not client_id and self.client_id_env:
            client_id = os.environ.get(self.client_id_env, "").strip()
        client_secret = (self.client_secret or "").strip()
        if not client_secret and self.client_secret_env:
            client_secret = os.environ.get(self.client_secret_env, "").strip()

        credentials = UntappdCredentials(client_id=client_id, client_secret=client_secret)
        return credentials if credentials.usable else None


@dataclass
class AppConfig:
    """Complete configuration."""

    db_path: Path = field(default_factory=lambda: Path("beer_game.db"))
    untappd: UntappdConfig = field(default_factory=UntappdConfig)
    resolution: ResolutionSettings = field(default_factory=ResolutionSettings)

    @property
    def credentials(self) -> UntappdCredentials | None:
        return self.untappd.get_credentials()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AppConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "db_path" in data:
            config.db_path = Path(data["db_path"])

        if "untappd" in data:
            untappd = data["untappd"] or {}
            config.untappd = UntappdConfig(
                client_id=untappd.get("client_id"),
                client_secret=untappd.get("client_secret"),
                client_id_env=untappd.get("client_id_env", "UNTAPPD_CLIENT_ID"),
                client_secret_env=untappd.get("client_secret_env", "UNTAPPD_CLIENT_SECRET"),
            )

        if "resolution" in data:
            config.resolution = ResolutionSettings.from_dict(data["resolution"] or {})

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load config from a YAML file. A missing file gives the defaults."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary. Secrets are left out."""
        return {
            "db_path": str(self.db_path),
            "untappd": {
                "client_id_env": self.untappd.client_id_env,
                "client_secret_env": self.untappd.client_secret_env,
                "credentials_configured": self.credentials is not None,
            },
            "resolution": {
                "match_threshold": self.resolution.match_threshold,
                "resolve_limit": self.resolution.resolve_limit,
                "resolve_concurrency": self.resolution.resolve_concurrency,
                "resolve_timeout_seconds": self.resolution.resolve_timeout_seconds,
                "max_api_age_hours": self.resolution.max_api_age_hours,
                "search_result_limit": self.resolution.search_result_limit,
                "api_base": self.resolution.api_base,
            },
        }
