"""Centralized configuration — all env vars in one place."""

import os

RUN_EVENTS_API_BASE = "https://modesty.runevents.net"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Event served by this deployment
        self.event_slug: str = os.getenv("EVENT_SLUG", "experts-live-netherlands-2026")
        self.event_name: str = os.getenv("EVENT_NAME", "Experts Live Netherlands 2026")
        self.default_time_zone: str = os.getenv("EVENT_TIMEZONE", "Europe/Amsterdam")
        self.languages: list[str] = os.getenv("EVENT_LANGUAGES", "nl,en").split(",")

        # run.events upstream
        self.run_events_api_key: str | None = os.getenv("RUN_EVENTS_API_KEY")
        self.run_events_api_base: str = os.getenv("RUN_EVENTS_API_BASE", RUN_EVENTS_API_BASE)
        self.upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

        self.cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def default_language(self) -> str:
        return self.languages[0] if self.languages else "en"

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream access."""
        required = ["RUN_EVENTS_API_KEY"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "RUN_EVENTS_API_KEY": "run_events_api_key",
    }
    return mapping.get(env_var, env_var.lower())
