"""Centralized configuration — all env vars in one place."""

import os

API_KEY_PLACEHOLDER = "your_youtube_api_key_here"
DEFAULT_HASHTAGS = "#gtarp,#gta,#roleplay,#rp"


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer env var, failing at startup on malformed or out-of-range values."""
    raw = os.getenv(name, "").strip() or str(default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


class Settings:
    """Application settings loaded from environment variables.

    Raises ValueError for malformed or negative numeric settings.
    """

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = _int_env("PORT", 3000, minimum=1)

        # YouTube Data API
        self.youtube_api_key: str | None = os.getenv("YOUTUBE_API_KEY")
        self.youtube_api_base: str = os.getenv(
            "YOUTUBE_API_BASE", "https://www.googleapis.com/youtube/v3"
        )
        self.youtube_max_results: int = _int_env("YOUTUBE_MAX_RESULTS", 50, minimum=1)
        self.request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
        # Empty HASHTAGS means "not configured", same as unset
        self.hashtags: str = os.getenv("HASHTAGS") or DEFAULT_HASHTAGS

        # Cache and rate limiting (milliseconds)
        self.cache_duration_ms: int = _int_env("CACHE_DURATION", 30000)
        self.cache_sweep_interval_ms: int = _int_env("CACHE_SWEEP_INTERVAL", 300000, minimum=1)
        self.term_delay_ms: int = _int_env("TERM_DELAY_MS", 100)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_api_key(self) -> bool:
        return bool(self.youtube_api_key) and self.youtube_api_key != API_KEY_PLACEHOLDER

    def validate(self) -> list[str]:
        """Return list of missing required env vars."""
        missing = []
        if not self.has_api_key:
            missing.append("YOUTUBE_API_KEY")
        return missing


settings = Settings()
