"""Service settings for the RevOps maturity assessment backend.

All configuration is read from the environment using the REVOPS_ prefix
(e.g. ``REVOPS_DATABASE_URL``, ``REVOPS_CLAUDE_API_KEY``). A local ``.env``
file is honoured for development.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for revops-maturity.

    Environment variable prefix: REVOPS_
    """

    service_name: str = "revops-maturity"
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Storage: any SQLAlchemy async URL (sqlite+aiosqlite, postgresql+asyncpg)
    database_url: str = "sqlite+aiosqlite:///./data/revops.db"
    database_echo: bool = False

    # AI enrichment. Empty key disables the feature.
    claude_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"
    claude_max_tokens: int = 2000

    # Admin authentication
    jwt_secret: str = "default-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    admin_password: str = "admin"

    # Fixed-window rate limit applied to every /api route
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100

    # Benchmarks are suppressed below this many stored assessments
    benchmark_min_responses: int = 10

    # Admin listing pagination
    admin_page_default_limit: int = 20
    admin_page_max_limit: int = 100

    # Front-end assets and share page
    static_dir: str | None = None
    results_template: str = "results.html"

    model_config = SettingsConfigDict(
        env_prefix="REVOPS_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance.

    Returns:
        Cached Settings loaded from the environment.
    """
    return Settings()
