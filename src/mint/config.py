"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables (no prefix)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 4000
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Store (Supabase) ---
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    store_timeout_seconds: float = 10.0
    schema_check_on_startup: bool = True

    # --- Rate limiting (disabled when redis_url is empty) ---
    redis_url: str = ""
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60

    # --- Simulation ---
    portfolio_sim_url: str = ""
    sim_admin_token: str = ""
    default_sim_type: str = "portfolio_sim"
    default_scenario_id: str = "portfolio_basics"
    default_duration_minutes: int = 45


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
