"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "kobi-gateway"
    log_level: str = "INFO"

    # Shared cache / counter backend (unset = in-process only)
    redis_url: str | None = None
    score_cache_ttl_seconds: int = 3600
    analytics_ttl_seconds: int = 86400
    cache_sweep_interval_seconds: float = 60.0

    # Rate limiting
    rate_limit_requests: int = 10
    rate_limit_window_seconds: int = 60

    # Advisory service (Gemini-compatible generateContent API)
    advisory_base_url: str = "https://generativelanguage.googleapis.com"
    advisory_model: str = "gemini-1.5-flash"
    advisory_api_key: str | None = None
    advisory_timeout_seconds: float = 8.0
    enrichment_concurrency: int = 4

    # Reference data (defaults to the bundled kobi_gateway/data directory)
    data_dir: str | None = None


settings = Settings()
