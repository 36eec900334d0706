"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Places / Geocoding provider
    google_maps_api_key: str | None = None
    places_base_url: str = "https://maps.googleapis.com/maps/api"
    upstream_timeout_seconds: float = 10.0

    # Generation provider (OpenAI-compatible chat completions)
    llm_api_key: str | None = None
    llm_endpoint: str = "https://api.openai.com/v1/chat/completions"
    llm_model: str = "gpt-4.1-mini"
    llm_timeout_seconds: float = 10.0

    # Pipeline tuning
    details_limit: int = 20
    details_concurrency: int = 5
    cache_ttl_seconds: int = 86_400  # 24h
    default_country_bias: str = "AR"

    # Service
    service_name: str = "site-viability"
    log_level: str = "INFO"


settings = Settings()
