"""
Configuration management.
Simple .env based config, one store per deployment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Shopify
    shop_domain: str = ""  # e.g. "mystore.myshopify.com"
    access_token: str = ""  # Admin API token (shpat_...)
    api_version: str = "2025-01"

    # Security
    session_secret: str = "change-me-in-production-use-random-string"
    admin_password_hash: str = ""  # bcrypt hash

    # Bulk updates
    max_concurrent_updates: int = 5
    mutation_timeout_seconds: float = 30.0
    max_retries: int = 5
    catalog_page_size: int = 50

    # Logging
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
