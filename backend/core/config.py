"""
FRAQTIV Intake Configuration
Central configuration management using Pydantic Settings
"""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ===== Application =====
    app_name: str = "FRAQTIV"
    app_version: str = "1.0.0"
    environment: str = "development"
    # SECURITY: Debug mode disabled by default - enable explicitly in .env for development
    debug: bool = False
    site_url: str = "https://fraqtiv.com"

    # ===== CORS Configuration =====
    # Only origin allowed in production; every origin is allowed otherwise
    production_origin: str = "https://fraqtiv.com"

    # ===== Notification Services =====
    sendgrid_api_key: Optional[str] = None
    notification_send_timeout: float = 10.0  # seconds per outbound email

    # ===== Email =====
    from_email: str = "jway@fraqtiv.com"
    from_name: str = "FRAQTIV Team"
    admin_email: str = "jway@fraqtiv.com"
    contact_phone: str = "(941) 735-7027"

    # ===== Intake Validation =====
    max_field_length: int = 1000

    # ===== Redis =====
    redis_url: str = "redis://localhost:6379/0"

    # ===== Sentry Error Tracking =====
    sentry_dsn: Optional[str] = None
    sentry_environment: Optional[str] = None  # Falls back to environment if not set
    sentry_traces_sample_rate: float = 0.1

    # ===== Rate Limiting =====
    rate_limit_enabled: bool = True  # Set to False to disable rate limiting
    # "memory" bounds a single process; "redis" is shared across instances
    rate_limit_backend: str = "memory"

    # Intake submissions - 3 per minute per client
    rate_limit_intake_requests: int = 3
    rate_limit_intake_window: int = 60

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
