"""Configuration management for HelixIntel."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="helixintel.db", description="Path to the SQLite database file")
    sqlite_busy_timeout_seconds: float = Field(
        default=5.0, description="How long a writer waits for a competing transaction before failing"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: str = Field(default="development", description="Deployment environment name")

    # Completion Policy
    require_completion_photo: bool = Field(
        default=False,
        description="Fallback photo policy when a completion request does not state one",
    )

    # Cache Configuration
    template_cache_ttl_seconds: int = Field(default=600, description="TTL for cached template reads")
    schedule_cache_ttl_seconds: int = Field(default=300, description="TTL for cached schedule listings")
    cache_cleanup_interval_seconds: int = Field(
        default=300, description="Interval between purges of expired cache entries"
    )

    @property
    def is_production(self) -> bool:
        """Whether the app runs in the production environment."""
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_CREATED: int = 201
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_UNPROCESSABLE_ENTITY: int = 422
    HTTP_SERVER_ERROR: int = 500

    # Custom Frequency Bounds
    MIN_CUSTOM_FREQUENCY_DAYS: int = 1
    MAX_CUSTOM_FREQUENCY_DAYS: int = 365

    # Optimistic Locking
    SCHEDULE_UPDATE_MAX_ATTEMPTS: int = 3

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 20
    MAX_PER_PAGE_LIMIT: int = 100

    # Batch Apply
    MAX_BATCH_TEMPLATES: int = 50

    # Field Limits (mirrors the web form validation)
    MAX_TITLE_LENGTH: int = 200
    MAX_DESCRIPTION_LENGTH: int = 2000
    MAX_COMPLETION_NOTES_LENGTH: int = 2000
    MAX_COST_NOTES_LENGTH: int = 500

    # Cache Keys
    SCHEDULE_CACHE_PREFIX: str = "schedules"
    TEMPLATE_CACHE_PREFIX: str = "template"
    TEMPLATE_LIST_CACHE_PREFIX: str = "templates"


def get_settings() -> Settings:
    """Build application settings from the environment."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
