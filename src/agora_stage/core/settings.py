"""Application settings and configuration.

This module defines all configuration options for the Agora Stage application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Agora Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./agora.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Outbound email (best-effort notification delivery)
    email_enabled: bool = Field(default=False, alias="EMAIL_ENABLED")
    email_api_url: str | None = Field(default=None, alias="EMAIL_API_URL")
    email_api_key: str | None = Field(default=None, alias="EMAIL_API_KEY")
    email_from: str = Field(default="notifications@agora.local", alias="EMAIL_FROM")
    email_timeout_seconds: float = Field(default=10.0, alias="EMAIL_TIMEOUT_SECONDS")
    notification_email_subject: str = Field(
        default="New Notification - Agora Community",
        alias="NOTIFICATION_EMAIL_SUBJECT",
    )

    # Notification inbox
    notification_list_limit: int = Field(default=50, alias="NOTIFICATION_LIST_LIMIT")

    # Autosaved post drafts
    post_draft_ttl_days: int = Field(default=7, alias="POST_DRAFT_TTL_DAYS")

    # Background fan-out worker
    fanout_queue_size: int = Field(default=1000, alias="FANOUT_QUEUE_SIZE")
    fanout_drain_timeout_seconds: float = Field(
        default=10.0,
        alias="FANOUT_DRAIN_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
