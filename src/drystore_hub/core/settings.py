"""Application settings and configuration.

This module defines all configuration options for the DryStore Hub application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the DryStore Hub application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="DryStore Hub", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./drystore.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis mirror for the change feed
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    change_feed_redis_enabled: bool = Field(default=False, alias="CHANGE_FEED_REDIS_ENABLED")
    change_feed_queue_size: int = Field(default=256, alias="CHANGE_FEED_QUEUE_SIZE")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    password_min_length: int = Field(default=6, alias="PASSWORD_MIN_LENGTH")

    # Object storage
    storage_root: str = Field(default="./storage", alias="STORAGE_ROOT")
    storage_public_base_url: str = Field(
        default="/api/v1/storage/public",
        alias="STORAGE_PUBLIC_BASE_URL",
    )
    signed_url_expire_seconds: int = Field(default=3600, alias="SIGNED_URL_EXPIRE_SECONDS")

    # Email delivery for invitations
    email_provider: str = Field(default="disabled", alias="EMAIL_PROVIDER")
    email_from: str | None = Field(default=None, alias="EMAIL_FROM")
    email_api_key: str | None = Field(default=None, alias="EMAIL_API_KEY")
    email_http_timeout_seconds: float = Field(default=15.0, alias="EMAIL_HTTP_TIMEOUT_SECONDS")
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")

    # Invitations
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")
    invitation_expiry_days: int = Field(default=7, alias="INVITATION_EXPIRY_DAYS")

    # Notification badges count activity newer than this window
    notification_lookback_hours: int = Field(default=24, alias="NOTIFICATION_LOOKBACK_HOURS")
    mentions_page_size: int = Field(default=50, alias="MENTIONS_PAGE_SIZE")
    mention_suggestion_limit: int = Field(default=10, alias="MENTION_SUGGESTION_LIMIT")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
