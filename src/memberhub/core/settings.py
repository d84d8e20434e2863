"""Application settings and configuration.

This module defines all configuration options for the Member Hub application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Member Hub", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./memberhub.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Networking
    potential_connections_limit: int = Field(default=10, alias="POTENTIAL_CONNECTIONS_LIMIT")
    follow_up_horizon_days: int = Field(default=7, alias="FOLLOW_UP_HORIZON_DAYS")
    recent_communications_limit: int = Field(default=10, alias="RECENT_COMMUNICATIONS_LIMIT")
    network_page_size: int = Field(default=20, alias="NETWORK_PAGE_SIZE")

    # Forum
    topic_title_min_length: int = Field(default=3, alias="TOPIC_TITLE_MIN_LENGTH")
    topic_content_min_length: int = Field(default=10, alias="TOPIC_CONTENT_MIN_LENGTH")
    topic_max_tags: int = Field(default=5, alias="TOPIC_MAX_TAGS")
    reply_max_length: int = Field(default=5000, alias="REPLY_MAX_LENGTH")
    trending_tags_limit: int = Field(default=10, alias="TRENDING_TAGS_LIMIT")
    filter_tags_limit: int = Field(default=15, alias="FILTER_TAGS_LIMIT")
    form_tags_limit: int = Field(default=20, alias="FORM_TAGS_LIMIT")
    forum_page_size: int = Field(default=10, alias="FORUM_PAGE_SIZE")

    # Resources
    comment_max_length: int = Field(default=1000, alias="COMMENT_MAX_LENGTH")
    comment_reply_max_length: int = Field(default=500, alias="COMMENT_REPLY_MAX_LENGTH")
    comments_page_size: int = Field(default=10, alias="COMMENTS_PAGE_SIZE")
    resources_page_size: int = Field(default=12, alias="RESOURCES_PAGE_SIZE")
    new_resource_days: int = Field(default=7, alias="NEW_RESOURCE_DAYS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for Alembic."""
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()  # type: ignore[call-arg]
