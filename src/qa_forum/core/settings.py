"""Application settings and configuration.

This module defines all configuration options for the Q&A forum service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="QA Forum", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./qa_forum.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis pub/sub used for real-time notification hints
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    realtime_enabled: bool = Field(default=False, alias="REALTIME_ENABLED")
    realtime_channel_prefix: str = Field(
        default="notifications",
        alias="REALTIME_CHANNEL_PREFIX",
    )

    # JWT session settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Reputation awarded at creation time
    reputation_question_points: int = Field(default=50, alias="REPUTATION_QUESTION_POINTS")
    reputation_answer_points: int = Field(default=100, alias="REPUTATION_ANSWER_POINTS")

    # Content limits
    question_title_min_length: int = Field(default=10, alias="QUESTION_TITLE_MIN_LENGTH")
    question_title_max_length: int = Field(default=200, alias="QUESTION_TITLE_MAX_LENGTH")
    question_content_min_length: int = Field(default=20, alias="QUESTION_CONTENT_MIN_LENGTH")
    short_description_max_length: int = Field(default=200, alias="SHORT_DESCRIPTION_MAX_LENGTH")
    answer_content_min_length: int = Field(default=10, alias="ANSWER_CONTENT_MIN_LENGTH")

    notification_page_size: int = Field(default=20, alias="NOTIFICATION_PAGE_SIZE")

    # Cloudinary blob storage for images
    cloudinary_cloud_name: str | None = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(default=None, alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field(default="qa-forum", alias="CLOUDINARY_FOLDER")
    cloudinary_upload_prefix: str = Field(
        default="https://api.cloudinary.com",
        alias="CLOUDINARY_UPLOAD_PREFIX",
    )
    upload_max_bytes: int = Field(default=2 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")
    asset_timeout_seconds: float = Field(
        default=10.0,
        alias="ASSET_TIMEOUT_SECONDS",
    )

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

    @property
    def cloudinary_configured(self) -> bool:
        """Return True when every Cloudinary credential is present."""
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )


settings = Settings()  # type: ignore[call-arg]
