# 📄 File: sproutsync/shared/config/settings.py
#
# 🧭 Purpose (Layman Explanation):
# The main configuration center that reads all settings from environment variables
# and hands them to the rest of SproutSync in one organized place.
#
# 🧪 Purpose (Technical Summary):
# Pydantic-based settings management with environment variable loading,
# validation, and type safety for every configuration parameter of the backend.
#
# 🔗 Dependencies:
# - pydantic-settings for configuration management
# - python-dotenv for .env file loading
# - typing for type hints
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.main (application startup)
# - Database connection modules
# - External service clients (Google, Firebase, Cloudinary, Gemini)
# - celery_config and background jobs

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety. Settings are loaded
    from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================

    APP_NAME: str = Field(default="SproutSync API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    APP_DESCRIPTION: str = Field(
        default="Plant care tracking, reminders and plant gifting",
        description="Application description"
    )
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    DEBUG: bool = Field(default=True, description="Debug mode flag")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log output format (json or text)")

    # =========================================================================
    # SERVER CONFIGURATION
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=3001, description="Server port")
    RELOAD: bool = Field(default=True, description="Auto-reload on changes")
    FRONTEND_URL: str = Field(default="http://localhost:5173", description="Frontend base URL")
    API_BASE_URL: str = Field(default="http://localhost:3001", description="Public API base URL")

    # CORS Settings
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="CORS allowed origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True, description="CORS allow credentials")

    # =========================================================================
    # DATABASE CONFIGURATION
    # =========================================================================

    DATABASE_URL: Optional[str] = Field(None, description="Async SQLAlchemy database URL")
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="sproutsync", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # Connection Pool Settings
    DB_POOL_SIZE: int = Field(default=10, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database pool overflow")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time")

    # =========================================================================
    # REDIS CONFIGURATION
    # =========================================================================

    REDIS_URL: Optional[str] = Field(None, description="Redis URL")
    REDIS_HOST: str = Field(default="localhost", description="Redis host")
    REDIS_PORT: int = Field(default=6379, description="Redis port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: Optional[str] = Field(None, description="Redis password")
    REDIS_MAX_CONNECTIONS: int = Field(default=20, description="Redis connection pool size")

    # =========================================================================
    # SECURITY SETTINGS
    # =========================================================================

    JWT_SECRET: str = Field(
        default="change-me-in-production",
        description="JWT signing secret"
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRES_DAYS: int = Field(default=7, description="JWT lifetime in days")
    JWT_ISSUER: str = Field(default="sprout-sync", description="JWT issuer claim")
    JWT_AUDIENCE: str = Field(default="sprout-sync-users", description="JWT audience claim")

    # =========================================================================
    # GOOGLE OAUTH & CALENDAR
    # =========================================================================

    GOOGLE_CLIENT_ID: str = Field(default="", description="Google OAuth client ID")
    GOOGLE_CLIENT_SECRET: str = Field(default="", description="Google OAuth client secret")
    GOOGLE_CALLBACK_URL: Optional[str] = Field(
        None,
        description="Sign-in callback URL (defaults to API_BASE_URL/api/auth/google/callback)"
    )
    GOOGLE_CALENDAR_REDIRECT_URI: Optional[str] = Field(
        None,
        description="Calendar consent callback URL (defaults to API_BASE_URL/api/google-calendar/callback)"
    )
    GOOGLE_HTTP_TIMEOUT: float = Field(default=15.0, description="Google API request timeout (seconds)")

    # =========================================================================
    # FIREBASE CLOUD MESSAGING
    # =========================================================================

    FIREBASE_PROJECT_ID: Optional[str] = Field(None, description="Firebase project ID")
    FIREBASE_CLIENT_EMAIL: Optional[str] = Field(None, description="Firebase service account email")
    FIREBASE_PRIVATE_KEY: Optional[str] = Field(None, description="Firebase service account private key")
    FIREBASE_CREDENTIALS_FILE: Optional[str] = Field(None, description="Path to service account JSON")
    NOTIFICATION_ICON: str = Field(default="/pwa-192x192.png", description="Web push icon path")

    # =========================================================================
    # CLOUDINARY
    # =========================================================================

    CLOUDINARY_CLOUD_NAME: str = Field(default="", description="Cloudinary cloud name")
    CLOUDINARY_API_KEY: str = Field(default="", description="Cloudinary API key")
    CLOUDINARY_API_SECRET: str = Field(default="", description="Cloudinary API secret")
    CLOUDINARY_FOLDER: str = Field(default="plant-care", description="Upload folder")
    UPLOAD_MAX_BYTES: int = Field(default=5 * 1024 * 1024, description="Max upload size")

    # =========================================================================
    # GEMINI AI
    # =========================================================================

    GEMINI_API_KEY: Optional[str] = Field(None, description="Google Gemini API key")
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash", description="Gemini model name")
    AI_UPLOAD_MAX_BYTES: int = Field(default=10 * 1024 * 1024, description="Max AI image size")
    PLANT_VALIDATION_MIN_CONFIDENCE: float = Field(
        default=0.8,
        description="Minimum confidence for the plant image guardrail"
    )

    # =========================================================================
    # BACKGROUND JOBS (CELERY)
    # =========================================================================

    CELERY_BROKER_URL: str = Field(default="redis://localhost:6379/1", description="Celery broker")
    CELERY_RESULT_BACKEND: str = Field(default="redis://localhost:6379/2", description="Celery results")
    NOTIFICATION_SEND_DELAY_SECONDS: float = Field(
        default=0.1,
        description="Pause between pushes in one overdue cycle"
    )
    SCHEDULER_LOCK_TIMEOUT_SECONDS: int = Field(
        default=300,
        description="Upper bound on one overdue notification cycle"
    )

    # =========================================================================
    # RATE LIMITING
    # =========================================================================

    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable slowapi rate limiting")
    AI_RATE_LIMIT: str = Field(default="20/minute", description="AI endpoint rate limit")
    UPLOAD_RATE_LIMIT: str = Field(default="30/minute", description="Upload endpoint rate limit")

    # =========================================================================
    # TIMEZONE
    # =========================================================================

    DEFAULT_TIMEZONE: str = Field(default="UTC", description="Fallback IANA timezone")

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Get the database URL, preferring explicit DATABASE_URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def redis_url(self) -> str:
        """Get the Redis URL with optional password."""
        if self.REDIS_URL:
            return self.REDIS_URL
        if self.REDIS_PASSWORD:
            return (
                f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:"
                f"{self.REDIS_PORT}/{self.REDIS_DB}"
            )
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def google_callback_url(self) -> str:
        """Google sign-in redirect URI."""
        return self.GOOGLE_CALLBACK_URL or f"{self.API_BASE_URL}/api/auth/google/callback"

    @property
    def google_calendar_redirect_uri(self) -> str:
        """Google Calendar consent redirect URI."""
        return (
            self.GOOGLE_CALENDAR_REDIRECT_URI
            or f"{self.API_BASE_URL}/api/google-calendar/callback"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def database_pool_size(self) -> int:
        return self.DB_POOL_SIZE

    @property
    def database_max_overflow(self) -> int:
        return self.DB_MAX_OVERFLOW

    @property
    def database_pool_timeout(self) -> int:
        return self.DB_POOL_TIMEOUT

    @property
    def database_pool_recycle(self) -> int:
        return self.DB_POOL_RECYCLE


# ============================================================================
# SETTINGS FACTORY
# ============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Uses lru_cache to ensure settings are loaded only once
    and reused throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
