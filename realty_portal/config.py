"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, logging and environment variables.
"""

from pydantic import validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file."""

    # Application configuration
    app_name: str = "Realty Portal API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/realty_portal"

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Logging
    log_level: str = "INFO"
    audit_log_file: Optional[str] = None

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @validator("database_url", pre=True)
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @validator("jwt_secret_key", pre=True)
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @validator("environment")
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @validator("log_level")
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {allowed_levels}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
