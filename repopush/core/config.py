"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Submission limits
    # Each upload spends the submitter's GitHub quota. 0 disables the cap.
    max_submissions_per_token: int = Field(
        default=20,
        ge=0,
        description="Upload submissions allowed per GitHub token within the window"
    )
    submission_window_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Sliding window for the per-token submission cap, in seconds"
    )

    # GitHub API
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API"
    )
    github_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every GitHub API call"
    )
    # Reads retry on connection errors, timeouts, 5xx and 429; writes only when
    # the request never left (connect failures) or on 429. 0 disables retrying.
    github_max_retries: int = Field(
        default=2,
        ge=0,
        description="Extra attempts for transient GitHub failures"
    )
    github_retry_base_delay: float = Field(
        default=1.0,
        ge=0,
        description="Base delay in seconds for exponential retry backoff"
    )

    # Upload defaults
    default_branch: str = Field(
        default="main",
        description="Branch used when a submission does not name one"
    )
    max_archive_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Largest accepted archive upload, in bytes"
    )
    max_extracted_bytes: int = Field(
        default=512 * 1024 * 1024,
        gt=0,
        description="Largest total uncompressed size of an archive's files, in bytes"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('github_api_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if CORS still points at local origins.
        In development, returns silently and main.py logs warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if not self.github_api_url.startswith("https://"):
            errors.append(
                f"GITHUB_API_URL is not HTTPS: {self.github_api_url}. "
                "Tokens would be sent in clear text."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
