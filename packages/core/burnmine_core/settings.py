"""Application settings using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Language-intelligence settings loaded from BURN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BURN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Compiler
    compiler_path: str = Field(
        default="burn",
        description="Path to the burn compiler binary (bare names are looked up on PATH)",
    )
    compiler_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Maximum time to wait for one compiler invocation (seconds)",
    )

    # Diagnostics
    max_number_of_problems: int = Field(
        default=100,
        ge=0,
        description="Maximum number of diagnostics published per document",
    )
    diagnostics_cache_size: int = Field(
        default=256,
        ge=1,
        description="Maximum number of documents kept in the diagnostics cache",
    )

    # Source layout
    source_extension: str = Field(
        default=".bn",
        description="File extension of burn sources, appended to extension-less imports",
    )
    stdlib_prefix: str = Field(
        default="std/",
        description="Import prefix that resolves against the standard library root",
    )
    stdlib_dir: str = Field(
        default="src/lib",
        description="Standard library root, relative to the workspace root",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level applied by configure_logging()",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance. For testing only."""
    global _settings
    _settings = None
