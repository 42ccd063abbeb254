"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system using Pydantic Settings,
providing type-safe configuration with validation and environment variable
support.

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions

The same three layers are exposed to the startup configuration report as
property sources (see ``src.core.environment.build_environment``).
"""

import json
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_names(v: object) -> object:
    """Accept a JSON list or a comma separated string of names."""
    if isinstance(v, str):
        if v.lstrip().startswith("["):
            return json.loads(v)
        return [part.strip() for part in v.split(",") if part.strip()]
    return v


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )


class ReportConfig(BaseModel):
    """Startup configuration report settings."""

    enabled: bool = Field(
        default=True,
        description="Log the effective configuration once startup completes",
    )
    suppressed_profiles: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["test"],
        description="Profiles (or environments) under which the report is skipped",
    )
    dotenv_path: str = Field(
        default=".env",
        description="Dotenv file exposed as a property source when it exists",
    )
    include_system_environment: bool = Field(
        default=True,
        description="Expose OS environment variables as a property source",
    )

    @field_validator("suppressed_profiles", mode="before")
    @classmethod
    def split_profiles(cls, v: object) -> object:
        """Accept a comma separated list of profile names."""
        _ = cls
        return _split_names(v)


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="Config Reporter", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=True, description="Debug mode flag")
    active_profiles: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Named configuration profiles active in this run",
    )

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")
    docs_url: str | None = Field(default="/docs", description="Swagger UI URL")
    redoc_url: str | None = Field(default="/redoc", description="ReDoc URL")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema URL"
    )

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # Startup report configuration
    report_config: ReportConfig = Field(
        default_factory=ReportConfig, description="Configuration report settings"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment == "development" else "json"
            )

    @field_validator("active_profiles", mode="before")
    @classmethod
    def split_profiles(cls, v: object) -> object:
        """Accept a comma separated list of profile names."""
        _ = cls
        return _split_names(v)

    @field_validator("docs_url", "redoc_url", "openapi_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
