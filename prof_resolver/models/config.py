"""
Configuration Models

Pydantic models for resolver configuration validation.
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator


DEFAULT_CONFIG_PATH = Path("config/resolver_params.json")

# Environment variables that override the file (loaded from .env if present)
ENV_OVERRIDES = {
    "RMP_GRAPHQL_URL": "graphql_url",
    "RMP_AUTH_TOKEN": "auth_token",
}


class ConfigurationError(Exception):
    """Raised when the resolver configuration file fails validation."""

    pass


class DirectoryConfig(BaseModel):
    """Directory endpoint and transport settings."""

    graphql_url: str = Field(default="https://www.ratemyprofessors.com/graphql")
    # Public token the directory's own web client sends; not a user credential
    auth_token: str = Field(default="dGVzdDp0ZXN0")
    request_timeout: float = Field(default=10.0, gt=0)
    max_requests_per_second: float = Field(default=5.0, gt=0)

    @field_validator("graphql_url")
    @classmethod
    def validate_graphql_url(cls, v: str) -> str:
        """Validate the endpoint is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("graphql_url must start with http:// or https://")
        return v


class SearchLimits(BaseModel):
    """Result-size limits for the search waterfall."""

    max_results: int = Field(default=5, gt=0, le=5)
    scoped_top_n: int = Field(default=3, gt=0, le=5)


class ContextConfig(BaseModel):
    """Bounds for nearby-text context extraction."""

    max_depth: int = Field(default=8, gt=0, le=32)
    max_department_label_length: int = Field(default=40, gt=0)


class CacheConfig(BaseModel):
    """School cache settings.

    max_entries=1 keeps the single-slot behaviour: a new binding evicts
    whatever was cached for any other domain.
    """

    max_entries: int = Field(default=1, gt=0)
    ttl_seconds: Optional[float] = Field(default=None, gt=0)


class ResolverParams(BaseModel):
    """Top-level resolver configuration model."""

    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    search_limits: SearchLimits = Field(default_factory=SearchLimits)
    context: ContextConfig = Field(default_factory=ContextConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    resolution_timeout: float = Field(default=20.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "ResolverParams":
        """Load resolver parameters from config file and environment.

        Args:
            config_path: Path to resolver_params.json (defaults to config/resolver_params.json)

        Returns:
            ResolverParams: Validated configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If config validation fails
        """
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}. "
                f"Copy {config_path.stem}.example.json to {config_path.name}"
            )

        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        load_dotenv()
        directory_data = config_data.setdefault("directory", {})
        for env_name, field_name in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                directory_data[field_name] = value

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config {config_path}: {e}") from e
