"""Configuration loading for the IPTV catalog."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shortest accepted HS256 signing secret
MIN_SECRET_LENGTH = 32


class ServiceConfig(BaseModel):
    """Service-level configuration."""

    name: str = "IPTV Catalog"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


class DatabaseConfig(BaseModel):
    """Database location. Defaults to the user data directory."""

    path: str | None = None


class AuthConfig(BaseModel):
    """Non-secret token settings."""

    issuer: str = "IPTVPlayer"
    audience: str = "IPTVPlayerClients"
    expiration_minutes: int = Field(default=1440, gt=0)


class RecommendationConfig(BaseModel):
    """Defaults for list sizes when a caller does not give one."""

    default_count: int = Field(default=10, gt=0)
    history_limit: int = Field(default=50, gt=0)


class AppConfig(BaseModel):
    """Main configuration model."""

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)


class SecretsConfig(BaseModel):
    """Secrets configuration model."""

    jwt: dict[str, str] = Field(default_factory=dict)


class AuthSettings(BaseModel):
    """Token signing settings, validated once at startup.

    Attributes:
        secret_key: HS256 signing secret, at least 32 characters
        issuer: `iss` claim written to and required of tokens
        audience: `aud` claim written to and required of tokens
        expiration_minutes: Token lifetime
    """

    model_config = ConfigDict(frozen=True)

    secret_key: str = Field(repr=False)
    issuer: str
    audience: str
    expiration_minutes: int = Field(gt=0)

    @field_validator("secret_key")
    @classmethod
    def _secret_length(cls, value: str) -> str:
        if len(value) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT secret key must be at least {MIN_SECRET_LENGTH} characters"
            )
        return value


def find_config_dir() -> Path:
    """Find the config directory.

    Looks for config directory in the following order:
    1. ./config (relative to cwd)
    2. ../config (parent of cwd)
    3. ~/.config/iptv
    """
    cwd = Path.cwd()

    if (cwd / "config").is_dir():
        return cwd / "config"

    if (cwd.parent / "config").is_dir():
        return cwd.parent / "config"

    home_config = Path.home() / ".config" / "iptv"
    if home_config.is_dir():
        return home_config

    return cwd / "config"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Load the main configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    config_path = config_dir / "config.yaml"
    data = load_yaml(config_path)
    return AppConfig.model_validate(data)


def load_secrets(config_dir: Path | None = None) -> SecretsConfig:
    """Load the secrets configuration."""
    if config_dir is None:
        config_dir = find_config_dir()

    secrets_path = config_dir / "secrets.yaml"
    data = load_yaml(secrets_path)
    return SecretsConfig.model_validate(data)


def build_auth_settings(config: AppConfig, secrets: SecretsConfig) -> AuthSettings:
    """Combine token settings and the signing secret.

    Raises:
        pydantic.ValidationError: If the secret is missing or too short
    """
    return AuthSettings(
        secret_key=secrets.jwt.get("secret_key", ""),
        issuer=config.auth.issuer,
        audience=config.auth.audience,
        expiration_minutes=config.auth.expiration_minutes,
    )
