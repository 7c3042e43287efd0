"""
Shared configuration management for the Access Layer authorization service.
"""

from pathlib import Path
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DATA_DIR = Path(__file__).resolve().parent.parent / "service_authz" / "data"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Server
    service_name: str = Field(default="authz")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8011)


class AuthzConfig(BaseConfig):
    """Authorization service configuration."""

    # Static data sources
    groups_file: Path = Field(default=DATA_DIR / "groups.yaml")
    accounts_file: Path = Field(default=DATA_DIR / "accounts.yaml")

    # Rule configuration
    elevated_roles: List[str] = Field(default_factory=lambda: ["agent"])
    delegated_roles: List[str] = Field(default_factory=lambda: ["introducer"])
    permissions: Dict[str, List[str]] = Field(
        default_factory=lambda: {"account": ["view"]},
        description="Recognized actions per resource kind"
    )


def get_config(**overrides) -> AuthzConfig:
    """Get configuration for the authorization service."""
    return AuthzConfig(**overrides)
