"""YAML config records: credentials.yaml (read-only) and routing.yaml."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gmailrouter.domain.errors import ConfigError


class CredentialsConfig(BaseModel):
    """Contents of credentials.yaml. Loaded once at startup."""

    model_config = ConfigDict(frozen=True)

    google_credentials_path: str
    domain: str = Field(min_length=1)
    check_interval_seconds: int = Field(ge=1)
    start_date: datetime

    @field_validator("domain", mode="before")
    @classmethod
    def _strip_domain(cls, value: Any) -> Any:
        # Runs before min_length, so "@" alone is rejected
        if isinstance(value, str):
            return value.strip().lstrip("@")
        return value

    @field_validator("start_date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def read_yaml(path: str | Path, what: str) -> dict[str, Any]:
    """Read a YAML mapping, wrapping I/O and parse failures in ConfigError."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read {what} config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {what} config YAML {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{what.capitalize()} config {path} must be a YAML mapping")
    return data


def validate_model(model: type[BaseModel], data: dict[str, Any], path: str | Path):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def load_credentials(path: str | Path) -> CredentialsConfig:
    """Load and validate credentials.yaml."""
    return validate_model(CredentialsConfig, read_yaml(path, "credentials"), path)
