"""Application settings using Pydantic Settings for configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gmailrouter.domain.models import RoutingAction


def _default_config_dir() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "gmail_router"


class Settings(BaseSettings):
    """Process settings loaded from environment variables (GMAIL_ROUTER_*)."""

    model_config = SettingsConfigDict(
        env_prefix="GMAIL_ROUTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Gmail Router"
    log_level: str = "INFO"

    # Config files
    config_dir: Path = Field(default_factory=_default_config_dir)
    credentials_file: str = "credentials.yaml"
    routing_file: str = "routing.yaml"
    token_file: str = "token_cache.json"

    # OAuth installed-app flow
    oauth_port: int = 14500

    # Routing
    action: RoutingAction = RoutingAction.DELETE
    advance_watermark: bool = True
    progress_every: int = Field(default=50, ge=1)

    @computed_field
    @property
    def credentials_path(self) -> Path:
        return self.config_dir / self.credentials_file

    @computed_field
    @property
    def routing_path(self) -> Path:
        return self.config_dir / self.routing_file

    @computed_field
    @property
    def token_path(self) -> Path:
        return self.config_dir / self.token_file

    def ensure_config_dir(self) -> Path:
        """Create the config directory if it does not exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        return self.config_dir


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
