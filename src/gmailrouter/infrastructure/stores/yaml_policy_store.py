"""routing.yaml-backed policy store."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import yaml
from loguru import logger

from gmailrouter.application.ports.policy_store import PolicyStore
from gmailrouter.domain.errors import ConfigError, PolicyNotFoundError
from gmailrouter.domain.models import RoutingRecord
from gmailrouter.domain.routing_policy import RoutingPolicy
from gmailrouter.infrastructure.config import read_yaml, validate_model


class YamlPolicyStore(PolicyStore):
    """Load and save the routing policy as YAML."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> RoutingPolicy:
        """Load routing.yaml.

        Raises:
            PolicyNotFoundError: the file does not exist yet
            ConfigError: the file is unreadable or invalid
        """
        if not self.exists():
            raise PolicyNotFoundError(f"Routing config not found at {self.path}")

        record = validate_model(RoutingRecord, read_yaml(self.path, "routing"), self.path)
        policy = RoutingPolicy.from_record(record)
        logger.debug(f"Loaded {policy!r} from {self.path}")
        return policy

    def save(self, policy: RoutingPolicy) -> None:
        """Overwrite routing.yaml atomically."""
        data = policy.to_record().model_dump(mode="json")
        text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp, self.path)
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as e:
            raise ConfigError(f"Failed to write routing config file {self.path}: {e}") from e

        logger.debug(f"Saved routing config to {self.path}: {len(policy)} addresses")
