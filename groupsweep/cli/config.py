"""CLI configuration.

Values come from defaults, then a YAML config file, then environment variables.
Command-line options are applied on top by the CLI.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from groupsweep.models.cleanup_settings import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    CleanupSettings,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".groupsweep" / "config.yaml"

# env var -> (attribute, converter)
ENV_VARS = {
    "GROUPSWEEP_RESOURCE_GROUP": ("resource_group", str),
    "GROUPSWEEP_REGION": ("region", str),
    "AWS_PROFILE": ("aws_profile", str),
    "GROUPSWEEP_LOG_LEVEL": ("log_level", str),
    "GROUPSWEEP_MAX_RETRIES": ("max_retries", int),
    "GROUPSWEEP_INITIAL_DELAY_MS": ("initial_delay_ms", int),
    "GROUPSWEEP_BATCH_SIZE": ("batch_size", int),
    "GROUPSWEEP_STORAGE_PATH": ("storage_path", str),
}


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        resource_group: Resource group to clean up
        region: AWS region
        aws_profile: AWS profile name
        log_level: Default log level
        max_retries: Delete attempts per resource when rate limited
        initial_delay_ms: First backoff delay in milliseconds
        batch_size: Concurrent deletes per batch
        storage_path: Base directory for audit logs
    """

    resource_group: Optional[str] = None
    region: Optional[str] = None
    aws_profile: Optional[str] = None
    log_level: str = "INFO"
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    batch_size: int = DEFAULT_BATCH_SIZE
    storage_path: Optional[str] = None

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Config:
        """Load configuration from file and environment.

        Args:
            config_path: YAML file to read (default: $GROUPSWEEP_CONFIG or ~/.groupsweep/config.yaml)

        Returns:
            Config instance

        Raises:
            ValueError: If the file is not a YAML mapping or a value has the wrong type
        """
        config = cls()

        path = Path(config_path or os.environ.get("GROUPSWEEP_CONFIG") or DEFAULT_CONFIG_PATH)
        if path.exists():
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            config._apply(data, source=str(path))

        for env_var, (attribute, convert) in ENV_VARS.items():
            value = os.environ.get(env_var)
            if value:
                try:
                    setattr(config, attribute, convert(value))
                except ValueError:
                    raise ValueError(f"Invalid value for {env_var}: {value!r}")

        return config

    def _apply(self, data: dict, source: str) -> None:
        for key, value in data.items():
            attribute = key.replace("-", "_")
            if not hasattr(self, attribute):
                logger.warning(f"Ignoring unknown config key '{key}' in {source}")
                continue
            setattr(self, attribute, value)

    def settings(self) -> CleanupSettings:
        """Build the retry/batch settings shared by both cleanup phases."""
        return CleanupSettings(
            max_retries=int(self.max_retries),
            initial_delay_ms=int(self.initial_delay_ms),
            batch_size=int(self.batch_size),
        )

    @property
    def audit_path(self) -> Optional[str]:
        if self.storage_path is None:
            return None
        return str(Path(self.storage_path) / "audit-logs")
