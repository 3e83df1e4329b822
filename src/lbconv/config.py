"""Settings management for lbconv.

Settings live in ``settings.yaml`` inside a config directory. The file is
optional; anything it does not set keeps its default.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from lbconv.errors import ConfigSourceError

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_TAGS = {
    "config-edit": "fortinet-fortiadc",
    "brace": "f5-bigip",
}


@dataclass
class Settings:
    """User-tunable parser settings."""

    default_dialect: str = "auto"  # auto, config-edit, brace
    log_level: str = "WARNING"
    vendor_tags: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_VENDOR_TAGS))

    def vendor_for(self, dialect: str) -> str:
        return self.vendor_tags.get(dialect, dialect)


class SettingsManager:
    """Loads Settings from a YAML file in the config directory."""

    def __init__(self, config_dir: Path | None = None) -> None:
        if config_dir is None:
            # Check for environment variable override
            env_config = os.getenv("LBCONV_CONFIG")
            if env_config:
                config_dir = Path(env_config).expanduser().resolve()
            else:
                # Default to ~/.lbconv
                config_dir = Path.home() / ".lbconv"

        self.config_dir = config_dir
        self.settings_file = config_dir / "settings.yaml"

    def _load_raw(self) -> dict[str, Any]:
        """Load the settings mapping from the YAML file."""
        if not self.settings_file.exists():
            return {}

        try:
            with open(self.settings_file, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigSourceError(f"Cannot read settings file {self.settings_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigSourceError(f"Settings file {self.settings_file} must contain a mapping")
        return data

    def load(self) -> Settings:
        """Get Settings, falling back to defaults for unset keys."""
        data = self._load_raw()
        settings = Settings()
        if "default_dialect" in data:
            settings.default_dialect = str(data["default_dialect"])
        if "log_level" in data:
            settings.log_level = str(data["log_level"]).upper()
        tags = data.get("vendor_tags")
        if isinstance(tags, dict):
            settings.vendor_tags.update({str(k): str(v) for k, v in tags.items()})
        elif tags is not None:
            logger.warning("Ignoring vendor_tags in %s: not a mapping", self.settings_file)
        return settings
