"""Configuration management for hookchain."""

import os
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from .hooks.loader import ConfigError

DEFAULT_CONFIG_PATH = "~/.config/hookchain/config.yaml"


class ConfigManager:
    """Manage hookchain configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()

        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error reading config {self.config_path}: {e}") from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(f"Config {self.config_path} must be a mapping")
        return content

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "defaults": {
                "timeout": 30,
                "verbose": False,
            },
            "hooks": [],
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def _resolve_env_var(self, value: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_defaults(self) -> Dict[str, Any]:
        """Get default settings merged over built-in values."""
        defaults = {
            "timeout": 30,
            "verbose": False,
        }
        config = self.data.get("defaults", {})
        return {**defaults, **config} if config else defaults

    def get_hooks_config(self) -> list:
        """Get hooks configuration with ${VAR} references in env maps resolved."""
        hooks = []
        for entry in self.data.get("hooks", []) or []:
            if isinstance(entry, dict) and isinstance(entry.get("env"), dict):
                entry = {
                    **entry,
                    "env": {
                        k: self._resolve_env_var(v) if isinstance(v, str) else v
                        for k, v in entry["env"].items()
                    },
                }
            hooks.append(entry)
        return hooks

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)
