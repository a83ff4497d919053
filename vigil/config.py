"""
Config system - Layered handler configuration with validation.

Merge precedence (later overrides earlier):
defaults < config files < .env file < environment variables < overrides
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass, field, fields
from pathlib import Path
import os
import json

from .dispatcher import STACK_DEPTH
from .fatal import RESERVED_MEMORY
from .faults import ConfigInvalidFault
from .levels import parse_level


@dataclass
class HandlerConfig:
    """
    Error handler settings.

    Attributes:
        level: Threshold mask (None for the runtime's level, 0 disables)
        display_errors: Raise errors as faults (dev) or only log (prod)
        reserved_memory: Bytes reserved for fatal error handling
        stack_depth: Frames logged with deprecations
        channels: Channel name -> stdlib logger name
    """
    level: Optional[int] = None
    display_errors: bool = True
    reserved_memory: int = RESERVED_MEMORY
    stack_depth: int = STACK_DEPTH
    channels: Dict[str, str] = field(default_factory=dict)


class ConfigLoader:
    """
    Loads and merges handler configuration from multiple sources.

    Nested keys in environment variables use a double underscore:
    ``VIGIL_CHANNELS__DEPRECATION=app.deprecations``.
    """

    def __init__(self, env_prefix: str = "VIGIL_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "VIGIL_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: Config file paths or glob patterns (YAML or JSON)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)

            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, self._section(data))

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, self._section(data))

    @staticmethod
    def _section(data: Any) -> Dict[str, Any]:
        # Files may hold the settings at the top level or under "vigil:"
        if not isinstance(data, dict):
            return {}
        section = data.get("vigil", data)
        return section if isinstance(section, dict) else {}

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        from dotenv import dotenv_values

        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert VIGIL_CHANNELS__EMERGENCY to nested dict."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def get_handler_config(self) -> HandlerConfig:
        """
        Build and validate the handler configuration.

        Raises:
            ConfigInvalidFault: If a value has the wrong type or an
                unknown level name
        """
        known = {f.name for f in fields(HandlerConfig)}
        data = {k: v for k, v in self.config_data.items() if k in known}
        config = HandlerConfig()

        if "level" in data:
            try:
                config.level = parse_level(data["level"])
            except ValueError as e:
                raise ConfigInvalidFault("level", str(e)) from e

        if "display_errors" in data:
            value = data["display_errors"]
            # 0/1 from env vars and .env files
            if not isinstance(value, bool) and value in (0, 1):
                value = bool(value)
            if not isinstance(value, bool):
                raise ConfigInvalidFault("display_errors", f"expected bool, got {type(value).__name__}")
            config.display_errors = value

        for key in ("reserved_memory", "stack_depth"):
            if key in data:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    raise ConfigInvalidFault(key, f"expected a non-negative int, got {value!r}")
                setattr(config, key, value)

        if config.stack_depth > STACK_DEPTH:
            raise ConfigInvalidFault(
                "stack_depth",
                f"at most {STACK_DEPTH} frames are logged, got {config.stack_depth}",
            )

        if "channels" in data:
            channels = data["channels"]
            if not isinstance(channels, dict) or not all(isinstance(v, str) for v in channels.values()):
                raise ConfigInvalidFault("channels", "expected a mapping of channel name to logger name")
            config.channels = dict(channels)

        return config

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
