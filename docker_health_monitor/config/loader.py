"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from .models import DockerHealthMonitorConfig


class ConfigLoader:
    """Load and validate monitor configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> DockerHealthMonitorConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            DockerHealthMonitorConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        return DockerHealthMonitorConfig(**ConfigLoader._read_file(config_path))

    @staticmethod
    def load(
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> DockerHealthMonitorConfig:
        """
        Load configuration from an optional file plus explicit overrides.

        Args:
            config_path: Optional path to YAML configuration file
            overrides: Nested values (from CLI / environment) taking precedence

        Returns:
            DockerHealthMonitorConfig: Validated configuration object
        """
        raw_config = ConfigLoader._read_file(config_path) if config_path else {}
        raw_config = ConfigLoader._merge(raw_config, overrides or {})
        return DockerHealthMonitorConfig(**raw_config)

    @staticmethod
    def _read_file(config_path: str) -> Dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        # Substitute environment variables
        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep-merge overrides into base, skipping None override values.

        Args:
            base: Values loaded from file
            overrides: Values that win over base

        Returns:
            dict: Merged configuration
        """
        merged = dict(base)
        for key, value in overrides.items():
            if value is None:
                continue
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = ConfigLoader._merge(merged[key], value)
            elif isinstance(value, dict):
                merged[key] = ConfigLoader._merge({}, value)
            else:
                merged[key] = value
        return merged

    _ENV_PATTERN = re.compile(r'\$\{(\w+)(?::-([^}]*))?\}')

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively replace ${VAR} and ${VAR:-fallback} placeholders.

        Unset variables without a fallback become empty strings.
        """
        if isinstance(obj, str):
            return ConfigLoader._ENV_PATTERN.sub(
                lambda m: os.getenv(m.group(1)) or (m.group(2) or ''), obj
            )
        if isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]
        return obj
