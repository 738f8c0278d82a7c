"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import NetworkReportConfig
from .settings import Settings


class ConfigLoader:
    """Load and validate report configuration."""

    @staticmethod
    def load(
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Dict[str, Any]]] = None
    ) -> NetworkReportConfig:
        """
        Build the run configuration.

        Precedence, lowest first: model defaults, YAML file, environment,
        explicit overrides (CLI flags).

        Args:
            config_path: Optional path to a YAML configuration file
            overrides: Section name -> {field: value}; None values are ignored

        Returns:
            NetworkReportConfig: Validated configuration object

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        raw_config: Dict[str, Any] = {}
        if config_path:
            raw_config = ConfigLoader._read_yaml(config_path)

        raw_config = ConfigLoader._merge(raw_config, Settings.overrides())
        if overrides:
            raw_config = ConfigLoader._merge(raw_config, overrides)

        try:
            return NetworkReportConfig(**raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @staticmethod
    def load_from_file(config_path: str) -> NetworkReportConfig:
        """
        Load configuration from a YAML file only, without environment overrides.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            NetworkReportConfig: Validated configuration object

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid
        """
        raw_config = ConfigLoader._read_yaml(config_path)
        try:
            return NetworkReportConfig(**raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    @staticmethod
    def _read_yaml(config_path: str) -> Dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {config_path}: {e}") from e

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        return ConfigLoader._substitute_env_vars(raw_config)

    @staticmethod
    def _merge(base: Dict[str, Any], updates: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        """Merge section overrides into a raw config dict, skipping None values."""
        merged = dict(base)
        for section, values in updates.items():
            current = dict(merged.get(section) or {})
            current.update({k: v for k, v in values.items() if v is not None})
            merged[section] = current
        return merged

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
