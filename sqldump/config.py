"""
Configuration loading and validation for the SQL dumper.
"""

import os
import re
from typing import Any

import yaml

from .exceptions import ConfigurationError


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration file '{self.config_path}' must contain a mapping")

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_connection(self) -> dict[str, Any]:
        """Get connection settings: dsn, user, password and driver options."""
        connection = self.config.get('connection') or {}
        if not connection.get('dsn'):
            raise ConfigurationError("Missing 'connection.dsn' in configuration")
        return {
            'dsn': connection['dsn'],
            'user': connection.get('user'),
            'password': connection.get('password'),
            'options': connection.get('options') or {},
        }

    def get_dump_settings(self) -> dict[str, Any]:
        """Get dump options, validated later by DumpSettings."""
        return self.config.get('settings') or {}

    def get_table_wheres(self) -> dict[str, str]:
        """Get per-table WHERE conditions."""
        return self.config.get('table_wheres') or {}

    def get_table_limits(self) -> dict[str, Any]:
        """Get per-table row limits."""
        return self.config.get('table_limits') or {}

    def get_output_settings(self) -> dict[str, Any]:
        """Get output settings."""
        return self.config.get('output') or {}

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging') or {}
