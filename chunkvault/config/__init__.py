"""Simple YAML configuration loader for ChunkVault."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


class ChunkVaultConfig:
    """ChunkVault configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used.
        """
        if config_path is None:
            self.config_file = None
            self.config: Dict[str, Any] = {}
            logger.info("No configuration file given, using defaults")
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)

            if not config:
                raise ValueError("Configuration file is empty")

            # Resolve relative paths
            self._resolve_paths(config)

            logger.info("Configuration loaded successfully")
            return config

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load configuration: {e}")

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in [('storage', 'data_directory'),
                             ('storage', 'temp_directory'),
                             ('logging', 'file_path')]:
            if section in config and key in config[section]:
                path = config[section][key]
                if path and not os.path.isabs(path):
                    config[section][key] = str(config_dir / path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'autosave.interval_seconds').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'autosave.enabled')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_temp_directory(self) -> str:
        """Get the directory auto-save chunks are written to."""
        temp_dir = self.get('storage.temp_directory')
        if not temp_dir:
            return str(Path(self.get_data_directory()) / "tmp" / "recordings")
        return str(Path(temp_dir).absolute())

    def get_autosave_settings(self) -> Dict[str, Any]:
        """Get auto-save settings with defaults applied."""
        interval = float(self.get('autosave.interval_seconds', 60))
        if interval <= 0:
            raise ValueError(f"autosave.interval_seconds must be positive, got {interval}")

        return {
            "autosave_enabled": bool(self.get('autosave.enabled', True)),
            "interval_seconds": interval,
            "extension": str(self.get('autosave.extension', 'pcm')),
            "max_consecutive_write_failures": int(self.get('autosave.max_consecutive_write_failures', 5)),
            "max_cleanup_attempts": int(self.get('autosave.max_cleanup_attempts', 3)),
        }
