"""Configuration management with JSON persistence and change callbacks."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Callable, List

from .models.config import SecurityConfig
from .config.defaults import DEFAULT_CONFIG, DEFAULT_PATHS, IMAGE_BACKENDS
from .logging_config import get_logger

logger = get_logger("config_manager")


class ConfigManager:
    """Manages system configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[SecurityConfig] = None
        self._config_change_callbacks: List[Callable[[SecurityConfig], None]] = []

        self.load_config()

    def load_config(self) -> SecurityConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                known = {f.name for f in fields(SecurityConfig)}
                merged = {**DEFAULT_CONFIG, **{k: v for k, v in config_dict.items() if k in known}}
                self._config = SecurityConfig(**merged)
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.warning(f"Error loading config: {e}. Using defaults.")
                self._config = SecurityConfig()
        else:
            self._config = SecurityConfig()
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(asdict(self._config), f, indent=2)

    def get_config(self) -> SecurityConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values. Unknown keys are ignored."""
        if self._config is None:
            self.load_config()

        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {key}")

        self.save_config()

        for callback in list(self._config_change_callbacks):
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def validate_config(self, config: Optional[SecurityConfig] = None) -> bool:
        """Validate the current configuration, or a candidate one before applying it.

        Types are checked as well as ranges, since file values are merged unchecked.
        """
        config = config or self._config
        if config is None:
            return False

        threshold = config.cat_confidence_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            return False
        if not 0.0 <= threshold <= 1.0:
            return False

        if config.image_backend not in IMAGE_BACKENDS:
            return False

        if not _is_int(config.web_port) or not 1 <= config.web_port <= 65535:
            return False

        if not _is_int(config.event_history_size) or config.event_history_size < 1:
            return False

        if not isinstance(config.log_level, str):
            return False
        if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return False

        for name in ("web_host", "log_dir"):
            if not isinstance(getattr(config, name), str):
                return False

        for name in ("cascade_path", "repository_path"):
            value = getattr(config, name)
            if value is not None and not isinstance(value, str):
                return False

        return True

    def register_change_callback(self, callback: Callable[[SecurityConfig], None]) -> None:
        """Register a callback to be called when config changes."""
        if callback not in self._config_change_callbacks:
            self._config_change_callbacks.append(callback)

    def unregister_change_callback(self, callback: Callable[[SecurityConfig], None]) -> None:
        """Unregister a config change callback."""
        if callback in self._config_change_callbacks:
            self._config_change_callbacks.remove(callback)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
