"""Processing options and layered configuration access."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import MediaOptimizerConfig
from ..config import get_config as _get_global_config
from .base import ConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

    from .presets import CompressionMode, ResizePreset

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingOptions:
    """What to do with every file of a batch. Read-only through the pipeline."""

    compress: bool = False
    resize: bool = False
    resize_preset: ResizePreset | None = None
    compression_mode: CompressionMode | None = None

    def validate(self) -> None:
        """Raise ConfigurationError for option combinations the pipeline cannot run."""
        if not self.compress and not self.resize:
            msg = "No processing options specified"
            raise ConfigurationError(msg)
        if self.resize and self.resize_preset is None:
            msg = "Resize requested without a resize preset"
            raise ConfigurationError(msg)


class ConfigManager:
    """Configuration manager with override and context support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to config file

        """
        self.config_path = config_path
        self._config = MediaOptimizerConfig.load_from_file(config_path) if config_path else _get_global_config()
        self._overrides: dict[str, Any] = {}
        self._context_stack: list[dict[str, Any]] = []

    @property
    def config(self) -> MediaOptimizerConfig:
        """Get the base configuration."""
        return self._config

    def get_value(self, key_path: str, default: object = None) -> object:
        """Get configuration value with override support."""
        if key_path in self._overrides:
            return self._overrides[key_path]

        try:
            value: object = self._config
            for part in key_path.split("."):
                value = getattr(value, part)
        except AttributeError:
            return default
        else:
            return value

    def set_override(self, key_path: str, value: object) -> None:
        """Set a temporary configuration override."""
        self._overrides[key_path] = value

    def push_context(self, overrides: dict[str, Any]) -> None:
        """Push a new configuration context."""
        self._context_stack.append(self._overrides.copy())
        self._overrides.update(overrides)

    def pop_context(self) -> None:
        """Pop the current configuration context."""
        if self._context_stack:
            self._overrides = self._context_stack.pop()

    @property
    def output_folder_name(self) -> str:
        """Configured output subfolder name, empty when outputs stay beside their sources."""
        return str(self.get_value("global_.output_folder_name", "") or "").strip()

    @property
    def tool_timeout(self) -> float | None:
        """Per-invocation timeout in seconds, or None for no limit."""
        value = self.get_value("global_.tool_timeout")
        if value is None:
            return None
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            LOG.warning("Ignoring invalid tool timeout override: %r", value)
            return None
        return timeout if timeout > 0 else None

    @property
    def pdf_quality(self) -> str:
        """Default PDF quality tier."""
        return str(self.get_value("pdf.quality", "medium"))


class ConfigContext:
    """Context manager for temporary configuration changes."""

    def __init__(self, config_manager: ConfigManager, overrides: dict[str, Any]) -> None:
        """
        Initialize configuration context.

        Args:
            config_manager: Configuration manager instance
            overrides: Configuration overrides to apply

        """
        self.config_manager = config_manager
        self.overrides = overrides

    def __enter__(self) -> ConfigManager:
        """Enter the configuration context."""
        self.config_manager.push_context(self.overrides)
        return self.config_manager

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Exit the configuration context."""
        self.config_manager.pop_context()


def with_config_overrides(config_manager: ConfigManager, overrides: dict[str, Any] | None = None) -> ConfigContext:
    """Create a context with configuration overrides keyed by dotted path."""
    return ConfigContext(config_manager, dict(overrides or {}))
