"""Configuration management for the media optimizer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOG = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT = 1800
VALID_PDF_QUALITIES = ("high", "medium", "low")


# Configuration singleton
class _ConfigSingleton:
    """Configuration singleton holder."""

    _instance: MediaOptimizerConfig | None = None

    @classmethod
    def get_instance(cls) -> MediaOptimizerConfig:
        """Get the configuration instance."""
        if cls._instance is None:
            config_path = Path.cwd() / "config.yaml"
            if config_path.exists():
                cls._instance = MediaOptimizerConfig.load_from_file(config_path)
            else:
                cls._instance = MediaOptimizerConfig()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


_config_singleton = _ConfigSingleton()


@dataclass
class GlobalConfig:
    """Global settings."""

    output_folder_name: str = ""
    tool_timeout: int | None = DEFAULT_TOOL_TIMEOUT
    max_output_buffer: int | None = None


@dataclass
class ToolsConfig:
    """External tool locations."""

    ffmpeg: str | None = None
    ghostscript: str | None = None
    assets_dir: str | None = None

    def overrides(self) -> dict[str, str]:
        """Return the explicitly configured executable paths keyed by tool name."""
        configured = {"ffmpeg": self.ffmpeg, "ghostscript": self.ghostscript}
        return {name: path for name, path in configured.items() if path}


@dataclass
class PdfConfig:
    """PDF optimization settings."""

    quality: str = "medium"


@dataclass
class PresetsConfig:
    """Default resize presets used by the optimize command."""

    image_default: str = "Medium"
    video_default: str = "720p"


@dataclass
class MediaOptimizerConfig:
    """Main configuration class."""

    global_: GlobalConfig = field(default_factory=GlobalConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    pdf: PdfConfig = field(default_factory=PdfConfig)
    presets: PresetsConfig = field(default_factory=PresetsConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> MediaOptimizerConfig:
        """Load configuration from YAML file."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            if not isinstance(data, dict):
                LOG.warning("Ignoring config %s: top level must be a mapping", config_path)
                return cls()
            return cls._from_dict(data)
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load config from %s: %s", config_path, e)
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> MediaOptimizerConfig:
        """Create config from dictionary."""
        return cls(
            global_=cls._parse_global_config(data.get("global") or {}),
            tools=cls._parse_tools_config(data.get("tools") or {}),
            pdf=cls._parse_pdf_config(data.get("pdf") or {}),
            presets=cls._parse_presets_config(data.get("presets") or {}),
        )

    @classmethod
    def _parse_global_config(cls, global_data: dict[str, Any]) -> GlobalConfig:
        """Parse global configuration."""
        timeout = global_data.get("tool_timeout", DEFAULT_TOOL_TIMEOUT)
        if timeout is not None:
            try:
                timeout = int(timeout)
            except (TypeError, ValueError):
                LOG.warning("Invalid tool_timeout '%s'. Using %d seconds", timeout, DEFAULT_TOOL_TIMEOUT)
                timeout = DEFAULT_TOOL_TIMEOUT
            if timeout <= 0:
                timeout = None

        max_buffer = global_data.get("max_output_buffer")
        if max_buffer is not None:
            try:
                max_buffer = int(max_buffer)
            except (TypeError, ValueError):
                LOG.warning("Invalid max_output_buffer '%s'. Using per-tool defaults", max_buffer)
                max_buffer = None

        return GlobalConfig(
            output_folder_name=str(global_data.get("output_folder_name") or "").strip(),
            tool_timeout=timeout,
            max_output_buffer=max_buffer,
        )

    @classmethod
    def _parse_tools_config(cls, tools_data: dict[str, Any]) -> ToolsConfig:
        """Parse tool location overrides."""
        return ToolsConfig(
            ffmpeg=tools_data.get("ffmpeg"),
            ghostscript=tools_data.get("ghostscript"),
            assets_dir=tools_data.get("assets_dir"),
        )

    @classmethod
    def _parse_pdf_config(cls, pdf_data: dict[str, Any]) -> PdfConfig:
        """Parse PDF configuration."""
        quality = str(pdf_data.get("quality", "medium")).lower()
        if quality not in VALID_PDF_QUALITIES:
            LOG.warning(
                "Invalid PDF quality '%s'. Using 'medium'. Valid options: %s",
                quality,
                ", ".join(VALID_PDF_QUALITIES),
            )
            quality = "medium"
        return PdfConfig(quality=quality)

    @classmethod
    def _parse_presets_config(cls, presets_data: dict[str, Any]) -> PresetsConfig:
        """Parse default preset names."""
        return PresetsConfig(
            image_default=str(presets_data.get("image_default", "Medium")),
            video_default=str(presets_data.get("video_default", "720p")),
        )


def get_config() -> MediaOptimizerConfig:
    """Get the global configuration instance."""
    return _config_singleton.get_instance()
