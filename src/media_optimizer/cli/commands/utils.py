"""Utility CLI commands."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ...core import IMAGE_PRESETS, PDF_QUALITY_SETTINGS, VIDEO_PRESETS, ToolId, ToolLocator

if TYPE_CHECKING:
    import argparse

    from ...core import ConfigManager, ResizePreset

LOG = logging.getLogger(__name__)

UTILITY_COMMANDS = ("tools", "presets")


class UtilityCommands:
    """Utility command handlers."""

    def __init__(self, config_manager: ConfigManager) -> None:
        """Initialize utility commands handler."""
        self.config_manager = config_manager

    def add_subcommands(self, subparsers: argparse._SubParsersAction) -> None:
        """Add utility commands to the top-level subparsers."""
        subparsers.add_parser("tools", help="Show where FFmpeg and Ghostscript were found")
        subparsers.add_parser("presets", help="List resize presets and PDF quality tiers")

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle utility command execution."""
        if args.command == "tools":
            return self._handle_tools(args)
        if args.command == "presets":
            return self._handle_presets(args)
        LOG.error("Unknown utility command: %s", args.command)
        return 1

    def _handle_tools(self, args: argparse.Namespace) -> int:
        """Resolve every external tool and show the search trail."""
        locator = ToolLocator.from_config(self.config_manager.config)
        missing = 0

        for tool in ToolId:
            resolved = locator.resolve(tool)
            found = Path(resolved).is_file() or shutil.which(resolved) is not None
            status = "✓" if found else "✗"
            print(f"{status} {tool.display_name}: {resolved}")
            if not found:
                missing += 1
            if args.verbose or not found:
                for tried in locator.tried_paths(tool):
                    print(f"    tried {tried}")

        config_path = self.config_manager.config_path or Path.cwd() / "config.yaml"
        print(f"\nConfig file: {config_path} ({'found' if config_path.exists() else 'not found, using defaults'})")
        return 0 if missing == 0 else 1

    def _handle_presets(self, _args: argparse.Namespace) -> int:
        """List every preset catalog."""
        presets_config = self.config_manager.config.presets

        print("Image presets:")
        self._print_presets(IMAGE_PRESETS, presets_config.image_default)
        print("\nVideo presets:")
        self._print_presets(VIDEO_PRESETS, presets_config.video_default)

        print("\nPDF quality tiers:")
        default_quality = self.config_manager.pdf_quality
        for name, settings in PDF_QUALITY_SETTINGS.items():
            marker = "*" if name == default_quality else " "
            print(f" {marker} {name:<10} {settings.description}")
        return 0

    @staticmethod
    def _print_presets(presets: tuple[ResizePreset, ...], default_name: str) -> None:
        for preset in presets:
            marker = "*" if preset.name.lower() == default_name.lower() else " "
            print(f" {marker} {preset.name:<10} {preset.description}")
