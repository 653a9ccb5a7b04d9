"""Main CLI interface for the media optimizer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from ..config.constants import VERBOSE_LOGGING_THRESHOLD
from ..core import ConfigManager, with_config_overrides
from .commands import PROCESS_COMMANDS, UTILITY_COMMANDS, ProcessCommands, UtilityCommands


class MediaOptimizerCLI:
    """Main CLI interface."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_manager = ConfigManager(config_path)
        self.process_commands = ProcessCommands(self.config_manager)
        self.utility_commands = UtilityCommands(self.config_manager)

    @staticmethod
    def setup_logging(verbosity: int) -> None:
        """Setup logging based on verbosity level."""
        level_map = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
        }

        level = level_map.get(verbosity, logging.DEBUG)

        log_format = (
            "%(levelname)s: %(name)s: %(message)s"
            if verbosity >= VERBOSE_LOGGING_THRESHOLD
            else "%(levelname)s: %(message)s"
        )

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)])

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog="media-optimizer",
            description="Batch image, video and PDF optimization for the web",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Convert images to WebP, videos to H.264 MP4 and shrink PDFs
  media-optimizer compress photos/ clip.mov report.pdf

  # Resize images to 1280px and compress them
  media-optimizer resize photos/ --preset Medium --compress

  # Optimize for web with the default presets, results in ./optimized/
  media-optimizer --output-folder optimized optimize photos/

  # Aggressive PDF compression
  media-optimizer pdf scans/ --quality low

  # Show where FFmpeg and Ghostscript were found
  media-optimizer tools -v
            """,
        )

        # Global options
        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info, -vv for debug)",
        )

        parser.add_argument("--config", type=Path, help="Path to configuration file")

        parser.add_argument(
            "--output-folder",
            help="Move results into this subfolder next to each source file",
        )

        parser.add_argument(
            "--timeout",
            type=float,
            help="Per-file encoder timeout in seconds (0 disables the limit)",
        )

        subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")
        self.process_commands.add_subcommands(subparsers)
        self.utility_commands.add_subcommands(subparsers)

        return parser

    @staticmethod
    def create_config_overrides(args: argparse.Namespace) -> dict[str, Any]:
        """Create configuration overrides from CLI arguments."""
        overrides: dict[str, Any] = {}
        if getattr(args, "output_folder", None) is not None:
            overrides["global_.output_folder_name"] = args.output_folder
        if getattr(args, "timeout", None) is not None:
            overrides["global_.tool_timeout"] = args.timeout
        return overrides

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parser = self.build_parser()
        parsed_args = parser.parse_args(args)

        self.setup_logging(parsed_args.verbose)

        # Update config manager if custom config provided
        if getattr(parsed_args, "config", None):
            self.config_manager = ConfigManager(parsed_args.config)
            self.process_commands.config_manager = self.config_manager
            self.utility_commands.config_manager = self.config_manager

        try:
            with with_config_overrides(self.config_manager, self.create_config_overrides(parsed_args)):
                if parsed_args.command in PROCESS_COMMANDS:
                    return self.process_commands.handle_command(parsed_args)
                if parsed_args.command in UTILITY_COMMANDS:
                    return self.utility_commands.handle_command(parsed_args)
                parser.error(f"Unknown command: {parsed_args.command}")

        except KeyboardInterrupt:
            logging.getLogger(__name__).info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception:
            logging.getLogger(__name__).exception("Unexpected error")
            return 1

        return 0


def main() -> int:
    """Entry point for the CLI."""
    cli = MediaOptimizerCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
