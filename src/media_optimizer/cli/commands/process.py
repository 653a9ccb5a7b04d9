"""Batch processing CLI commands: compress, resize, optimize and pdf."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from tqdm import tqdm

from ...core import (
    BatchCoordinator,
    CompressionMode,
    FileCategory,
    ProcessingOptions,
    find_preset,
    format_failure_listing,
    generate_batch_summary,
)
from ...core.presets import (
    IMAGE_PRESETS,
    PDF_QUALITY_SETTINGS,
    VIDEO_PRESETS,
    X2_IMAGE_PRESET,
    X2_VIDEO_PRESET,
)
from ..failure_table import print_failure_table

if TYPE_CHECKING:
    import argparse

    from ...core import BatchResult, ConfigManager, OperationStage, ResizePreset

LOG = logging.getLogger(__name__)

PROCESS_COMMANDS = ("compress", "resize", "optimize", "optimize-x2", "pdf")

# Operation names used in the completion summary
OPERATION_NAMES = {
    "compress": "Compressed",
    "resize": "Resized",
    "optimize": "Optimized for web",
    "optimize-x2": "Optimized for web (x2)",
    "pdf": "Compressed",
}


def collect_files(paths: list[Path], *, recursive: bool = False, skip_dir_name: str = "") -> list[Path]:
    """
    Expand the given paths into an ordered list of files.

    Files are kept in the order given; directories contribute their files in
    sorted order. Hidden files and the output folder are skipped.
    """
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            pattern = path.rglob("*") if recursive else path.glob("*")
            for candidate in sorted(pattern):
                relative_parts = candidate.relative_to(path).parts
                if any(part.startswith(".") for part in relative_parts):
                    continue
                if skip_dir_name and skip_dir_name in relative_parts[:-1]:
                    continue
                if candidate.is_file():
                    files.append(candidate)
        else:
            # Missing paths are passed through and reported as per-file failures
            files.append(path)
    return files


class ProcessCommands:
    """Batch processing command handlers."""

    def __init__(self, config_manager: ConfigManager) -> None:
        """Initialize processing commands handler."""
        self.config_manager = config_manager

    def add_subcommands(self, subparsers: argparse._SubParsersAction) -> None:
        """Add processing commands to the top-level subparsers."""
        image_names = ", ".join(p.name for p in IMAGE_PRESETS)
        video_names = ", ".join(p.name for p in VIDEO_PRESETS)

        compress_parser = subparsers.add_parser("compress", help="Compress images, videos and PDFs for the web")
        self._add_common_arguments(compress_parser)
        compress_parser.add_argument(
            "--mode",
            choices=[mode.value for mode in CompressionMode],
            default=CompressionMode.ORIGINAL.value,
            help="Compression mode; also picks the PDF quality tier (max=low, minimum=high)",
        )

        resize_parser = subparsers.add_parser("resize", help="Resize images and videos to a preset")
        self._add_common_arguments(resize_parser)
        resize_parser.add_argument(
            "--preset",
            "-p",
            required=True,
            help=f"Resize preset. Images: {image_names}. Videos: {video_names}",
        )
        resize_parser.add_argument("--compress", action="store_true", help="Compress after resizing")

        optimize_parser = subparsers.add_parser(
            "optimize", help="Resize to the default web preset and compress (optimize for web)"
        )
        self._add_common_arguments(optimize_parser)
        optimize_parser.add_argument(
            "--preset",
            "-p",
            help="Override the default preset from config.yaml ('Original' keeps the dimensions)",
        )

        x2_parser = subparsers.add_parser(
            "optimize-x2", help=f"Optimize for web at double size ({X2_IMAGE_PRESET} images, {X2_VIDEO_PRESET} videos)"
        )
        self._add_common_arguments(x2_parser)

        pdf_parser = subparsers.add_parser("pdf", help="Compress PDF files with Ghostscript")
        self._add_common_arguments(pdf_parser)
        pdf_parser.add_argument(
            "--quality",
            "-q",
            choices=list(PDF_QUALITY_SETTINGS),
            help="PDF quality tier (default: pdf.quality from config.yaml)",
        )

    @staticmethod
    def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("paths", nargs="+", type=Path, help="Files or directories to process")
        parser.add_argument(
            "--recursive",
            "-r",
            action="store_true",
            help="Process directories recursively",
        )
        parser.add_argument(
            "--no-progress",
            action="store_true",
            help="Disable the progress bar",
        )

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle processing command execution."""
        files = collect_files(
            args.paths,
            recursive=args.recursive,
            skip_dir_name=self.config_manager.output_folder_name,
        )
        if not files:
            LOG.error("No files found in: %s", ", ".join(str(p) for p in args.paths))
            return 1

        coordinator = BatchCoordinator.from_config(self.config_manager)
        if args.command == "pdf":
            files = self._only_pdfs(coordinator, files)
            if not files:
                LOG.error("No PDF files found in: %s", ", ".join(str(p) for p in args.paths))
                return 1

        try:
            options, pdf_quality = self._build_options(args, coordinator, files)
        except ValueError as e:
            LOG.error("%s", e)  # noqa: TRY400
            return 1

        result = self._run_batch(coordinator, files, options, pdf_quality, show_progress=not args.no_progress)
        self._report(result, OPERATION_NAMES[args.command], "pdf" if args.command == "pdf" else "media")
        return 0 if result.failure_count == 0 else 1

    @staticmethod
    def _only_pdfs(coordinator: BatchCoordinator, files: list[Path]) -> list[Path]:
        """Keep the files classified as PDF."""
        pdfs = []
        for path in files:
            category, _ = coordinator.classifier.classify(path)
            if category == FileCategory.PDF:
                pdfs.append(path)
            else:
                LOG.info("Skipping %s: not a PDF", path.name)
        return pdfs

    def _build_options(
        self, args: argparse.Namespace, coordinator: BatchCoordinator, files: list[Path]
    ) -> tuple[ProcessingOptions, str | None]:
        """Translate command line arguments into processing options and a PDF tier."""
        if args.command == "compress":
            mode = CompressionMode(args.mode)
            pdf_quality = None if mode != CompressionMode.ORIGINAL else self.config_manager.pdf_quality
            return ProcessingOptions(compress=True, compression_mode=mode), pdf_quality

        if args.command == "pdf":
            return ProcessingOptions(compress=True), args.quality or self.config_manager.pdf_quality

        if args.command == "resize":
            preset = find_preset(args.preset)
            if preset is None:
                msg = "Resize needs a target preset; use 'compress' to keep the original dimensions"
                raise ValueError(msg)
            return ProcessingOptions(compress=args.compress, resize=True, resize_preset=preset), None

        preset = self._web_preset(args, coordinator, files)
        if preset is None:
            return ProcessingOptions(compress=True), self.config_manager.pdf_quality
        return ProcessingOptions(compress=True, resize=True, resize_preset=preset), self.config_manager.pdf_quality

    def _web_preset(
        self, args: argparse.Namespace, coordinator: BatchCoordinator, files: list[Path]
    ) -> ResizePreset | None:
        """Pick the resize preset for the optimize commands from the first file's category."""
        category, _ = coordinator.classifier.classify(files[0])
        is_video = category == FileCategory.VIDEO
        catalog_category = FileCategory.VIDEO if is_video else FileCategory.IMAGE

        if args.command == "optimize-x2":
            return find_preset(X2_VIDEO_PRESET if is_video else X2_IMAGE_PRESET, catalog_category)

        name = getattr(args, "preset", None)
        if not name:
            presets_config = self.config_manager.config.presets
            name = presets_config.video_default if is_video else presets_config.image_default
        try:
            return find_preset(name, catalog_category)
        except ValueError:
            if getattr(args, "preset", None):
                raise
            fallback = "720p" if is_video else "Medium"
            LOG.warning("Unknown default preset '%s' in config, using '%s'", name, fallback)
            return find_preset(fallback, catalog_category)

    @staticmethod
    def _run_batch(
        coordinator: BatchCoordinator,
        files: list[Path],
        options: ProcessingOptions,
        pdf_quality: str | None,
        *,
        show_progress: bool,
    ) -> BatchResult:
        """Run the batch behind a tqdm progress bar."""
        progress_bar = tqdm(
            total=100,
            desc="Processing",
            unit="%",
            bar_format="{l_bar}{bar}| {percentage:3.0f}% [{elapsed}<{remaining}]",
            disable=not show_progress,
        )

        def on_progress(
            file_index: int, file_count: int, stage: OperationStage, overall: float, _message: str = ""
        ) -> None:
            progress_bar.set_description(f"[{file_index + 1}/{file_count}] {stage.value} {files[file_index].name}")
            delta = overall - progress_bar.n
            if delta > 0:
                progress_bar.update(delta)

        try:
            result = coordinator.process_batch(files, options, pdf_quality=pdf_quality, progress=on_progress)
            progress_bar.update(max(100 - progress_bar.n, 0))
        finally:
            progress_bar.close()
        return result

    @staticmethod
    def _report(result: BatchResult, operation_name: str, media_type: str) -> None:
        """Print the summary and failure details."""
        print(generate_batch_summary(result, operation_name))

        listing = format_failure_listing(result)
        if listing:
            print(listing)
        elif result.success_count == 0:
            print_failure_table(result.errors, media_type)
