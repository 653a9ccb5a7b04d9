"""Stage sequencing: resize, compress, or resize then compress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import ConfigurationError, FileCategory, ProcessingError, ProcessingResult, null_progress
from .presets import DEFAULT_PDF_QUALITY, pdf_quality_for_mode

if TYPE_CHECKING:
    from pathlib import Path

    from .base import OperationStage, ProgressSink
    from .config import ProcessingOptions
    from .transform import TransformEngine

LOG = logging.getLogger(__name__)


def scaled_progress(progress: ProgressSink, start: float, span: float) -> ProgressSink:
    """Map a stage's own 0-100 progress into ``start``..``start + span`` of the file."""

    def report(stage: OperationStage, percentage: float, message: str = "") -> None:
        progress(stage, start + percentage * span / 100, message)

    return report


class StageOrchestrator:
    """Compose TransformEngine calls for one classified file."""

    def __init__(self, engine: TransformEngine) -> None:
        self.engine = engine

    def process(
        self,
        file_path: Path,
        category: FileCategory,
        options: ProcessingOptions,
        *,
        pdf_quality: str | None = None,
        progress: ProgressSink = null_progress,
    ) -> ProcessingResult:
        """Run the pipeline the options ask for. Never raises for per-file problems."""
        try:
            options.validate()
            if category == FileCategory.PDF:
                return self._process_pdf(file_path, options, pdf_quality, progress)
            if category not in (FileCategory.IMAGE, FileCategory.VIDEO):
                msg = f"Cannot process {category.value} file"
                raise ConfigurationError(msg, file_path=file_path)

            if options.resize and options.compress:
                result = self._resize_then_compress(file_path, category, options, progress)
            elif options.resize:
                result = self._resize(file_path, category, options, progress)
            else:
                result = self._compress(file_path, category, progress)
        except ProcessingError as e:
            LOG.warning("Cannot process %s: %s", file_path.name, e)
            return ProcessingResult.failure(file_path, str(e), category)
        except Exception as e:
            LOG.exception("Unexpected error processing %s", file_path)
            return ProcessingResult.failure(file_path, str(e) or e.__class__.__name__, category)

        result.source_file = file_path
        if result.file_type is None:
            result.file_type = category
        return result

    def _resize(
        self, file_path: Path, category: FileCategory, options: ProcessingOptions, progress: ProgressSink
    ) -> ProcessingResult:
        preset = options.resize_preset
        if category == FileCategory.VIDEO:
            return self.engine.resize_video(file_path, preset, progress)  # type: ignore[arg-type]
        return self.engine.resize_image(file_path, preset, progress)  # type: ignore[arg-type]

    def _compress(self, file_path: Path, category: FileCategory, progress: ProgressSink) -> ProcessingResult:
        if category == FileCategory.VIDEO:
            return self.engine.compress_video(file_path, progress)
        return self.engine.compress_image(file_path, progress)

    def _resize_then_compress(
        self, file_path: Path, category: FileCategory, options: ProcessingOptions, progress: ProgressSink
    ) -> ProcessingResult:
        resized = self._resize(file_path, category, options, scaled_progress(progress, 0, 50))
        if not resized.success or resized.output_path is None:
            return resized

        intermediate = resized.output_path
        compressed = self._compress(intermediate, category, scaled_progress(progress, 50, 50))

        if compressed.success:
            # Savings are reported against the true source, not the intermediate
            compressed.original_size = resized.original_size
            compressed.metadata["resize_preset"] = resized.metadata.get("preset")

        if intermediate != compressed.output_path and intermediate != file_path:
            self._remove_intermediate(intermediate)
        return compressed

    def _process_pdf(
        self,
        file_path: Path,
        options: ProcessingOptions,
        pdf_quality: str | None,
        progress: ProgressSink,
    ) -> ProcessingResult:
        if not options.compress:
            msg = "PDF files can only be compressed, not resized"
            raise ConfigurationError(msg, file_path=file_path)
        if options.resize:
            LOG.debug("Ignoring resize for PDF %s", file_path.name)
        quality = pdf_quality or pdf_quality_for_mode(options.compression_mode, DEFAULT_PDF_QUALITY)
        return self.engine.compress_pdf(file_path, quality, progress)

    @staticmethod
    def _remove_intermediate(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            LOG.debug("Removed intermediate file %s", path)
        except OSError as e:
            LOG.warning("Failed to remove intermediate file %s: %s", path, e)
