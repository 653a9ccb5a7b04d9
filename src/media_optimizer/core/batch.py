"""Sequential batch processing with per-file isolation and aggregated results."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .base import (
    BatchResult,
    FileCategory,
    FilesystemError,
    OperationStage,
    OutputNotProducedError,
    ProcessingResult,
    UnsupportedFileTypeError,
)
from .classifier import FileClassifier
from .file_manager import OutputPlacer
from .orchestrator import StageOrchestrator
from .runner import ToolRunner
from .tool_locator import ToolLocator
from .transform import EncoderTransformEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .base import CancellationToken
    from .config import ConfigManager, ProcessingOptions

LOG = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled"


class BatchProgress(Protocol):
    """Receives batch-level progress for the file currently being processed."""

    def __call__(
        self,
        file_index: int,
        file_count: int,
        stage: OperationStage,
        overall_percentage: float,
        message: str = "",
    ) -> None: ...


def overall_percentage(file_index: int, file_count: int, file_percentage: float) -> float:
    """Interpolate a file's own percentage into its 1/N share of the batch."""
    if file_count <= 0:
        return 100.0
    clamped = min(max(file_percentage, 0.0), 100.0)
    return (file_index + clamped / 100) / file_count * 100


class BatchCoordinator:
    """
    Visit every input file once, in order, and collect a BatchResult.

    Each file is classified, handed to the StageOrchestrator and, on success,
    placed into the output folder. Failures of any kind become error entries;
    the batch itself always completes.
    """

    def __init__(
        self,
        classifier: FileClassifier,
        orchestrator: StageOrchestrator,
        placer: OutputPlacer | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.classifier = classifier
        self.orchestrator = orchestrator
        self.placer = placer or OutputPlacer()
        self.cancel_token = cancel_token

    @classmethod
    def from_config(
        cls,
        config_manager: ConfigManager,
        *,
        locator: ToolLocator | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BatchCoordinator:
        """Wire the full pipeline from configuration."""
        locator = locator or ToolLocator.from_config(config_manager.config)
        max_buffer = config_manager.get_value("global_.max_output_buffer")
        engine = EncoderTransformEngine(
            locator,
            ToolRunner(timeout=config_manager.tool_timeout),
            max_buffer=int(max_buffer) if isinstance(max_buffer, int) else None,
            cancel_token=cancel_token,
        )
        return cls(
            FileClassifier(),
            StageOrchestrator(engine),
            OutputPlacer(config_manager.output_folder_name),
            cancel_token=cancel_token,
        )

    def process_batch(
        self,
        file_paths: Sequence[Path | str],
        options: ProcessingOptions,
        *,
        pdf_quality: str | None = None,
        progress: BatchProgress | None = None,
    ) -> BatchResult:
        """Process ``file_paths`` sequentially."""
        batch = BatchResult(total_files=len(file_paths))
        file_count = len(file_paths)

        LOG.info("Processing %d files", file_count)

        for file_index, raw_path in enumerate(file_paths):
            file_path = Path(raw_path)

            if self.cancel_token is not None and self.cancel_token.cancelled:
                batch.add_failure(file_path.name, CANCELLED_MESSAGE)
                continue

            try:
                result = self._process_file(file_path, file_index, file_count, options, pdf_quality, progress)
            except Exception as e:
                LOG.exception("Error processing %s", file_path)
                batch.add_failure(file_path.name, str(e) or e.__class__.__name__)
                continue

            if result.success:
                batch.add_success(result)
            else:
                LOG.warning("Failed %s: %s", file_path.name, result.error)
                batch.add_failure(file_path.name, result.error or "Unknown error")

        LOG.info(
            "Batch complete: %d succeeded, %d failed out of %d",
            batch.success_count,
            batch.failure_count,
            batch.total_files,
        )
        return batch

    def _process_file(  # noqa: PLR0913
        self,
        file_path: Path,
        file_index: int,
        file_count: int,
        options: ProcessingOptions,
        pdf_quality: str | None,
        progress: BatchProgress | None,
    ) -> ProcessingResult:
        """Classify, transform and place one file."""

        def report(stage: OperationStage, percentage: float, message: str = "") -> None:
            if progress is not None:
                progress(file_index, file_count, stage, overall_percentage(file_index, file_count, percentage), message)

        report(OperationStage.ANALYZING, 0, f"Classifying {file_path.name}")
        category, mime_type = self.classifier.classify(file_path)
        if category == FileCategory.UNSUPPORTED:
            error = UnsupportedFileTypeError(file_path, mime_type)
            return ProcessingResult.failure(file_path, str(error), FileCategory.UNSUPPORTED, mime_type=mime_type)

        result = self.orchestrator.process(
            file_path,
            category,
            options,
            pdf_quality=pdf_quality,
            progress=report,
        )
        if not result.success:
            return result

        if result.output_path is None or not result.output_path.exists():
            msg = f"Output file missing after processing: {result.output_path}"
            raise OutputNotProducedError(msg, file_path=file_path)

        try:
            result.output_path = self.placer.place(result.output_path, file_path)
        except FilesystemError:
            if result.output_path != file_path:
                self._discard_artifact(result.output_path)
            raise
        return result

    @staticmethod
    def _discard_artifact(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            LOG.debug("Removed unplaced output %s", path)
        except OSError as e:
            LOG.warning("Could not remove unplaced output %s: %s", path, e)
