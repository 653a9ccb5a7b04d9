"""Base types, results and exceptions for media processing."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


class FileCategory(Enum):
    """Closed set of categories the pipeline knows how to handle."""

    IMAGE = "image"
    VIDEO = "video"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


class OperationStage(Enum):
    """Stage reported through a progress sink."""

    ANALYZING = "Analyzing file"
    RESIZING = "Resizing"
    COMPRESSING = "Compressing"
    FINALIZING = "Finalizing"


class ProgressSink(Protocol):
    """Receives intra-file progress: stage, percentage (0-100) and an optional message."""

    def __call__(self, stage: OperationStage, percentage: float, message: str = "") -> None: ...


def null_progress(_stage: OperationStage, _percentage: float, _message: str = "") -> None:
    """Progress sink that discards every event."""


@dataclass
class ProcessingResult:
    """Outcome of one file's full pipeline."""

    source_file: Path
    success: bool
    output_path: Path | None = None
    original_size: int = 0
    processed_size: int = 0
    error: str = ""
    file_type: FileCategory | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        """Name of the source file."""
        return self.source_file.name

    @property
    def savings_percent(self) -> float:
        """Size reduction relative to the original (negative if the output grew)."""
        if self.original_size <= 0:
            return 0.0
        return (1 - self.processed_size / self.original_size) * 100

    @classmethod
    def failure(
        cls,
        source_file: Path,
        error: str,
        file_type: FileCategory | None = None,
        **metadata: Any,
    ) -> ProcessingResult:
        """Build a failed result."""
        return cls(source_file=source_file, success=False, error=error, file_type=file_type, metadata=metadata)


@dataclass(frozen=True)
class BatchError:
    """A failed file in a batch."""

    file: str
    error: str


@dataclass
class BatchResult:
    """Aggregate over a list of input files."""

    total_files: int = 0
    success_count: int = 0
    failure_count: int = 0
    total_original_size: int = 0
    total_processed_size: int = 0
    results: list[ProcessingResult] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    def add_success(self, result: ProcessingResult) -> None:
        """Record a successful file and add its sizes to the totals."""
        self.results.append(result)
        self.success_count += 1
        self.total_original_size += result.original_size
        self.total_processed_size += result.processed_size

    def add_failure(self, file_name: str, error: str) -> None:
        """Record a failed file."""
        self.errors.append(BatchError(file=file_name, error=error))
        self.failure_count += 1

    @property
    def saved_bytes(self) -> int:
        """Bytes saved over all successful files."""
        return self.total_original_size - self.total_processed_size

    @property
    def is_partial_failure(self) -> bool:
        """True when some, but not all, files failed."""
        return 0 < self.failure_count < self.total_files


class CancellationToken:
    """Thread-safe flag used to stop a running batch and its external processes."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()


class ProcessingError(Exception):
    """Base exception for media processing errors."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.cause = cause


class UnsupportedFileTypeError(ProcessingError):
    """The file is not an image, video or PDF."""

    def __init__(self, file_path: Path, mime_type: str | None = None) -> None:
        detected = mime_type or "unknown"
        super().__init__(
            f"Unsupported file type: {detected}. Only images, videos, and PDFs are supported.",
            file_path=file_path,
        )
        self.mime_type = mime_type


class ToolNotFoundError(ProcessingError):
    """The external executable could not be started."""

    def __init__(
        self,
        tool_name: str,
        tried_paths: list[str],
        *,
        file_path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        tried = ", ".join(tried_paths) if tried_paths else "nothing"
        message = f"{tool_name} not found. Tried: {tried}"
        if cause is not None:
            message += f". Error: {cause}"
        super().__init__(message, file_path=file_path, cause=cause)
        self.tool_name = tool_name
        self.tried_paths = tried_paths


class ToolExecutionError(ProcessingError):
    """The external process ran but failed."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        file_path: Path | None = None,
    ) -> None:
        super().__init__(message, file_path=file_path)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class ToolTimeoutError(ToolExecutionError):
    """The external process exceeded its time limit and was killed."""


class OperationCancelledError(ProcessingError):
    """Processing was cancelled through a cancellation token."""


class OutputNotProducedError(ProcessingError):
    """The external process exited cleanly but did not write its output file."""


class ConfigurationError(ProcessingError):
    """The requested processing options are invalid."""


class FilesystemError(ProcessingError):
    """Placing, moving or cleaning up a file failed."""
