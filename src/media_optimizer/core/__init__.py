"""Core media processing functionality."""

from .base import (
    BatchError,
    BatchResult,
    CancellationToken,
    ConfigurationError,
    FileCategory,
    FilesystemError,
    OperationCancelledError,
    OperationStage,
    OutputNotProducedError,
    ProcessingError,
    ProcessingResult,
    ProgressSink,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
    UnsupportedFileTypeError,
)
from .batch import BatchCoordinator, BatchProgress
from .classifier import FileClassifier
from .config import ConfigManager, ProcessingOptions, with_config_overrides
from .file_manager import OutputPlacer
from .orchestrator import StageOrchestrator
from .presets import (
    IMAGE_PRESETS,
    PDF_QUALITY_SETTINGS,
    VIDEO_PRESETS,
    CompressionMode,
    ResizePreset,
    find_preset,
)
from .runner import ToolRunner
from .summary import format_bytes, format_failure_listing, generate_batch_summary
from .tool_locator import ToolId, ToolLocator
from .transform import EncoderTransformEngine, TransformEngine

__all__ = [
    # Configuration
    "ConfigManager",
    "ProcessingOptions",
    "with_config_overrides",
    # Pipeline
    "BatchCoordinator",
    "BatchProgress",
    "EncoderTransformEngine",
    "FileClassifier",
    "OutputPlacer",
    "StageOrchestrator",
    "ToolId",
    "ToolLocator",
    "ToolRunner",
    "TransformEngine",
    # Presets
    "IMAGE_PRESETS",
    "PDF_QUALITY_SETTINGS",
    "VIDEO_PRESETS",
    "CompressionMode",
    "ResizePreset",
    "find_preset",
    # Summaries
    "format_bytes",
    "format_failure_listing",
    "generate_batch_summary",
    # Enums and data classes
    "BatchError",
    "BatchResult",
    "CancellationToken",
    "FileCategory",
    "OperationStage",
    "ProcessingResult",
    "ProgressSink",
    # Exceptions
    "ConfigurationError",
    "FilesystemError",
    "OperationCancelledError",
    "OutputNotProducedError",
    "ProcessingError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolTimeoutError",
    "UnsupportedFileTypeError",
]
