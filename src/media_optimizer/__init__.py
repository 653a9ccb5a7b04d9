"""Media Optimizer - batch image, video and PDF optimization for the web."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Batch image, video and PDF optimization for the web"

# Public API exports
from .config import MediaOptimizerConfig, get_config
from .core import (
    BatchCoordinator,
    BatchResult,
    CancellationToken,
    CompressionMode,
    ConfigManager,
    FileCategory,
    ProcessingError,
    ProcessingOptions,
    ProcessingResult,
    ToolLocator,
    generate_batch_summary,
    with_config_overrides,
)

__all__ = [
    # Configuration
    "MediaOptimizerConfig",
    "get_config",
    "ConfigManager",
    "with_config_overrides",
    # Core functionality
    "BatchCoordinator",
    "ToolLocator",
    "generate_batch_summary",
    # Enums and data classes
    "BatchResult",
    "CancellationToken",
    "CompressionMode",
    "FileCategory",
    "ProcessingOptions",
    "ProcessingResult",
    # Exceptions
    "ProcessingError",
]
