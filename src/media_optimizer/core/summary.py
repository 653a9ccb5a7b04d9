"""Human-readable batch summaries. Pure functions over BatchResult."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config.constants import FAILURE_LISTING_MAX_LENGTH

if TYPE_CHECKING:
    from .base import BatchResult

BYTE_UNITS = ("B", "KB", "MB", "GB")


def format_bytes(num_bytes: float) -> str:
    """Format a byte count with 1024-based units and one decimal, e.g. ``1.5 MB``."""
    if num_bytes == 0:
        return "0 B"
    if num_bytes < 0:
        return f"-{format_bytes(-num_bytes)}"

    value = float(num_bytes)
    unit_index = 0
    while value >= 1024 and unit_index < len(BYTE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.1f} {BYTE_UNITS[unit_index]}"


def reduction_percent(original_size: int, processed_size: int) -> float:
    """Percentage by which ``processed_size`` is smaller than ``original_size``."""
    if original_size <= 0:
        return 0.0
    return (1 - processed_size / original_size) * 100


def _plural(count: int) -> str:
    return "file" if count == 1 else "files"


def generate_batch_summary(result: BatchResult, operation_name: str = "Processed") -> str:
    """
    Build the completion message for a batch.

    Zero successes yield a failure line. Otherwise the message names the
    success count, adds bytes saved and the reduction (one decimal) when both
    size totals are positive, and a failure count when any file failed.
    """
    if result.success_count == 0:
        return f"❌ Failed to {operation_name.lower()} {result.total_files} {_plural(result.total_files)}"

    summary = f"✅ {operation_name} {result.success_count} {_plural(result.success_count)}!"

    if result.total_original_size > 0 and result.total_processed_size > 0:
        savings = reduction_percent(result.total_original_size, result.total_processed_size)
        summary += f"\nSaved {format_bytes(result.saved_bytes)} ({savings:.1f}% reduction)"

    if result.failure_count > 0:
        summary += f"\n⚠️ {result.failure_count} {_plural(result.failure_count)} failed"

    return summary


def format_failure_listing(result: BatchResult, max_length: int = FAILURE_LISTING_MAX_LENGTH) -> str | None:
    """
    List failed files as ``<file>: <error>`` lines.

    Only produced for a partial failure; returns None when nothing failed or
    when every file failed (the summary already says so).
    """
    if not result.is_partial_failure:
        return None
    listing = "\n".join(f"{entry.file}: {entry.error}" for entry in result.errors)
    return listing[:max_length]
