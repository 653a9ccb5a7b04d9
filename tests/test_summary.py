"""Tests for batch summary formatting."""

from pathlib import Path

import pytest

from media_optimizer.core.base import BatchResult, ProcessingResult
from media_optimizer.core.summary import (
    format_bytes,
    format_failure_listing,
    generate_batch_summary,
    reduction_percent,
)


def _batch(successes: list[tuple[int, int]], failures: list[tuple[str, str]] | None = None) -> BatchResult:
    failures = failures or []
    batch = BatchResult(total_files=len(successes) + len(failures))
    for index, (original, processed) in enumerate(successes):
        batch.add_success(
            ProcessingResult(
                source_file=Path(f"file{index}.png"),
                success=True,
                original_size=original,
                processed_size=processed,
            )
        )
    for name, error in failures:
        batch.add_failure(name, error)
    return batch


@pytest.mark.parametrize(
    ("num_bytes", "expected"),
    [
        (0, "0 B"),
        (512, "512.0 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1.0 MB"),
        (int(2.5 * 1024 * 1024 * 1024), "2.5 GB"),
        (5 * 1024**4, "5120.0 GB"),
        (-2048, "-2.0 KB"),
    ],
)
def test_format_bytes(num_bytes: int, expected: str) -> None:
    """Byte counts use 1024-based units with one decimal."""
    assert format_bytes(num_bytes) == expected


def test_reduction_percent() -> None:
    """Reduction is relative to the original size."""
    assert reduction_percent(1000, 250) == pytest.approx(75.0)
    assert reduction_percent(0, 100) == 0.0


def test_summary_all_succeeded_with_savings() -> None:
    """Full success names the count and the savings."""
    batch = _batch([(2 * 1024 * 1024, 1024 * 1024), (1024 * 1024, 512 * 1024)])

    assert generate_batch_summary(batch, "Compressed") == "✅ Compressed 2 files!\nSaved 1.5 MB (50.0% reduction)"


def test_summary_single_file() -> None:
    """One file is singular."""
    batch = _batch([(3000, 1000)])

    summary = generate_batch_summary(batch, "Resized")

    assert summary.startswith("✅ Resized 1 file!")
    assert "(66.7% reduction)" in summary


def test_summary_partial_failure() -> None:
    """Failures are counted on their own line."""
    batch = _batch([(1000, 500), (1000, 500)], [("notes.txt", "Unsupported file type: text/plain")])

    lines = generate_batch_summary(batch, "Optimized for web").splitlines()

    assert lines[0] == "✅ Optimized for web 2 files!"
    assert lines[-1] == "⚠️ 1 file failed"


def test_summary_all_failed() -> None:
    """Zero successes produce the failure line for the whole batch."""
    batch = _batch([], [("a.png", "boom"), ("b.png", "boom")])

    assert generate_batch_summary(batch, "Compressed") == "❌ Failed to compressed 2 files"


def test_summary_without_sizes_skips_savings() -> None:
    """No savings line when there are no sizes to compare."""
    batch = _batch([(0, 0)])

    assert generate_batch_summary(batch, "Compressed") == "✅ Compressed 1 file!"


def test_summary_reports_growth_as_negative() -> None:
    """A batch that grew shows negative savings."""
    batch = _batch([(1000, 1500)])

    assert "Saved -500.0 B (-50.0% reduction)" in generate_batch_summary(batch, "Compressed")


def test_failure_listing_only_for_partial_failure() -> None:
    """The listing is shown when some, but not all, files failed."""
    assert format_failure_listing(_batch([(10, 5)])) is None
    assert format_failure_listing(_batch([], [("a.png", "boom")])) is None

    listing = format_failure_listing(_batch([(10, 5)], [("a.png", "boom"), ("b.mov", "FFmpeg not found")]))

    assert listing == "a.png: boom\nb.mov: FFmpeg not found"


def test_failure_listing_truncated() -> None:
    """Long listings are cut to the maximum length."""
    failures = [(f"file{i}.png", "x" * 50) for i in range(10)]
    listing = format_failure_listing(_batch([(10, 5)], failures))

    assert listing is not None
    assert len(listing) == 200
