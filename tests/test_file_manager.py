"""Tests for output placement."""

from pathlib import Path
from unittest.mock import patch

import pytest

from media_optimizer.core.base import FilesystemError
from media_optimizer.core.file_manager import OutputPlacer


def test_disabled_placer_leaves_output(tmp_path: Path) -> None:
    """An empty folder name means no relocation."""
    output = tmp_path / "a.min.webp"
    output.write_bytes(b"x")

    placer = OutputPlacer("  ")

    assert not placer.enabled
    assert placer.place(output, tmp_path / "a.png") == output
    assert output.exists()


def test_place_moves_into_folder_next_to_source(tmp_path: Path) -> None:
    """The folder is created beside the source file."""
    source = tmp_path / "photos" / "a.png"
    source.parent.mkdir()
    source.write_bytes(b"src")
    output = source.with_name("a.min.webp")
    output.write_bytes(b"out")

    placer = OutputPlacer("optimized")
    placed = placer.place(output, source)

    assert placed == tmp_path / "photos" / "optimized" / "a.min.webp"
    assert placed.read_bytes() == b"out"
    assert not output.exists()
    assert placer.get_session_summary()["successful_operations"] == 1


def test_source_reported_as_output_is_not_moved(tmp_path: Path) -> None:
    """An already optimal PDF keeps its place."""
    source = tmp_path / "report.pdf"
    source.write_bytes(b"%PDF")

    placed = OutputPlacer("optimized").place(source, source)

    assert placed == source
    assert source.exists()
    assert not (tmp_path / "optimized").exists()


def test_output_already_in_folder_is_left_alone(tmp_path: Path) -> None:
    """Moving a file onto its own location is a no-op."""
    target_dir = tmp_path / "optimized"
    target_dir.mkdir()
    output = target_dir / "a.min.webp"
    output.write_bytes(b"x")

    assert OutputPlacer("optimized").place(output, tmp_path / "a.png") == output
    assert output.exists()


def test_move_failure_raises_filesystem_error(tmp_path: Path) -> None:
    """A failed move is reported with the source file attached."""
    source = tmp_path / "a.png"
    output = tmp_path / "a.min.webp"
    output.write_bytes(b"x")
    placer = OutputPlacer("optimized")

    with patch("media_optimizer.core.file_manager.shutil.move", side_effect=OSError("disk full")):
        with pytest.raises(FilesystemError) as exc_info:
            placer.place(output, source)

    assert exc_info.value.file_path == source
    assert "disk full" in str(exc_info.value)
    summary = placer.get_session_summary()
    assert summary["failed_operations"] == 1
    assert summary["successful_operations"] == 0
