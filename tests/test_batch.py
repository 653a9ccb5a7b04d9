"""Tests for sequential batch processing."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from conftest import PNG_BYTES, FakeEngine, SuffixClassifier

from media_optimizer.core.base import (
    CancellationToken,
    FileCategory,
    OperationStage,
    ProcessingResult,
)
from media_optimizer.core.batch import CANCELLED_MESSAGE, BatchCoordinator, overall_percentage
from media_optimizer.core.classifier import FileClassifier
from media_optimizer.core.config import ConfigManager, ProcessingOptions
from media_optimizer.core.file_manager import OutputPlacer
from media_optimizer.core.orchestrator import StageOrchestrator

COMPRESS = ProcessingOptions(compress=True)


def _coordinator(engine: FakeEngine, placer: OutputPlacer | None = None, **kwargs: object) -> BatchCoordinator:
    return BatchCoordinator(SuffixClassifier(), StageOrchestrator(engine), placer, **kwargs)  # type: ignore[arg-type]


def test_mixed_batch_counts_and_order(make_file, fake_engine: FakeEngine) -> None:
    """An unsupported file in the middle fails alone; the others succeed."""
    files = [make_file("a.png", 1000), make_file("notes.txt", 50), make_file("b.png", 3000)]

    result = _coordinator(fake_engine).process_batch(files, COMPRESS)

    assert result.total_files == 3
    assert result.success_count == 2
    assert result.failure_count == 1
    assert result.success_count + result.failure_count == result.total_files
    assert [r.file_name for r in result.results] == ["a.png", "b.png"]
    assert result.errors[0].file == "notes.txt"
    assert result.errors[0].error == (
        "Unsupported file type: text/plain. Only images, videos, and PDFs are supported."
    )
    assert result.total_original_size == 4000
    assert result.total_processed_size == 2000
    assert [call[1].name for call in fake_engine.calls] == ["a.png", "b.png"]


def test_unknown_type_message(make_file, fake_engine: FakeEngine) -> None:
    """Files without a detectable type are reported as unknown."""
    result = _coordinator(fake_engine).process_batch([make_file("data.xyz")], COMPRESS)

    assert result.errors[0].error.startswith("Unsupported file type: unknown.")


def test_missing_file_is_a_failure(tmp_path: Path, fake_engine: FakeEngine) -> None:
    """A path that does not exist fails without stopping the batch."""
    result = _coordinator(fake_engine).process_batch([tmp_path / "gone.png"], COMPRESS)

    assert result.failure_count == 1
    assert result.errors[0].file == "gone.png"


def test_every_file_failing(make_file) -> None:
    """A batch where every file fails still completes."""
    engine = FakeEngine(fail={"compress_image"})
    files = [make_file("a.png"), make_file("b.png")]

    result = _coordinator(engine).process_batch(files, COMPRESS)

    assert result.success_count == 0
    assert result.failure_count == 2
    assert [e.error for e in result.errors] == ["compress_image failed", "compress_image failed"]


def test_empty_batch(fake_engine: FakeEngine) -> None:
    """No files gives an empty, consistent result."""
    result = _coordinator(fake_engine).process_batch([], COMPRESS)

    assert result.total_files == 0
    assert result.success_count == result.failure_count == 0


def test_outputs_moved_into_output_folder(make_file, fake_engine: FakeEngine, tmp_path: Path) -> None:
    """With an output folder configured, results land in <source-dir>/<folder>/."""
    source = make_file("a.png", 1000)

    result = _coordinator(fake_engine, OutputPlacer("optimized")).process_batch([source], COMPRESS)

    placed = tmp_path / "optimized" / "a.min.webp"
    assert result.results[0].output_path == placed
    assert placed.exists()
    assert not (tmp_path / "a.min.webp").exists()
    assert source.exists()


def test_outputs_stay_beside_source_without_folder(make_file, fake_engine: FakeEngine, tmp_path: Path) -> None:
    """Without an output folder the result stays where it was produced."""
    source = make_file("a.png")

    result = _coordinator(fake_engine).process_batch([source], COMPRESS)

    assert result.results[0].output_path == tmp_path / "a.min.webp"


def test_orchestrator_exception_is_isolated(make_file) -> None:
    """An exception for one file is recorded and the next file still runs."""
    files = [make_file("a.png"), make_file("b.png")]
    orchestrator = Mock(spec=StageOrchestrator)

    def process(file_path: Path, category: FileCategory, *_args: object, **_kwargs: object) -> ProcessingResult:
        if file_path.name == "a.png":
            msg = "disk on fire"
            raise RuntimeError(msg)
        output = file_path.with_name("b.min.webp")
        output.write_bytes(b"x")
        return ProcessingResult(file_path, True, output, 1000, 1, file_type=category)

    orchestrator.process.side_effect = process

    result = BatchCoordinator(SuffixClassifier(), orchestrator).process_batch(files, COMPRESS)  # type: ignore[arg-type]

    assert result.failure_count == 1
    assert result.errors[0].error == "disk on fire"
    assert result.success_count == 1


def test_success_without_output_file_is_failure(make_file) -> None:
    """A reported success whose output is missing counts as a failure."""
    source = make_file("a.png")
    orchestrator = Mock(spec=StageOrchestrator)
    orchestrator.process.return_value = ProcessingResult(source, True, source.with_name("a.min.webp"), 10, 5)

    result = BatchCoordinator(SuffixClassifier(), orchestrator).process_batch([source], COMPRESS)  # type: ignore[arg-type]

    assert result.success_count == 0
    assert "Output file missing after processing" in result.errors[0].error


def test_placement_failure_is_recorded(make_file, fake_engine: FakeEngine) -> None:
    """A failed move fails that file only and removes its unplaced output."""
    files = [make_file("a.png"), make_file("b.png")]

    with patch("media_optimizer.core.file_manager.shutil.move", side_effect=[OSError("read-only"), None]):
        result = _coordinator(fake_engine, OutputPlacer("out")).process_batch(files, COMPRESS)

    assert result.failure_count == 1
    assert result.errors[0].file == "a.png"
    assert "read-only" in result.errors[0].error
    assert result.success_count == 1
    assert not files[0].with_name("a.min.webp").exists()
    assert files[0].exists()
    assert result.results[0].output_path == files[1].parent / "out" / "b.min.webp"


def test_cancelled_before_start(make_file, fake_engine: FakeEngine) -> None:
    """Every file of a cancelled batch is recorded as cancelled."""
    token = CancellationToken()
    token.cancel()
    files = [make_file("a.png"), make_file("b.png")]

    result = _coordinator(fake_engine, cancel_token=token).process_batch(files, COMPRESS)

    assert result.failure_count == 2
    assert {e.error for e in result.errors} == {CANCELLED_MESSAGE}
    assert fake_engine.calls == []


def test_cancel_mid_batch_finishes_current_file(make_file, fake_engine: FakeEngine) -> None:
    """Cancelling during a file stops the batch before the next one."""
    token = CancellationToken()
    files = [make_file("a.png"), make_file("b.png"), make_file("c.png")]

    def progress(file_index: int, *_args: object) -> None:
        if file_index == 0:
            token.cancel()

    result = _coordinator(fake_engine, cancel_token=token).process_batch(files, COMPRESS, progress=progress)

    assert result.success_count == 1
    assert [e.file for e in result.errors] == ["b.png", "c.png"]
    assert result.success_count + result.failure_count == result.total_files


def test_progress_reports_file_index_and_overall(make_file, fake_engine: FakeEngine) -> None:
    """Progress events carry the 0-based file index and the batch-wide percentage."""
    files = [make_file("a.png"), make_file("b.png")]
    events: list[tuple[int, int, OperationStage, float]] = []

    def progress(file_index: int, file_count: int, stage: OperationStage, overall: float, _message: str = "") -> None:
        events.append((file_index, file_count, stage, overall))

    _coordinator(fake_engine).process_batch(files, COMPRESS, progress=progress)

    assert events == [
        (0, 2, OperationStage.ANALYZING, 0.0),
        (1, 2, OperationStage.ANALYZING, 50.0),
    ]


def test_pdf_quality_is_forwarded(make_file, fake_engine: FakeEngine) -> None:
    """The batch-level PDF tier reaches the engine."""
    document = make_file("report.pdf")

    _coordinator(fake_engine).process_batch([document], COMPRESS, pdf_quality="low")

    assert fake_engine.pdf_qualities == ["low"]


def test_real_classifier_rejects_text_between_images(tmp_path: Path, fake_engine: FakeEngine) -> None:
    """Content sniffing drives the batch, not the extension."""
    first = tmp_path / "first.png"
    first.write_bytes(PNG_BYTES)
    notes = tmp_path / "notes.txt"
    notes.write_text("not an image\n")
    disguised = tmp_path / "second.txt"
    disguised.write_bytes(PNG_BYTES)

    coordinator = BatchCoordinator(FileClassifier(), StageOrchestrator(fake_engine))
    result = coordinator.process_batch([first, notes, disguised], COMPRESS)

    assert result.success_count == 2
    assert [e.file for e in result.errors] == ["notes.txt"]


@pytest.mark.parametrize(
    ("file_index", "file_count", "file_percentage", "expected"),
    [
        (0, 1, 50, 50.0),
        (0, 4, 100, 25.0),
        (1, 2, 50, 75.0),
        (3, 4, 100, 100.0),
        (0, 2, 150, 50.0),
        (1, 2, -10, 50.0),
        (0, 0, 50, 100.0),
    ],
)
def test_overall_percentage(file_index: int, file_count: int, file_percentage: float, expected: float) -> None:
    """File progress is mapped into its share of the batch and clamped."""
    assert overall_percentage(file_index, file_count, file_percentage) == pytest.approx(expected)


def test_from_config_wires_pipeline(tmp_path: Path) -> None:
    """The configured folder name and timeout reach the pipeline components."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("global:\n  output_folder_name: web\n  tool_timeout: 60\n")
    manager = ConfigManager(config_path)

    coordinator = BatchCoordinator.from_config(manager)

    assert coordinator.placer.output_folder_name == "web"
    assert isinstance(coordinator.classifier, FileClassifier)
    assert coordinator.orchestrator.engine.runner.timeout == 60
