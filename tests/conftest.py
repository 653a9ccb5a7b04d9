"""Shared fixtures and fakes for the media optimizer tests."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest

from media_optimizer.core.base import FileCategory, ProcessingResult, null_progress
from media_optimizer.core.transform import TransformEngine

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

MINIMAL_PDF = b"""%PDF-1.4
1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj
2 0 obj << /Type /Pages /Kids [3 0 R] /Count 1 >> endobj
3 0 obj << /Type /Page /Parent 2 0 R /MediaBox [0 0 72 72] >> endobj
trailer << /Root 1 0 R >>
%%EOF
"""

MP4_HEADER = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00\x00\x00\x08free"


class FakeEngine(TransformEngine):
    """Engine that writes half-sized outputs instead of running encoders."""

    def __init__(self, fail: set[str] | None = None, raise_on: set[str] | None = None) -> None:
        self.fail = fail or set()
        self.raise_on = raise_on or set()
        self.calls: list[tuple[str, Path]] = []
        self.pdf_qualities: list[str] = []

    def _produce(
        self,
        operation: str,
        input_path: Path,
        suffix: str,
        extension: str,
        file_type: FileCategory,
        **metadata: object,
    ) -> ProcessingResult:
        self.calls.append((operation, input_path))
        if operation in self.raise_on:
            msg = f"{operation} exploded"
            raise RuntimeError(msg)
        if operation in self.fail:
            return ProcessingResult.failure(input_path, f"{operation} failed", file_type)

        output_path = input_path.with_name(f"{input_path.stem}{suffix}{extension}")
        original_size = input_path.stat().st_size
        output_path.write_bytes(b"x" * max(original_size // 2, 1))
        return ProcessingResult(
            source_file=input_path,
            success=True,
            output_path=output_path,
            original_size=original_size,
            processed_size=output_path.stat().st_size,
            file_type=file_type,
            metadata=dict(metadata),
        )

    def resize_image(self, input_path, preset, progress=null_progress):
        return self._produce("resize_image", input_path, ".resized", ".webp", FileCategory.IMAGE, preset=preset.name)

    def resize_video(self, input_path, preset, progress=null_progress):
        return self._produce("resize_video", input_path, ".resized", ".mp4", FileCategory.VIDEO, preset=preset.name)

    def compress_image(self, input_path, progress=null_progress):
        return self._produce("compress_image", input_path, ".min", ".webp", FileCategory.IMAGE)

    def compress_video(self, input_path, progress=null_progress):
        return self._produce("compress_video", input_path, ".min", ".mp4", FileCategory.VIDEO)

    def compress_pdf(self, input_path, quality, progress=null_progress):
        self.pdf_qualities.append(quality)
        return self._produce("compress_pdf", input_path, ".min", ".pdf", FileCategory.PDF)


class SuffixClassifier:
    """Classifier stand-in that trusts file extensions."""

    CATEGORIES = {
        ".png": (FileCategory.IMAGE, "image/png"),
        ".jpg": (FileCategory.IMAGE, "image/jpeg"),
        ".mov": (FileCategory.VIDEO, "video/quicktime"),
        ".mp4": (FileCategory.VIDEO, "video/mp4"),
        ".pdf": (FileCategory.PDF, "application/pdf"),
        ".txt": (FileCategory.UNSUPPORTED, "text/plain"),
    }

    def classify(self, file_path: Path) -> tuple[FileCategory, str | None]:
        if not file_path.is_file():
            return FileCategory.UNSUPPORTED, None
        return self.CATEGORIES.get(file_path.suffix.lower(), (FileCategory.UNSUPPORTED, None))


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Engine fake that succeeds for every operation."""
    return FakeEngine()


@pytest.fixture
def make_file(tmp_path: Path):
    """Create a file of a given size under tmp_path."""

    def _make(name: str, size: int = 1000, content: bytes | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content if content is not None else b"\x00" * size)
        return path

    return _make
