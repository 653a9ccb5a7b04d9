"""Single-operation transforms backed by external encoders."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from ..config.constants import (
    AUDIO_BITRATE,
    AUDIO_CODEC,
    COMPRESSED_SUFFIX,
    FASTSTART_FLAGS,
    IMAGE_MAX_BUFFER,
    PDF_COMPATIBILITY_LEVEL,
    PDF_DOWNSAMPLE_TYPE,
    PDF_EXTENSION,
    PDF_MAX_BUFFER,
    PROGRESS_ANALYZING,
    PROGRESS_COMPLETE,
    PROGRESS_FINALIZING,
    PROGRESS_TRANSFORMING,
    RESIZED_SUFFIX,
    VIDEO_CODEC,
    VIDEO_CRF,
    VIDEO_EXTENSION,
    VIDEO_MAX_BUFFER,
    VIDEO_PRESET,
    WEBP_CODEC,
    WEBP_COMPRESS_COMPRESSION_LEVEL,
    WEBP_COMPRESS_QUALITY,
    WEBP_EXTENSION,
    WEBP_RESIZE_COMPRESSION_LEVEL,
    WEBP_RESIZE_QUALITY,
)
from .base import (
    FileCategory,
    OperationStage,
    OutputNotProducedError,
    ProcessingError,
    ProcessingResult,
    null_progress,
)
from .presets import get_pdf_settings
from .runner import ToolRunner
from .tool_locator import ToolId

if TYPE_CHECKING:
    from collections.abc import Callable

    from .base import CancellationToken, ProgressSink
    from .presets import PdfQualitySettings, ResizePreset
    from .tool_locator import ToolLocator

LOG = logging.getLogger(__name__)


def output_path_for(input_path: Path, suffix: str, extension: str) -> Path:
    """Sibling output path: ``<dir>/<stem><suffix><extension>``."""
    return input_path.with_name(f"{input_path.stem}{suffix}{extension}")


def _file_signature(path: Path) -> tuple[int, int] | None:
    """Modification time and size, or None when nothing is there."""
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size


def bounded_scale_filter(max_width: int, max_height: int) -> str:
    """Fit within the box, keep aspect ratio, never upscale beyond the source."""
    return f"scale='min({max_width},iw)':'min({max_height},ih)':force_original_aspect_ratio=decrease"


def image_scale_filter(preset: ResizePreset) -> str:
    """Scale filter for still images. Images always use bounded fitting."""
    return bounded_scale_filter(*preset.bounds)


def video_scale_filter(preset: ResizePreset) -> str:
    """Scale filter for video. Exact presets are padded (centered) to the full frame."""
    if preset.is_exact:
        width, height = preset.bounds
        return (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
        )
    return bounded_scale_filter(*preset.bounds)


def build_image_command(
    ffmpeg: str,
    input_file: Path,
    output_file: Path,
    *,
    quality: int,
    compression_level: int,
    scale_filter: str | None = None,
) -> list[str]:
    """Build the FFmpeg command that re-encodes a still image to WebP."""
    cmd = [ffmpeg, "-i", str(input_file)]
    if scale_filter:
        cmd.extend(["-vf", scale_filter])
    cmd.extend(
        [
            "-c:v",
            WEBP_CODEC,
            "-quality",
            str(quality),
            "-compression_level",
            str(compression_level),
            "-y",
            str(output_file),
        ]
    )
    return cmd


def build_video_command(
    ffmpeg: str,
    input_file: Path,
    output_file: Path,
    *,
    scale_filter: str | None = None,
) -> list[str]:
    """Build the FFmpeg command for a web-delivery H.264 re-encode."""
    cmd = [ffmpeg, "-i", str(input_file)]
    if scale_filter:
        cmd.extend(["-vf", scale_filter])
    cmd.extend(
        [
            "-c:v",
            VIDEO_CODEC,
            "-preset",
            VIDEO_PRESET,
            "-crf",
            str(VIDEO_CRF),
            "-c:a",
            AUDIO_CODEC,
            "-b:a",
            AUDIO_BITRATE,
            "-movflags",
            FASTSTART_FLAGS,
            "-y",
            str(output_file),
        ]
    )
    return cmd


def build_pdf_command(ghostscript: str, input_file: Path, output_file: Path, settings: PdfQualitySettings) -> list[str]:
    """Build the Ghostscript pdfwrite command for a quality tier."""
    dpi = settings.dpi
    return [
        ghostscript,
        "-sDEVICE=pdfwrite",
        f"-dPDFSETTINGS={settings.preset}",
        "-dNOPAUSE",
        "-dQUIET",
        "-dBATCH",
        f"-dCompatibilityLevel={PDF_COMPATIBILITY_LEVEL}",
        f"-dColorImageResolution={dpi}",
        f"-dGrayImageResolution={dpi}",
        f"-dMonoImageResolution={dpi}",
        f"-dColorImageDownsampleType={PDF_DOWNSAMPLE_TYPE}",
        f"-dGrayImageDownsampleType={PDF_DOWNSAMPLE_TYPE}",
        f"-dMonoImageDownsampleType={PDF_DOWNSAMPLE_TYPE}",
        "-dCompressFonts=true",
        "-dDetectDuplicateImages=true",
        "-dDownsampleColorImages=true",
        "-dDownsampleGrayImages=true",
        "-dDownsampleMonoImages=true",
        f"-sOutputFile={output_file}",
        str(input_file),
    ]


class TransformEngine(ABC):
    """One external-tool operation per call, always returning a ProcessingResult."""

    @abstractmethod
    def resize_image(
        self, input_path: Path, preset: ResizePreset, progress: ProgressSink = null_progress
    ) -> ProcessingResult:
        """Bounded-fit resize of a still image."""

    @abstractmethod
    def resize_video(
        self, input_path: Path, preset: ResizePreset, progress: ProgressSink = null_progress
    ) -> ProcessingResult:
        """Resize a video, padding exact presets to the full frame."""

    @abstractmethod
    def compress_image(self, input_path: Path, progress: ProgressSink = null_progress) -> ProcessingResult:
        """Re-encode a still image for the web."""

    @abstractmethod
    def compress_video(self, input_path: Path, progress: ProgressSink = null_progress) -> ProcessingResult:
        """Re-encode a video for the web."""

    @abstractmethod
    def compress_pdf(self, input_path: Path, quality: str, progress: ProgressSink = null_progress) -> ProcessingResult:
        """Optimize a PDF, never returning a file larger than the source."""


class EncoderTransformEngine(TransformEngine):
    """TransformEngine that shells out to FFmpeg and Ghostscript."""

    def __init__(
        self,
        locator: ToolLocator,
        runner: ToolRunner | None = None,
        *,
        max_buffer: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.locator = locator
        self.runner = runner or ToolRunner()
        self.max_buffer = max_buffer
        self.cancel_token = cancel_token

    def resize_image(
        self, input_path: Path, preset: ResizePreset, progress: ProgressSink = null_progress
    ) -> ProcessingResult:
        """Resize an image into ``<stem>.resized.webp``."""
        output_path = output_path_for(input_path, RESIZED_SUFFIX, WEBP_EXTENSION)
        return self._transform(
            input_path,
            output_path,
            tool=ToolId.FFMPEG,
            file_type=FileCategory.IMAGE,
            stage=OperationStage.RESIZING,
            stage_message=f"Resizing to {preset.description}",
            build=lambda exe: build_image_command(
                exe,
                input_path,
                output_path,
                quality=WEBP_RESIZE_QUALITY,
                compression_level=WEBP_RESIZE_COMPRESSION_LEVEL,
                scale_filter=image_scale_filter(preset),
            ),
            max_buffer=IMAGE_MAX_BUFFER,
            progress=progress,
            metadata={"operation": "resize", "preset": preset.name},
        )

    def resize_video(
        self, input_path: Path, preset: ResizePreset, progress: ProgressSink = null_progress
    ) -> ProcessingResult:
        """Resize a video into ``<stem>.resized.mp4``."""
        output_path = output_path_for(input_path, RESIZED_SUFFIX, VIDEO_EXTENSION)
        return self._transform(
            input_path,
            output_path,
            tool=ToolId.FFMPEG,
            file_type=FileCategory.VIDEO,
            stage=OperationStage.RESIZING,
            stage_message=f"Resizing to {preset.description}",
            build=lambda exe: build_video_command(
                exe, input_path, output_path, scale_filter=video_scale_filter(preset)
            ),
            max_buffer=VIDEO_MAX_BUFFER,
            progress=progress,
            metadata={"operation": "resize", "preset": preset.name},
        )

    def compress_image(self, input_path: Path, progress: ProgressSink = null_progress) -> ProcessingResult:
        """Compress an image into ``<stem>.min.webp``."""
        output_path = output_path_for(input_path, COMPRESSED_SUFFIX, WEBP_EXTENSION)
        return self._transform(
            input_path,
            output_path,
            tool=ToolId.FFMPEG,
            file_type=FileCategory.IMAGE,
            stage=OperationStage.COMPRESSING,
            stage_message="Converting to WebP",
            build=lambda exe: build_image_command(
                exe,
                input_path,
                output_path,
                quality=WEBP_COMPRESS_QUALITY,
                compression_level=WEBP_COMPRESS_COMPRESSION_LEVEL,
            ),
            max_buffer=IMAGE_MAX_BUFFER,
            progress=progress,
            metadata={"operation": "compress"},
        )

    def compress_video(self, input_path: Path, progress: ProgressSink = null_progress) -> ProcessingResult:
        """Compress a video into ``<stem>.min.mp4``."""
        output_path = output_path_for(input_path, COMPRESSED_SUFFIX, VIDEO_EXTENSION)
        return self._transform(
            input_path,
            output_path,
            tool=ToolId.FFMPEG,
            file_type=FileCategory.VIDEO,
            stage=OperationStage.COMPRESSING,
            stage_message="Encoding H.264",
            build=lambda exe: build_video_command(exe, input_path, output_path),
            max_buffer=VIDEO_MAX_BUFFER,
            progress=progress,
            metadata={"operation": "compress"},
        )

    def compress_pdf(self, input_path: Path, quality: str, progress: ProgressSink = null_progress) -> ProcessingResult:
        """
        Optimize a PDF into ``<stem>.min.pdf``.

        If the optimized file is not strictly smaller, it is discarded and the
        original file is reported as the output with an unchanged size.
        """
        settings = get_pdf_settings(quality)
        output_path = output_path_for(input_path, COMPRESSED_SUFFIX, PDF_EXTENSION)
        return self._transform(
            input_path,
            output_path,
            tool=ToolId.GHOSTSCRIPT,
            file_type=FileCategory.PDF,
            stage=OperationStage.COMPRESSING,
            stage_message=f"Optimizing with {settings.description}",
            build=lambda exe: build_pdf_command(exe, input_path, output_path, settings),
            max_buffer=PDF_MAX_BUFFER,
            progress=progress,
            metadata={"operation": "compress", "pdf_quality": settings.preset, "dpi": settings.dpi},
            size_guard=True,
        )

    def _transform(  # noqa: PLR0913
        self,
        input_path: Path,
        output_path: Path,
        *,
        tool: ToolId,
        file_type: FileCategory,
        stage: OperationStage,
        stage_message: str,
        build: Callable[[str], list[str]],
        max_buffer: int,
        progress: ProgressSink,
        metadata: dict[str, object],
        size_guard: bool = False,
    ) -> ProcessingResult:
        """Run one external invocation and verify its output."""
        previous_output = _file_signature(output_path)
        if previous_output is not None and output_path != input_path:
            LOG.warning("%s already exists and will be overwritten", output_path)

        try:
            progress(OperationStage.ANALYZING, PROGRESS_ANALYZING, "Reading file metadata")
            original_size = input_path.stat().st_size

            executable = self.locator.resolve(tool)
            command = build(executable)

            progress(stage, PROGRESS_TRANSFORMING, stage_message)
            self.runner.run(
                command,
                tool_name=tool.display_name,
                tried_paths=self.locator.tried_paths(tool) or [executable],
                file_path=input_path,
                max_buffer=self.max_buffer or max_buffer,
                cancel_token=self.cancel_token,
            )

            progress(OperationStage.FINALIZING, PROGRESS_FINALIZING, f"Saving {output_path.name}")
            if not output_path.exists():
                msg = f"Output file not created: {output_path}"
                raise OutputNotProducedError(msg, file_path=input_path)

            processed_size = output_path.stat().st_size

            if size_guard and processed_size >= original_size:
                LOG.info(
                    "%s is already optimized (%d >= %d bytes), keeping original",
                    input_path.name,
                    processed_size,
                    original_size,
                )
                output_path.unlink()
                progress(OperationStage.FINALIZING, PROGRESS_COMPLETE, "Original file is already optimized")
                return ProcessingResult(
                    source_file=input_path,
                    success=True,
                    output_path=input_path,
                    original_size=original_size,
                    processed_size=original_size,
                    file_type=file_type,
                    metadata={**metadata, "already_optimized": True},
                )

            progress(OperationStage.FINALIZING, PROGRESS_COMPLETE, "Complete")
            LOG.info("%s -> %s (%d -> %d bytes)", input_path.name, output_path.name, original_size, processed_size)
            return ProcessingResult(
                source_file=input_path,
                success=True,
                output_path=output_path,
                original_size=original_size,
                processed_size=processed_size,
                file_type=file_type,
                metadata=metadata,
            )

        except (ProcessingError, OSError) as e:
            if _file_signature(output_path) != previous_output:
                self._discard_partial_output(input_path, output_path)
            LOG.warning("%s failed for %s: %s", metadata.get("operation", "transform"), input_path.name, e)
            return ProcessingResult.failure(input_path, str(e), file_type, **metadata)

    @staticmethod
    def _discard_partial_output(input_path: Path, output_path: Path) -> None:
        if output_path == input_path:
            return
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            LOG.warning("Could not remove partial output %s: %s", output_path, e)
