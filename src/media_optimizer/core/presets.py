"""Resize presets, compression modes and PDF quality tiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .base import FileCategory

LOG = logging.getLogger(__name__)

ORIGINAL_PRESET_NAME = "Original"


class CompressionMode(Enum):
    """How aggressively to optimize."""

    ORIGINAL = "original"
    MAX_OPTIMIZE = "max"
    MINIMUM_OPTIMIZE = "minimum"


@dataclass(frozen=True)
class ResizePreset:
    """
    Named target geometry.

    A preset is either bounded (``max_width``/``max_height``: fit within the
    bounds, keep the aspect ratio, never upscale) or exact (``width``/``height``:
    scale to fit and, for video, pad to the exact frame).
    """

    name: str
    description: str
    max_width: int | None = None
    max_height: int | None = None
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        """Require exactly one geometry."""
        bounded = self.max_width is not None and self.max_height is not None
        exact = self.width is not None and self.height is not None
        if bounded == exact:
            msg = f"Preset '{self.name}' must define either max_width/max_height or width/height"
            raise ValueError(msg)

    @property
    def is_exact(self) -> bool:
        """Whether this preset targets exact output dimensions."""
        return self.width is not None and self.height is not None

    @property
    def bounds(self) -> tuple[int, int]:
        """Target box as (width, height), whichever geometry the preset uses."""
        if self.is_exact:
            return self.width, self.height  # type: ignore[return-value]
        return self.max_width, self.max_height  # type: ignore[return-value]


IMAGE_PRESETS: tuple[ResizePreset, ...] = (
    ResizePreset("2K", "2560px (Ultra-wide/Hero)", max_width=2560, max_height=2560),
    ResizePreset("Large", "1920px (max dimension)", max_width=1920, max_height=1920),
    ResizePreset("Medium", "1280px (recommended for web)", max_width=1280, max_height=1280),
    ResizePreset("Small", "800px", max_width=800, max_height=800),
    ResizePreset("Thumbnail", "400px", max_width=400, max_height=400),
)

VIDEO_PRESETS: tuple[ResizePreset, ...] = (
    ResizePreset("1440p", "2560x1440 (2K)", width=2560, height=1440),
    ResizePreset("1080p", "1920x1080 (Full HD)", width=1920, height=1080),
    ResizePreset("720p", "1280x720 (HD, recommended for web)", width=1280, height=720),
    ResizePreset("480p", "854x480 (SD)", width=854, height=480),
)

# Presets used by the "optimize for web (x2)" command
X2_IMAGE_PRESET = "2K"
X2_VIDEO_PRESET = "1440p"


def presets_for(category: FileCategory) -> tuple[ResizePreset, ...]:
    """Return the preset catalog for a file category."""
    if category == FileCategory.VIDEO:
        return VIDEO_PRESETS
    if category == FileCategory.IMAGE:
        return IMAGE_PRESETS
    return ()


def find_preset(name: str, category: FileCategory | None = None) -> ResizePreset | None:
    """
    Look up a preset by name (case-insensitive).

    ``Original`` yields ``None``, meaning "do not resize". With a category the
    search is restricted to that catalog.
    """
    if name.lower() == ORIGINAL_PRESET_NAME.lower():
        return None

    catalog = presets_for(category) if category is not None else IMAGE_PRESETS + VIDEO_PRESETS
    for preset in catalog:
        if preset.name.lower() == name.lower():
            return preset

    available = ", ".join(p.name for p in catalog)
    msg = f"Unknown resize preset '{name}'. Available: {available}"
    raise ValueError(msg)


@dataclass(frozen=True)
class PdfQualitySettings:
    """Ghostscript settings for one quality tier."""

    preset: str
    dpi: int
    description: str


PDF_QUALITY_SETTINGS: dict[str, PdfQualitySettings] = {
    "high": PdfQualitySettings("/prepress", 300, "High Quality (300 DPI, print-ready)"),
    "medium": PdfQualitySettings("/ebook", 150, "Medium Quality (150 DPI, web/email)"),
    "low": PdfQualitySettings("/screen", 72, "Low Quality (72 DPI, maximum compression)"),
}

DEFAULT_PDF_QUALITY = "medium"


def get_pdf_settings(quality: str) -> PdfQualitySettings:
    """Return the settings for a quality tier, falling back to medium for unknown tiers."""
    settings = PDF_QUALITY_SETTINGS.get(quality.lower())
    if settings is None:
        LOG.warning("Unknown PDF quality '%s', using '%s'", quality, DEFAULT_PDF_QUALITY)
        return PDF_QUALITY_SETTINGS[DEFAULT_PDF_QUALITY]
    return settings


def pdf_quality_for_mode(mode: CompressionMode | None, default: str = DEFAULT_PDF_QUALITY) -> str:
    """Map a compression mode onto a PDF quality tier."""
    if mode == CompressionMode.MAX_OPTIMIZE:
        return "low"
    if mode == CompressionMode.MINIMUM_OPTIMIZE:
        return "high"
    return default
