"""Content-based file classification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import magic

from .base import FileCategory

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)

PDF_MIME = "application/pdf"

# libmagic answers that carry no real information about the content
INCONCLUSIVE_MIME_TYPES = frozenset({"", "application/octet-stream", "inode/x-empty", "text/plain"})

# Image types the encoder cannot rasterize
UNSUPPORTED_IMAGE_MIME_TYPES = frozenset({"image/svg+xml"})


def category_from_mime(mime_type: str) -> FileCategory:
    """Map a MIME type onto a file category."""
    if mime_type.startswith("image/") and mime_type not in UNSUPPORTED_IMAGE_MIME_TYPES:
        return FileCategory.IMAGE
    if mime_type.startswith("video/"):
        return FileCategory.VIDEO
    if mime_type == PDF_MIME:
        return FileCategory.PDF
    return FileCategory.UNSUPPORTED


class FileClassifier:
    """
    Assign a category by sniffing file content rather than trusting the extension.

    The only extension-based rule is the PDF fallback: a ``.pdf`` file whose
    content sniffing is inconclusive is still treated as a PDF.
    """

    def __init__(self) -> None:
        self._magic = magic.Magic(mime=True)

    def sniff(self, file_path: Path) -> str | None:
        """Return the MIME type detected from the file's content, if any."""
        try:
            mime_type = self._magic.from_file(str(file_path))
        except (OSError, ValueError, magic.MagicException) as e:
            LOG.debug("Could not sniff %s: %s", file_path, e)
            return None
        return mime_type or None

    def classify(self, file_path: Path) -> tuple[FileCategory, str | None]:
        """Classify a file. Never raises; failures degrade to UNSUPPORTED."""
        if not file_path.is_file():
            LOG.debug("Not a regular file: %s", file_path)
            return FileCategory.UNSUPPORTED, None

        mime_type = self.sniff(file_path)

        if mime_type is None or mime_type in INCONCLUSIVE_MIME_TYPES:
            if file_path.suffix.lower() == ".pdf":
                return FileCategory.PDF, PDF_MIME
            if mime_type in (None, "", "application/octet-stream", "inode/x-empty"):
                return FileCategory.UNSUPPORTED, None
            return FileCategory.UNSUPPORTED, mime_type

        category = category_from_mime(mime_type)
        LOG.debug("Classified %s as %s (%s)", file_path.name, category.value, mime_type)
        return category, mime_type
