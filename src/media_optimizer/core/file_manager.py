"""Placement of finished artifacts into the output folder."""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .base import FilesystemError

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


@dataclass
class FileOperation:
    """Record of one placement."""

    operation_type: str
    source_path: Path
    target_path: Path | None = None
    success: bool = False
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp == 0.0:
            self.timestamp = time.time()


class OutputPlacer:
    """Move produced artifacts into ``<source-dir>/<folder-name>/`` when a folder name is configured."""

    def __init__(self, output_folder_name: str = "") -> None:
        """Initialize placer; an empty folder name leaves outputs where they were produced."""
        self.output_folder_name = output_folder_name.strip()
        self.session_operations: list[FileOperation] = []

    @property
    def enabled(self) -> bool:
        """Whether outputs are relocated at all."""
        return bool(self.output_folder_name)

    def target_dir(self, source_file: Path) -> Path:
        """Output directory for a given source file."""
        return source_file.parent / self.output_folder_name

    def place(self, output_path: Path, source_file: Path) -> Path:
        """
        Move ``output_path`` into the output folder next to ``source_file``.

        Returns the final path. Moving a file onto its own location is a no-op.
        The source file itself is never moved: when an operation reports the
        original as its output (an already optimal PDF), it stays where it is.
        """
        if not self.enabled or output_path == source_file:
            return output_path

        target_dir = self.target_dir(source_file)
        target_path = target_dir / output_path.name
        if target_path == output_path:
            return output_path

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(output_path), str(target_path))
        except (OSError, shutil.Error) as e:
            self.session_operations.append(
                FileOperation(operation_type="place", source_path=output_path, target_path=target_path)
            )
            msg = f"Failed to move {output_path.name} into {target_dir}: {e}"
            raise FilesystemError(msg, file_path=source_file, cause=e) from e

        self.session_operations.append(
            FileOperation(operation_type="place", source_path=output_path, target_path=target_path, success=True)
        )
        LOG.debug("Moved %s -> %s", output_path, target_path)
        return target_path

    def get_session_summary(self) -> dict[str, Any]:
        """Get summary of placements in this session."""
        successful_ops = [op for op in self.session_operations if op.success]
        failed_ops = [op for op in self.session_operations if not op.success]

        return {
            "output_folder_name": self.output_folder_name,
            "total_operations": len(self.session_operations),
            "successful_operations": len(successful_ops),
            "failed_operations": len(failed_ops),
            "operations": self.session_operations,
        }
