"""Failure table display for batch commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core import BatchError

# Constants for table formatting
MAX_FILENAME_LENGTH = 37
FILENAME_TRUNCATE_LENGTH = 34
MAX_ERROR_MSG_LENGTH = 60
ERROR_MSG_TRUNCATE_LENGTH = 57

TIPS = {
    "image": "💡 TIP: Check that FFmpeg was built with libwebp support",
    "video": "💡 TIP: Check that FFmpeg was built with libx264, or raise global.tool_timeout for long videos",
    "pdf": "💡 TIP: Check the Ghostscript installation or try a different --quality",
    "media": "💡 TIP: Run 'media-optimizer tools' to see where FFmpeg and Ghostscript were looked up",
}


def print_failure_table(errors: list[BatchError], media_type: str = "media") -> None:
    """
    Print a simple table of failed files.

    Args:
        errors: Failure entries of a BatchResult
        media_type: Kind of media being processed ("image", "video", "pdf" or "media")

    """
    if not errors:
        return

    print("\n" + "=" * 100)
    print(f"{'PROCESSING FAILURES':^100}")
    print("=" * 100)
    print(f"Total failed: {len(errors)} files\n")

    print(f"{'FILE':<40} | {'ERROR':<57}")
    print("-" * 100)

    for entry in errors:
        filename = entry.file
        if len(filename) > MAX_FILENAME_LENGTH:
            filename = filename[:FILENAME_TRUNCATE_LENGTH] + "..."

        # Multi-line encoder output is reduced to its first line
        error_msg = (entry.error or "Unknown error").splitlines()[0]
        if len(error_msg) > MAX_ERROR_MSG_LENGTH:
            error_msg = error_msg[:ERROR_MSG_TRUNCATE_LENGTH] + "..."

        print(f"{filename:<40} | {error_msg:<57}")

    print(f"\n{TIPS.get(media_type, TIPS['media'])}\n")
