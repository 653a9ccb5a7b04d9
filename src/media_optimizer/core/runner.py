"""Blocking execution of external tools with timeout, cancellation and error translation."""

from __future__ import annotations

import errno
import logging
import subprocess
import time
from typing import TYPE_CHECKING

from .base import OperationCancelledError, ToolExecutionError, ToolNotFoundError, ToolTimeoutError

if TYPE_CHECKING:
    from pathlib import Path

    from .base import CancellationToken

LOG = logging.getLogger(__name__)

# errno values the OS reports when an executable cannot be spawned at all
_SPAWN_ERRNOS = frozenset({errno.ENOENT, errno.EACCES, errno.ENOEXEC, errno.ENOTDIR})

STDERR_TAIL_LENGTH = 2000


class ToolRunner:
    """Run an external command to completion and translate its failures."""

    def __init__(self, timeout: float | None = None, poll_interval: float = 0.5) -> None:
        """Initialize runner with an optional per-invocation timeout in seconds."""
        self.timeout = timeout
        self.poll_interval = poll_interval

    def run(  # noqa: PLR0913
        self,
        command: list[str],
        *,
        tool_name: str,
        tried_paths: list[str] | None = None,
        file_path: Path | None = None,
        max_buffer: int | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> subprocess.CompletedProcess:
        """
        Run ``command`` and wait for it to exit.

        ``max_buffer`` caps the combined stdout and stderr size in UTF-8 bytes.
        It is checked once the process has exited, so the output is fully
        buffered in memory first.

        Raises:
            ToolNotFoundError: the executable could not be spawned
            ToolTimeoutError: the process outlived ``self.timeout`` and was killed
            OperationCancelledError: the cancel token was set while running
            ToolExecutionError: non-zero exit, oversized output or other start failure

        """
        if cancel_token is not None and cancel_token.cancelled:
            msg = "Processing cancelled"
            raise OperationCancelledError(msg, file_path=file_path)

        LOG.info("Running %s command: %s", tool_name, " ".join(command))
        start_time = time.time()

        try:
            process = subprocess.Popen(  # noqa: S603
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
            )
        except OSError as e:
            if isinstance(e, (FileNotFoundError, PermissionError)) or e.errno in _SPAWN_ERRNOS:
                raise ToolNotFoundError(
                    tool_name,
                    tried_paths or [command[0]],
                    file_path=file_path,
                    cause=e,
                ) from e
            msg = f"Failed to start {tool_name}: {e}"
            raise ToolExecutionError(msg, command=command, file_path=file_path) from e

        stdout, stderr = self._wait(process, command, tool_name, file_path, cancel_token, start_time)

        LOG.debug("%s command completed in %.2fs", tool_name, time.time() - start_time)

        if max_buffer is not None and len(stdout.encode()) + len(stderr.encode()) > max_buffer:
            msg = f"{tool_name} output exceeded the {max_buffer} byte buffer limit"
            raise ToolExecutionError(
                msg,
                command=command,
                return_code=process.returncode,
                file_path=file_path,
            )

        if process.returncode != 0:
            self._handle_error(process.returncode, stderr, command, tool_name, file_path)

        return subprocess.CompletedProcess(command, process.returncode, stdout, stderr)

    def _wait(  # noqa: PLR0913
        self,
        process: subprocess.Popen,
        command: list[str],
        tool_name: str,
        file_path: Path | None,
        cancel_token: CancellationToken | None,
        start_time: float,
    ) -> tuple[str, str]:
        """Collect output, killing the process on timeout or cancellation."""
        if self.timeout is None and cancel_token is None:
            stdout, stderr = process.communicate()
            return stdout or "", stderr or ""

        deadline = start_time + self.timeout if self.timeout is not None else None
        while True:
            wait = self.poll_interval if cancel_token is not None else None
            if deadline is not None:
                remaining = max(deadline - time.time(), 0.0)
                wait = remaining if wait is None else min(wait, remaining)
            try:
                stdout, stderr = process.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                if cancel_token is not None and cancel_token.cancelled:
                    self._kill(process)
                    msg = f"{tool_name} cancelled"
                    raise OperationCancelledError(msg, file_path=file_path) from None
                if deadline is not None and time.time() >= deadline:
                    self._kill(process)
                    msg = f"{tool_name} command timed out after {self.timeout:g}s"
                    raise ToolTimeoutError(msg, command=command, file_path=file_path) from None
            else:
                return stdout or "", stderr or ""

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        process.kill()
        process.communicate()

    @staticmethod
    def _handle_error(
        return_code: int,
        stderr: str,
        command: list[str],
        tool_name: str,
        file_path: Path | None,
    ) -> None:
        """Raise a ToolExecutionError describing a non-zero exit."""
        error_msg = f"{tool_name} failed with return code {return_code}"
        if stderr.strip():
            error_msg += f": {stderr.strip()[-STDERR_TAIL_LENGTH:]}"

        raise ToolExecutionError(
            error_msg,
            command=command,
            return_code=return_code,
            stderr=stderr,
            file_path=file_path,
        )
