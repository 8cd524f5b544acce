"""Command runner capability.

The report pipeline never spawns processes itself; it asks a CommandRunner.
SubprocessRunner is the production implementation. Tests substitute fakes.
"""

from __future__ import annotations

import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import structlog

from xcreport.config.constants import DEFAULT_MAX_OUTPUT_MB
from xcreport.core.errors import ToolInvocationError

log = structlog.get_logger()

_READ_CHUNK = 64 * 1024


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of one finished command."""

    stdout: str
    exit_code: int = 0


class CommandRunner(Protocol):
    """Runs one external command to completion.

    Implementations raise ToolInvocationError for a non-zero exit, a missing
    executable, or output beyond their ceiling.
    """

    def run(self, args: Sequence[str]) -> CommandResult: ...


class SubprocessRunner:
    """Blocking subprocess runner with a bounded stdout buffer."""

    def __init__(self, max_output_bytes: int = DEFAULT_MAX_OUTPUT_MB * 1024 * 1024) -> None:
        self.max_output_bytes = max_output_bytes

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = list(args)
        log.debug("tool.run", command=" ".join(argv))

        # stderr goes to a file so a chatty tool cannot block on a full pipe
        with tempfile.TemporaryFile() as err_file:
            try:
                proc = subprocess.Popen(argv, stdout=subprocess.PIPE, stderr=err_file)
            except OSError as e:
                raise ToolInvocationError.executable_missing(argv, str(e)) from e

            with proc:
                stdout = self._read_bounded(proc, argv)
                exit_code = proc.wait()

            err_file.seek(0)
            stderr = err_file.read().decode("utf-8", errors="replace")

        if exit_code != 0:
            log.debug("tool.failed", command=" ".join(argv), exit_code=exit_code)
            raise ToolInvocationError.command_failed(argv, exit_code, stderr)

        return CommandResult(stdout=stdout.decode("utf-8", errors="replace"), exit_code=exit_code)

    def _read_bounded(self, proc: subprocess.Popen[bytes], argv: list[str]) -> bytes:
        assert proc.stdout is not None
        chunks: list[bytes] = []
        size = 0
        while chunk := proc.stdout.read(_READ_CHUNK):
            size += len(chunk)
            if size > self.max_output_bytes:
                proc.kill()
                log.warning(
                    "tool.output_limit", command=" ".join(argv), limit=self.max_output_bytes
                )
                raise ToolInvocationError.output_limit_exceeded(argv, self.max_output_bytes)
            chunks.append(chunk)
        return b"".join(chunks)
