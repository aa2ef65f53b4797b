"""Abstract base class for process runners (Strategy pattern)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence


@dataclass
class ProcessResult:
    """Captured outcome of one child process."""

    argv: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""
    duration: float = field(default=0.0, compare=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode(errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode(errors="replace")


class ProcessRunner(ABC):
    """Abstract interface that all process-spawning mechanisms must implement."""

    @abstractmethod
    def which(self, name: str) -> str | None:
        """Return the absolute path of ``name`` on the search path, or None."""
        ...

    @abstractmethod
    def spawn(
        self,
        argv: Sequence[str],
        timeout: float | None = None,
        stdin: bytes | None = None,
    ) -> ProcessResult:
        """Run ``argv`` to completion and capture both output streams.

        Args:
            argv: Executable followed by its arguments.
            timeout: Wall-clock limit in seconds, or None to wait forever.
            stdin: Bytes fed to the child's standard input.

        Returns:
            ProcessResult, whatever the exit status.

        Raises:
            ProcessFailedError: If the timeout elapses (``timed_out=True``).
        """
        ...
