"""Typed failures raised by the option model and the process invoker."""

from __future__ import annotations

from typing import Any, Sequence


class OCRError(Exception):
    """Base class for every error raised by tesswrap."""


class BinaryNotFoundError(OCRError, FileNotFoundError):
    """The requested executable is not on the search path."""

    def __init__(self, binary: str) -> None:
        self.binary = binary
        super().__init__(f"Could not find binary: {binary}")


class ResourceNotFoundError(OCRError, FileNotFoundError):
    """An input image, list file, dictionary or tessdata directory is missing."""

    def __init__(self, path: str, kind: str = "file") -> None:
        self.path = path
        self.kind = kind
        super().__init__(f"Could not locate {kind}: {path}")


class InvalidOptionError(OCRError, ValueError):
    """A configuration value is outside its documented domain."""

    def __init__(self, option: str, value: Any, message: str) -> None:
        self.option = option
        self.value = value
        super().__init__(message)


class ProcessFailedError(OCRError, RuntimeError):
    """The child process exited non-zero or ran past its timeout."""

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        returncode: int | None = None,
        argv: Sequence[str] = (),
        timed_out: bool = False,
    ) -> None:
        self.stderr = stderr
        self.returncode = returncode
        self.argv = list(argv)
        self.timed_out = timed_out
        super().__init__(message)
