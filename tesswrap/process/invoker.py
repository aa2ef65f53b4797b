"""Resolve, run and classify invocations of the OCR binary.

Each call walks ``Idle -> Resolving -> Resolved -> Running -> Succeeded``.
A miss during resolution ends in BinaryNotFoundError; a non-zero exit or
an elapsed timeout ends in ProcessFailedError. Nothing is retried and no
state survives between calls.
"""

from __future__ import annotations

import logging
from typing import Sequence

from tesswrap.config import InvokerConfig
from tesswrap.exceptions import BinaryNotFoundError, ProcessFailedError
from tesswrap.process.base import ProcessResult, ProcessRunner
from tesswrap.process.subprocess_runner import SubprocessRunner

logger = logging.getLogger(__name__)


class Invoker:
    """Runs the configured binary (``tesseract`` by default) as a child process.

    Usage:
        invoker = Invoker()
        text = invoker.run(["page.png", "-", "-l", "eng"])
    """

    def __init__(
        self,
        config: InvokerConfig | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self._config = config or InvokerConfig()
        self._runner = runner or SubprocessRunner()

    @property
    def binary(self) -> str:
        return self._config.binary

    @property
    def timeout(self) -> float:
        return self._config.timeout

    def resolve(self, name: str | None = None) -> str:
        """Return the absolute path of ``name`` (the configured binary by default).

        Raises:
            BinaryNotFoundError: If no match exists on the search path.
        """
        name = name or self._config.binary
        logger.debug("Resolving %s", name)
        path = self._runner.which(name)
        if not path:
            logger.debug("Resolution of %s failed", name)
            raise BinaryNotFoundError(name)
        logger.debug("Resolved %s -> %s", name, path)
        return path

    @staticmethod
    def build_command(executable: str, args: Sequence[str] = ()) -> list[str]:
        return [executable, *(str(a) for a in args)]

    def execute(
        self,
        args: Sequence[str] = (),
        binary: str | None = None,
        timeout: float | None = None,
        stdin: bytes | None = None,
    ) -> ProcessResult:
        """Run the binary and return the full captured result.

        Raises:
            BinaryNotFoundError: If the binary cannot be resolved.
            ProcessFailedError: On a non-zero exit or when the timeout elapses.
        """
        executable = self.resolve(binary)
        argv = self.build_command(executable, args)
        if timeout is None:
            timeout = self._config.timeout

        logger.info("[INFO] Running %s", " ".join(argv))
        result = self._runner.spawn(argv, timeout=timeout, stdin=stdin)

        if not result.ok:
            stderr_text = result.stderr_text.strip()
            logger.debug("%s failed with code %d", argv[0], result.returncode)
            raise ProcessFailedError(
                f"{binary or self._config.binary} exited with code "
                f"{result.returncode}: {stderr_text}",
                stderr=stderr_text,
                returncode=result.returncode,
                argv=argv,
            )

        logger.info("[INFO] %s finished (took %.2fs)", argv[0], result.duration)
        return result

    def run(
        self,
        args: Sequence[str] = (),
        binary: str | None = None,
        timeout: float | None = None,
        text: bool = True,
        stdin: bytes | None = None,
    ) -> str | bytes:
        """Run the binary and return its standard output.

        Args:
            args: Arguments placed after the executable.
            binary: Executable name, overriding the configured one.
            timeout: Seconds to wait, overriding the configured timeout.
            text: Decode stdout; pass False for binary formats such as PDF.
            stdin: Bytes fed to the child's standard input.
        """
        result = self.execute(args, binary=binary, timeout=timeout, stdin=stdin)
        if text:
            return result.stdout_text
        return result.stdout

    def version(self) -> str:
        """Return the first line printed by ``--version``."""
        result = self.execute(["--version"])
        # tesseract < 4 prints its version banner on stderr
        output = result.stdout_text.strip() or result.stderr_text.strip()
        for line in output.splitlines():
            if line.strip():
                return line.strip()
        return ""

    def supported_languages(self) -> list[str]:
        """Return the installed language codes reported by ``--list-langs``.

        An empty listing is not an error and yields an empty list.
        """
        result = self.execute(["--list-langs"])
        output = result.stdout_text
        if not output.strip():
            output = result.stderr_text
        return parse_list_langs(output)


def parse_list_langs(output: str) -> list[str]:
    langs: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.lower().startswith("list of available languages"):
            continue
        if " " in line or "\t" in line:
            # Warnings and headers; language codes are single tokens.
            continue
        if line not in langs:
            langs.append(line)
    return langs
