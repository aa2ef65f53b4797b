"""Process runner backed by :mod:`subprocess`."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from typing import Sequence

from tesswrap.exceptions import BinaryNotFoundError, ProcessFailedError
from tesswrap.process.base import ProcessResult, ProcessRunner

logger = logging.getLogger(__name__)


class SubprocessRunner(ProcessRunner):
    """Spawns each command as a fresh child process, no shell involved."""

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def spawn(
        self,
        argv: Sequence[str],
        timeout: float | None = None,
        stdin: bytes | None = None,
    ) -> ProcessResult:
        argv = [str(a) for a in argv]
        start_time = time.perf_counter()
        try:
            # subprocess.run kills the child before re-raising TimeoutExpired
            proc = subprocess.run(
                argv,
                input=stdin,
                stdin=None if stdin is not None else subprocess.DEVNULL,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            stderr = (exc.stderr or b"").decode(errors="replace").strip()
            raise ProcessFailedError(
                f"{argv[0]} timed out after {timeout}s",
                stderr=stderr or f"timed out after {timeout}s",
                argv=argv,
                timed_out=True,
            ) from None
        except FileNotFoundError:
            raise BinaryNotFoundError(argv[0]) from None
        except OSError as exc:
            raise ProcessFailedError(
                f"Could not start {argv[0]}: {exc}",
                stderr=str(exc),
                argv=argv,
            ) from exc

        duration = time.perf_counter() - start_time
        logger.debug("%s exited with %d in %.2fs", argv[0], proc.returncode, duration)
        return ProcessResult(
            argv=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or b"",
            stderr=proc.stderr or b"",
            duration=duration,
        )
