"""Shared fixtures: a scripted process runner so no test spawns tesseract."""

from __future__ import annotations

from typing import Callable, Sequence

import pytest

from tesswrap.config import InvokerConfig
from tesswrap.ocr.engine import TesseractEngine
from tesswrap.ocr.options import TesseractOptions
from tesswrap.process.base import ProcessResult, ProcessRunner
from tesswrap.process.invoker import Invoker

LIST_LANGS_OUTPUT = (
    'List of available languages in "/usr/share/tesseract-ocr/5/tessdata/" (5):\n'
    "deu\neng\nfra\nita\nosd\n"
)


class FakeRunner(ProcessRunner):
    """Answers ``--list-langs`` and ``--version`` and records every spawn."""

    def __init__(self, binaries: Sequence[str] = ("tesseract",)) -> None:
        self.binaries = set(binaries)
        self.calls: list[list[str]] = []
        self.stdin: list[bytes | None] = []
        self.list_langs = LIST_LANGS_OUTPUT
        self.version = "tesseract 5.3.0\n leptonica-1.82.0\n"
        self.scan_result: Callable[[list[str]], ProcessResult] | None = None

    def which(self, name: str) -> str | None:
        if name in self.binaries:
            return f"/usr/bin/{name}"
        return None

    def spawn(self, argv, timeout=None, stdin=None) -> ProcessResult:
        argv = list(argv)
        self.calls.append(argv)
        self.stdin.append(stdin)
        if argv[1:] == ["--list-langs"]:
            return ProcessResult(argv=argv, returncode=0, stdout=self.list_langs.encode())
        if argv[1:] == ["--version"]:
            return ProcessResult(argv=argv, returncode=0, stdout=self.version.encode())
        if self.scan_result is not None:
            return self.scan_result(argv)
        return ProcessResult(argv=argv, returncode=0, stdout=b"Hello World\n")

    @property
    def scan_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[1:] not in (["--list-langs"], ["--version"])]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def invoker(runner: FakeRunner) -> Invoker:
    return Invoker(InvokerConfig(timeout=30.0), runner=runner)


@pytest.fixture
def options(invoker: Invoker) -> TesseractOptions:
    return TesseractOptions(invoker)


@pytest.fixture
def engine(invoker: Invoker) -> TesseractEngine:
    return TesseractEngine(invoker=invoker)


@pytest.fixture
def image(tmp_path):
    """An on-disk stand-in for an image; the fake runner never reads it."""
    path = tmp_path / "sample.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    return path
