"""Startup requirement checks.

This module performs best-effort checks for external/system dependencies that
Python packaging cannot guarantee (the tesseract binary, its language data,
and Poppler for PDF input).

The CLI ``doctor`` command prints these checks; scanning itself never calls
them and raises typed errors instead.
"""

from __future__ import annotations

from dataclasses import dataclass
import shutil
import sys
from typing import Iterable

from tesswrap.exceptions import BinaryNotFoundError, ProcessFailedError
from tesswrap.process.invoker import Invoker


DOCS_URL = "https://tesseract-ocr.github.io/tessdoc/Installation.html"

DEFAULT_REQUIRED_LANGS = ["eng"]


@dataclass(frozen=True)
class RequirementIssue:
    id: str
    title: str
    details: str
    severity: str = "error"  # "error" | "warning"


def check_startup_requirements(
    invoker: Invoker | None = None,
    required_langs: Iterable[str] = DEFAULT_REQUIRED_LANGS,
) -> list[RequirementIssue]:
    invoker = invoker or Invoker()
    issues: list[RequirementIssue] = []

    if sys.version_info < (3, 10):
        issues.append(
            RequirementIssue(
                id="python_version",
                title="Python >= 3.10",
                details=f"Current version: {sys.version.split()[0]}",
                severity="error",
            )
        )

    try:
        invoker.resolve()
    except BinaryNotFoundError:
        issues.append(
            RequirementIssue(
                id="tesseract",
                title=f"Tesseract OCR ({invoker.binary} executable)",
                details=(
                    "Not found in PATH. Install it via your package manager "
                    "(e.g. 'sudo apt-get install tesseract-ocr')."
                ),
                severity="error",
            )
        )
    else:
        required = list(required_langs)
        missing_langs = _missing_tesseract_langs(invoker, required)
        if missing_langs:
            issues.append(
                RequirementIssue(
                    id="tesseract_langs",
                    title="Tesseract language data (" + "/".join(required) + ")",
                    details=(
                        "Missing: "
                        + ", ".join(missing_langs)
                        + ". Install the language packs (e.g. 'tesseract-ocr-deu'), "
                        "run 'tesswrap fetch-tessdata' or set TESSDATA_PREFIX."
                    ),
                    severity="error",
                )
            )

    missing_poppler = [cmd for cmd in ("pdftoppm", "pdfinfo") if shutil.which(cmd) is None]
    if missing_poppler:
        issues.append(
            RequirementIssue(
                id="poppler",
                title="Poppler (pdftoppm/pdfinfo)",
                details=(
                    "Not found in PATH: "
                    + ", ".join(missing_poppler)
                    + ". PDF input is unavailable until 'poppler-utils' (Ubuntu/Debian) "
                    "or 'poppler' (macOS) is installed."
                ),
                severity="warning",
            )
        )

    return issues


def _missing_tesseract_langs(invoker: Invoker, required: Iterable[str]) -> list[str]:
    """Return languages from `required` missing in `tesseract --list-langs`.

    Best-effort: if we cannot query languages, we return an empty list
    (the scan path will raise a clear error later).
    """
    try:
        langs = invoker.supported_languages()
    except (BinaryNotFoundError, ProcessFailedError):
        return []

    if not langs:
        return []

    missing: list[str] = []
    for lang in required:
        if lang not in langs:
            missing.append(lang)
    return missing
