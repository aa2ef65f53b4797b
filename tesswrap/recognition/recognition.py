"""Recognition facade: stream or file output around a TesseractEngine.

In stream mode tesseract writes to standard output and ``scan()`` returns
what it printed. In file mode tesseract writes ``<output_dir>/<name>.<ext>``
for every configured output format and ``scan()`` returns the path of the
first one.
"""

from __future__ import annotations

import copy
import logging
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)

from tesswrap.config import STREAM, OutputFormat, RecognitionConfig, get_engine
from tesswrap.exceptions import (
    InvalidOptionError,
    ProcessFailedError,
    ResourceNotFoundError,
)
from tesswrap.ocr.engine import TesseractEngine
from tesswrap.ocr.options import canonical_key

logger = logging.getLogger(__name__)

STREAM_MODE = "stream"
FILE_MODE = "file"


@dataclass
class PdfScanResult:
    """Result of OCR processing on a PDF file."""

    text: str  # Full extracted text (all pages joined)
    pages: list[str]  # Per-page text
    total_pages: int
    language: str
    source_file: str
    char_count: int = field(init=False)

    def __post_init__(self):
        self.char_count = len(self.text)


class Recognition:
    """Convenience wrapper that decides where tesseract output goes.

    Usage:
        text = Recognition("scan.png").scan()
        path = Recognition("scan.png", output_dir="out", filename="scan").scan()
    """

    def __init__(
        self,
        image: str | Path | None = None,
        output_dir: str | Path | None = None,
        filename: str | None = None,
        engine: TesseractEngine | None = None,
        config: RecognitionConfig | None = None,
    ) -> None:
        self._config = config or RecognitionConfig()
        self._engine = engine or get_engine(self._config)
        self._output_dir = self._resolve_output_dir(output_dir)

        if image is not None:
            self._engine.options.set_input(image)

        if filename:
            self._engine.options.set_output(self._build_output_base(filename))
        else:
            self._engine.options.set_output(STREAM)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def mode(self) -> str:
        return STREAM_MODE if self._engine.options.is_streaming_output else FILE_MODE

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def engine(self) -> TesseractEngine:
        return self._engine

    @property
    def image(self) -> str | None:
        return self._engine.options.input

    def set_image(self, image: str | Path) -> Recognition:
        self._engine.options.set_input(image)
        return self

    @property
    def languages(self) -> list[str] | None:
        languages = self._engine.options.languages
        return languages or None

    def set_languages(self, languages: list[str]) -> Recognition:
        self._engine.options.set_languages(languages)
        return self

    def set_config(self, config: Mapping[str, Any]) -> Recognition:
        """Pass option overrides to the engine (see TesseractOptions.apply_options)."""
        self._engine.configure(config)
        return self

    def get_config(self, option: str | None = None) -> Any:
        """Return one option value, or a snapshot of all of them.

        Raises:
            InvalidOptionError: If ``option`` names no known option.
        """
        snapshot = self._engine.options.as_dict()
        if option is None:
            return snapshot

        key = canonical_key(option)
        if key is None:
            raise InvalidOptionError(option, None, f"Requested option is not available: {option}")
        return snapshot[key]

    def output_files(self) -> list[Path]:
        """Files the next file-mode scan is expected to write."""
        if self.mode != FILE_MODE:
            return []
        base = self._engine.options.output
        return [
            Path(f"{base}{fmt.extension}") for fmt in self._engine.options.output_formats
        ]

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self, stdin: bytes | None = None) -> str | bytes | Path:
        """Run the OCR scan.

        Args:
            stdin: Image bytes, used when the image is ``-``.

        Returns:
            Recognized text in stream mode (bytes when PDF output is
            selected), otherwise the path of the first written file.

        Raises:
            BinaryNotFoundError: If tesseract is not on PATH.
            ProcessFailedError: If tesseract fails or an expected file is missing.
        """
        options = self._engine.options
        binary = any(fmt.is_binary for fmt in options.output_formats)

        if self.mode == STREAM_MODE:
            return self._engine.scan(text=not binary, stdin=stdin)

        written = self.output_files()
        # stale results from an earlier run must not count as output
        for path in written:
            path.unlink(missing_ok=True)

        self._engine.scan(stdin=stdin)

        missing = [str(path) for path in written if not path.exists()]
        if missing:
            raise ProcessFailedError(
                "tesseract did not write the expected output: " + ", ".join(missing)
            )

        logger.info("[INFO] Wrote %s", ", ".join(str(p) for p in written))
        return written[0]

    def scan_pdf(
        self,
        pdf_path: str | Path,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> PdfScanResult:
        """Convert PDF to images, run tesseract on each page, return combined text.

        Pages are always scanned in stream mode as plain text, whatever
        output this instance is configured for.

        Args:
            pdf_path: Path to the PDF file.
            progress_callback: Optional callback(current_page, total_pages)
                called after each page is processed.

        Raises:
            ResourceNotFoundError: If pdf_path does not exist.
            ProcessFailedError: If rasterization or tesseract fails on a page.
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise ResourceNotFoundError(str(pdf_path), "PDF file")

        if pdf_path.suffix.lower() != ".pdf":
            logger.warning(
                "File '%s' does not have .pdf extension, proceeding anyway",
                pdf_path.name,
            )

        options = self._engine.options
        start_time = time.perf_counter()
        logger.info("[INFO] Converting PDF to images at %d DPI: %s", options.dpi, pdf_path)
        try:
            images = convert_from_path(str(pdf_path), dpi=options.dpi)
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as exc:
            raise ProcessFailedError(
                f"Could not rasterize {pdf_path}: {exc}", stderr=str(exc)
            ) from exc
        total = len(images)
        logger.info(
            "[INFO] Got %d page(s) from PDF (took %.2fs)", total, time.perf_counter() - start_time
        )

        pages_text: list[str] = []
        with tempfile.TemporaryDirectory(prefix="tesswrap_") as tmp_dir:
            for i, image in enumerate(images):
                page_path = Path(tmp_dir) / f"page_{i + 1:04d}.png"
                try:
                    image.save(page_path, format="PNG")
                finally:
                    image.close()

                page_options = copy.copy(options)
                page_options.set_input(page_path)
                page_options.set_output(STREAM)
                page_options.set_output_formats([OutputFormat.TEXT])

                try:
                    text = self._engine.invoker.run(page_options.render())
                except ProcessFailedError as exc:
                    raise ProcessFailedError(
                        f"tesseract failed on page {i + 1}/{total}: {exc}",
                        stderr=exc.stderr,
                        returncode=exc.returncode,
                        argv=exc.argv,
                        timed_out=exc.timed_out,
                    ) from exc
                pages_text.append(text)

                if progress_callback:
                    progress_callback(i + 1, total)

        logger.info("[INFO] Total PDF OCR processing took %.2fs", time.perf_counter() - start_time)

        full_text = self._join_pages(pages_text)
        return PdfScanResult(
            text=full_text,
            pages=pages_text,
            total_pages=total,
            language=options.lang,
            source_file=str(pdf_path),
        )

    def supported_languages(self) -> list[str]:
        """Languages reported by the installed tesseract."""
        return self._engine.supported_languages()

    def version(self) -> str:
        return self._engine.version()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_output_dir(self, output_dir: str | Path | None) -> Path:
        if output_dir is not None and Path(output_dir).is_dir():
            return Path(output_dir)
        if output_dir is not None:
            logger.warning("Output directory %s does not exist, using default", output_dir)
        if self._config.output_dir is not None:
            return Path(self._config.output_dir)
        return Path(tempfile.gettempdir())

    def _build_output_base(self, filename: str) -> str:
        name = Path(filename)
        for fmt in OutputFormat:
            if name.suffix.lower() == fmt.extension:
                name = name.with_suffix("")
                break

        base = self._output_dir / name
        base.parent.mkdir(parents=True, exist_ok=True)
        return str(base)

    @staticmethod
    def _join_pages(pages: list[str]) -> str:
        """Join per-page text with page separator markers."""
        if not pages:
            return ""
        if len(pages) == 1:
            return pages[0]

        parts: list[str] = []
        for i, page_text in enumerate(pages, start=1):
            parts.append(f"--- Page {i} ---\n\n{page_text}")
        return "\n\n".join(parts)
