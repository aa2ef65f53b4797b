from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from tesswrap.config import InvokerConfig
from tesswrap.ocr.options import TesseractOptions
from tesswrap.process.invoker import Invoker


logger = logging.getLogger(__name__)


class TesseractEngine:
    """Runs tesseract with one set of validated options.

    Usage:
        engine = TesseractEngine()
        engine.configure({"image": "page.png", "languages": ["deu"]})
        print(engine.scan())
    """

    def __init__(
        self,
        options: TesseractOptions | None = None,
        invoker: Invoker | None = None,
        config: InvokerConfig | None = None,
    ) -> None:
        self.invoker = invoker or Invoker(config)
        self.options = options or TesseractOptions(self.invoker)

    def configure(self, config: Mapping[str, Any]) -> None:
        """Apply a partial option mapping (see TesseractOptions.apply_options)."""
        self.options.apply_options(config)

    def scan(self, text: bool = True, stdin: bytes | None = None) -> str | bytes:
        """Run an OCR scan with the current options.

        Args:
            text: Decode stdout; pass False when streaming a PDF.
            stdin: Image bytes, used when the input is ``-``.

        Returns:
            Captured stdout. Empty when tesseract writes to OUTPUTBASE files.

        Raises:
            BinaryNotFoundError: If tesseract is not on PATH.
            ProcessFailedError: If tesseract exits non-zero or times out.
        """
        args = self.options.render()
        logger.debug("Rendered tesseract arguments: %s", args)

        start_time = time.perf_counter()
        output = self.invoker.run(args, text=text, stdin=stdin)
        duration = time.perf_counter() - start_time
        logger.info(
            "[INFO] OCR scan of %s completed in %.2fs (lang=%s, psm=%d)",
            self.options.input or "stdin",
            duration,
            self.options.lang,
            self.options.psm,
        )
        return output

    def version(self) -> str:
        return self.invoker.version()

    def supported_languages(self) -> list[str]:
        """Return list of installed Tesseract language packs."""
        return self.invoker.supported_languages()
