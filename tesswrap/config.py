"""Configuration dataclasses and factory function for the tesseract engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tesswrap.ocr.engine import TesseractEngine


STREAM = "-"

DEFAULT_BINARY = "tesseract"
DEFAULT_TIMEOUT = 500.0


class OutputFormat(str, Enum):
    """Output configs understood by the tesseract CLI."""

    TEXT = "txt"
    PDF = "pdf"
    HOCR = "hocr"
    ALTO = "alto"

    @property
    def extension(self) -> str:
        """File suffix tesseract appends to OUTPUTBASE for this config."""
        extensions = {
            "txt": ".txt",
            "pdf": ".pdf",
            "hocr": ".hocr",
            "alto": ".xml",
        }
        return extensions[self.value]

    @property
    def is_binary(self) -> bool:
        return self is OutputFormat.PDF

    @classmethod
    def parse(cls, value: "OutputFormat | str") -> "OutputFormat | None":
        """Return the member for ``value`` or None if it is not supported."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        token = value.strip().lower()
        if token == "text":
            token = "txt"
        try:
            return cls(token)
        except ValueError:
            return None


@dataclass
class InvokerConfig:
    """Which binary to run and how long to wait for it."""

    binary: str = DEFAULT_BINARY
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class RecognitionConfig:
    """Top-level recognition configuration."""

    invoker: InvokerConfig = field(default_factory=InvokerConfig)
    # Falls back to the system temp directory when unset.
    output_dir: Path | None = None
    # Applied to every new engine through TesseractOptions.apply_options.
    options: dict[str, Any] = field(default_factory=dict)


def get_engine(config: RecognitionConfig | None = None) -> TesseractEngine:
    """Factory function that returns a configured engine instance.

    Args:
        config: Recognition configuration. Uses defaults if None.

    Returns:
        A TesseractEngine wired to a subprocess-backed Invoker.
    """
    # Import here to avoid circular imports
    from tesswrap.ocr.engine import TesseractEngine
    from tesswrap.process.invoker import Invoker

    if config is None:
        config = RecognitionConfig()

    invoker = Invoker(config.invoker)
    engine = TesseractEngine(invoker=invoker)
    if config.options:
        engine.configure(config.options)
    return engine
