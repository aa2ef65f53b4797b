"""tesswrap: validated options and subprocess invocation for the tesseract CLI."""

from tesswrap.config import InvokerConfig, OutputFormat, RecognitionConfig, get_engine
from tesswrap.exceptions import (
    BinaryNotFoundError,
    InvalidOptionError,
    OCRError,
    ProcessFailedError,
    ResourceNotFoundError,
)
from tesswrap.ocr import TesseractEngine, TesseractOptions, parse_command
from tesswrap.process import Invoker
from tesswrap.recognition import PdfScanResult, Recognition

__version__ = "0.1.0"

__all__ = [
    "BinaryNotFoundError",
    "InvalidOptionError",
    "Invoker",
    "InvokerConfig",
    "OCRError",
    "OutputFormat",
    "PdfScanResult",
    "ProcessFailedError",
    "Recognition",
    "RecognitionConfig",
    "ResourceNotFoundError",
    "TesseractEngine",
    "TesseractOptions",
    "get_engine",
    "parse_command",
]
