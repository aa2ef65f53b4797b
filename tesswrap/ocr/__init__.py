"""OCR module: tesseract options and engine."""

from tesswrap.ocr.engine import TesseractEngine
from tesswrap.ocr.options import TesseractOptions, parse_command

__all__ = ["TesseractEngine", "TesseractOptions", "parse_command"]
