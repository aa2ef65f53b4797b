from tesswrap.recognition.recognition import PdfScanResult, Recognition

__all__ = ["PdfScanResult", "Recognition"]
