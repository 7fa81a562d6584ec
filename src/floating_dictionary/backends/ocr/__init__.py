"""OCR backend implementations."""

from .tesseract import TesseractOCRBackend

__all__ = [
    "TesseractOCRBackend",
]
