"""Floating Dictionary - capture a screen region, OCR it, translate it.

The user draws a rectangle with the desktop's screenshot tool, Tesseract
reads the text in a set of candidate languages, Google Translate (plus the
Longdo dictionary for single English words going to Thai) translates it, and
the result appears in a small window next to the selection.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
