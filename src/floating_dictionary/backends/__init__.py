"""Pluggable backends for OCR, translation and dictionary lookup."""

from .base import (
    BackendInfo,
    DictionaryBackend,
    DictionaryEntry,
    DictionarySense,
    ExampleSentence,
    OCRBackend,
    OcrCandidate,
    TranslationBackend,
    TranslationRequest,
    TranslationResponse,
)

__all__ = [
    "BackendInfo",
    "DictionaryBackend",
    "DictionaryEntry",
    "DictionarySense",
    "ExampleSentence",
    "OCRBackend",
    "OcrCandidate",
    "TranslationBackend",
    "TranslationRequest",
    "TranslationResponse",
]
