"""Translation backend implementations."""

from .google import GoogleTranslationBackend

__all__ = [
    "GoogleTranslationBackend",
]
