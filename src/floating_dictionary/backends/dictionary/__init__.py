"""Dictionary backend implementations."""

from .longdo import LongdoDictionaryBackend

__all__ = [
    "LongdoDictionaryBackend",
]
