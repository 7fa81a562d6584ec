"""Abstract base classes and result types for OCR, translation and dictionary backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class BackendInfo:
    """Metadata about a backend, used for startup logging."""

    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class OcrCandidate:
    """One language model's reading of the captured image."""

    language_id: str
    text: str
    mean_confidence: float  # 0.0-1.0


@dataclass(frozen=True)
class TranslationRequest:
    """Text to translate. source_lang None asks the service to detect it."""

    text: str
    target_lang: str
    source_lang: str | None = None


@dataclass(frozen=True)
class TranslationResponse:
    """Translated text plus the source language the service settled on."""

    translated_text: str
    resolved_source_lang: str


@dataclass(frozen=True)
class DictionarySense:
    """One row of a dictionary result table."""

    word: str
    pos: str  # Part of speech, "N/A" when the entry has none
    translation: str
    dictionary: str

    def describe(self) -> str:
        return f"{self.word} [{self.pos}] {self.translation} ({self.dictionary})"


@dataclass(frozen=True)
class ExampleSentence:
    """A source-language sentence with its translation."""

    source: str
    target: str


@dataclass
class DictionaryEntry:
    """Structured dictionary result for a single headword."""

    headword: str
    senses: list[DictionarySense] = field(default_factory=list)
    example_sentences: list[ExampleSentence] = field(default_factory=list)

    @property
    def definitions(self) -> list[str]:
        return [sense.describe() for sense in self.senses]

    @property
    def examples(self) -> list[str]:
        return [f"{ex.source} -> {ex.target}" for ex in self.example_sentences]

    def is_empty(self) -> bool:
        return not self.senses and not self.example_sentences


class OCRBackend(ABC):
    """Abstract base class for single-language OCR backends."""

    def __init__(self, language_id: str):
        """Initialize OCR backend.

        Args:
            language_id: Model identifier, e.g. "eng" or "chi_sim".
        """
        self._language_id = language_id

    @property
    def language_id(self) -> str:
        return self._language_id

    @abstractmethod
    def load(self) -> None:
        """Check that the engine and this language's model are usable.

        Raises:
            EngineUnavailable: If the engine or model data is missing.
        """

    @abstractmethod
    def recognize(self, image: NDArray[np.uint8]) -> OcrCandidate:
        """Read text from an image.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.

        Returns:
            The recognized text and its mean confidence.
        """

    @classmethod
    @abstractmethod
    def get_info(cls) -> BackendInfo:
        """Get metadata about this backend."""


class TranslationBackend(ABC):
    """Abstract base class for remote translation services."""

    @abstractmethod
    def translate(self, request: TranslationRequest) -> TranslationResponse:
        """Translate text with a single service call.

        Raises:
            ServiceUnavailable: Network or HTTP failure.
            ProtocolMismatch: The service answered with an unexpected payload.
        """

    @classmethod
    @abstractmethod
    def get_info(cls) -> BackendInfo:
        """Get metadata about this backend."""


class DictionaryBackend(ABC):
    """Abstract base class for headword lookup services."""

    @abstractmethod
    def lookup(self, word: str) -> DictionaryEntry:
        """Look up a single word.

        Raises:
            DictionaryError: The lookup failed for any reason.
        """

    @classmethod
    @abstractmethod
    def get_info(cls) -> BackendInfo:
        """Get metadata about this backend."""
