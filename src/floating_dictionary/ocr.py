"""OCR ensemble: one recognition run per language model, best confidence wins."""

import re
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from . import log
from .backends.base import OCRBackend, OcrCandidate
from .backends.ocr.tesseract import TesseractOCRBackend
from .errors import EngineUnavailable, OcrError

logger = log.get_logger()

# Single-token results longer than this are treated as running text
SINGLE_WORD_MAX_LENGTH = 50

_EDGE_PUNCTUATION = re.compile(r"^[\W_]+|[\W_]+$")


def is_single_word(text: str) -> bool:
    """True if text has no inner whitespace and is short enough to be a word."""
    trimmed = text.strip()
    return bool(trimmed) and len(trimmed.split()) == 1 and len(trimmed) < SINGLE_WORD_MAX_LENGTH


def clean_recognized_text(text: str) -> str:
    """Normalize whitespace; strip surrounding punctuation from a lone word.

    A region drawn around one word often catches a neighbouring comma,
    quote or bracket, which would spoil a dictionary lookup.
    """
    text = " ".join(text.split())
    if is_single_word(text):
        text = _EDGE_PUNCTUATION.sub("", text)
    return text


def select_candidate(candidates: Sequence[OcrCandidate], language_order: Sequence[str]) -> OcrCandidate | None:
    """Pick the candidate with the highest mean confidence.

    Ties go to the language listed first in language_order, so the result
    does not depend on which worker finished first.
    """
    if not candidates:
        return None
    rank = {language: index for index, language in enumerate(language_order)}
    ordered = sorted(candidates, key=lambda c: rank.get(c.language_id, len(rank)))
    # max() keeps the first of equal maxima
    return max(ordered, key=lambda c: c.mean_confidence)


class OcrEnsemble:
    """Runs every language model over the same image and merges the results."""

    def __init__(
        self,
        backend_factory: Callable[[str], OCRBackend] = TesseractOCRBackend,
        max_workers: int | None = None,
    ):
        """Initialize the ensemble.

        Args:
            backend_factory: Builds a backend for one language id.
            max_workers: Thread pool size; defaults to one per language.
        """
        self._backend_factory = backend_factory
        self._max_workers = max_workers

    def _load_backends(self, language_set: Sequence[str]) -> list[OCRBackend]:
        backends = []
        for language_id in language_set:
            backend = self._backend_factory(language_id)
            backend.load()
            backends.append(backend)
        return backends

    def _run_one(self, backend: OCRBackend, image: NDArray[np.uint8]) -> OcrCandidate:
        start = time.perf_counter()
        candidate = backend.recognize(image)
        logger.debug(
            "ocr candidate",
            language=candidate.language_id,
            confidence=f"{candidate.mean_confidence:.2f}",
            chars=len(candidate.text),
            ms=int((time.perf_counter() - start) * 1000),
        )
        return candidate

    def recognize(self, image: NDArray[np.uint8], language_set: Sequence[str]) -> str:
        """Recognize text in an image using every model in language_set.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.
            language_set: Ordered, non-empty model identifiers.

        Returns:
            The best candidate's cleaned text. Empty when nothing was read,
            which is a valid outcome rather than an error.

        Raises:
            EngineUnavailable: Tesseract or a language model is missing, or
                every run failed.
        """
        if not language_set:
            raise ValueError("language_set must not be empty")

        backends = self._load_backends(language_set)

        start = time.perf_counter()
        candidates: list[OcrCandidate] = []
        failures: list[str] = []
        workers = self._max_workers or len(backends)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ocr") as executor:
            futures = {executor.submit(self._run_one, b, image): b.language_id for b in backends}
            for future, language_id in futures.items():
                try:
                    candidates.append(future.result())
                except OcrError:
                    raise
                except Exception as e:
                    logger.warning("ocr run failed", language=language_id, err=str(e))
                    failures.append(language_id)

        if not candidates:
            raise EngineUnavailable(f"every OCR run failed ({', '.join(failures)})")

        best = select_candidate(candidates, language_set)
        text = clean_recognized_text(best.text)
        logger.info(
            "ocr complete",
            language=best.language_id,
            confidence=f"{best.mean_confidence:.2f}",
            candidates=len(candidates),
            ms=int((time.perf_counter() - start) * 1000),
        )
        return text
