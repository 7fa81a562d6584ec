"""Tesseract OCR backend, one instance per language model."""

import threading

import numpy as np
from numpy.typing import NDArray

from ... import log
from ...capture.convert import bgra_to_rgb_pil
from ...errors import EngineUnavailable
from ..base import BackendInfo, OCRBackend, OcrCandidate

logger = log.get_logger()

# Assume a single uniform block of text, which is what a drawn region usually is
TESSERACT_CONFIG = "--psm 6"

# Scripts written without spaces between words; Tesseract still reports one
# "word" per glyph or syllable cluster for them
UNSPACED_LANGUAGES = frozenset({"jpn", "jpn_vert", "chi_sim", "chi_sim_vert", "chi_tra", "tha"})

_languages_lock = threading.Lock()
_available_languages: set[str] | None = None


def available_languages() -> set[str]:
    """Languages Tesseract has traineddata for, queried once per process.

    Raises:
        EngineUnavailable: If Tesseract is not installed.
    """
    global _available_languages

    with _languages_lock:
        if _available_languages is not None:
            return _available_languages

        import pytesseract

        try:
            version = pytesseract.get_tesseract_version()
            languages = set(pytesseract.get_languages(config=""))
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            raise EngineUnavailable(
                "Tesseract OCR is not installed or not in PATH. "
                "Please install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        logger.info("tesseract ready", version=str(version), languages=len(languages))
        _available_languages = languages
        return languages


def reset_language_cache() -> None:
    """Forget the cached language list (after TESSDATA_PREFIX changes)."""
    global _available_languages
    with _languages_lock:
        _available_languages = None


class TesseractOCRBackend(OCRBackend):
    """Extracts text from images using Tesseract OCR.

    Tesseract reports a confidence per recognized word. The mean over all
    words is what the ensemble compares across languages: a model for the
    wrong script produces garbage with low word confidences.
    """

    def __init__(self, language_id: str = "eng"):
        super().__init__(language_id)
        self._loaded = False

    @classmethod
    def get_info(cls) -> BackendInfo:
        """Get metadata about this backend."""
        return BackendInfo(
            id="tesseract",
            name="Tesseract",
            description="Local OCR engine with per-language traineddata models",
        )

    def load(self) -> None:
        """Verify Tesseract is installed and has this language's model.

        Raises:
            EngineUnavailable: If Tesseract or the traineddata file is missing.
        """
        if self._loaded:
            return

        if self._language_id not in available_languages():
            raise EngineUnavailable(
                f"no Tesseract model for '{self._language_id}' "
                f"(is {self._language_id}.traineddata in TESSDATA_PREFIX?)"
            )
        self._loaded = True

    def is_loaded(self) -> bool:
        return self._loaded

    def recognize(self, image: NDArray[np.uint8]) -> OcrCandidate:
        """Read text and word confidences from an image.

        Args:
            image: Numpy array (H, W, 4) in BGRA format.
        """
        if not self._loaded:
            self.load()

        import pytesseract

        data = pytesseract.image_to_data(
            bgra_to_rgb_pil(image),
            lang=self._language_id,
            config=TESSERACT_CONFIG,
            output_type=pytesseract.Output.DICT,
        )

        words = []
        confidences = []
        for raw_text, raw_conf in zip(data["text"], data["conf"]):
            text = str(raw_text).strip()
            conf = float(raw_conf)
            # conf is -1 for layout rows (blocks, paragraphs, lines)
            if not text or conf < 0:
                continue
            words.append(text)
            confidences.append(conf / 100.0)

        separator = "" if self._language_id in UNSPACED_LANGUAGES else " "
        text = self._clean_text(separator.join(words))
        mean_confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return OcrCandidate(
            language_id=self._language_id,
            text=text,
            mean_confidence=mean_confidence if text else 0.0,
        )

    def _clean_text(self, text: str) -> str:
        """Collapse runs of whitespace and strip the ends."""
        if not text:
            return ""
        return " ".join(text.split()).strip()
