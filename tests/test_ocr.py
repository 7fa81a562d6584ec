"""Tests for the OCR ensemble and the Tesseract backend."""

from unittest.mock import patch

import numpy as np
import pytest

from floating_dictionary.backends.base import OcrCandidate
from floating_dictionary.errors import EngineUnavailable
from floating_dictionary.ocr import (
    OcrEnsemble,
    clean_recognized_text,
    is_single_word,
    select_candidate,
)


class TestCleanRecognizedText:
    """Tests for clean_recognized_text."""

    def test_single_word_edge_punctuation_stripped(self):
        assert clean_recognized_text('"Hello,"') == "Hello"

    def test_brackets_around_word_stripped(self):
        assert clean_recognized_text("(world)") == "world"

    def test_inner_punctuation_kept(self):
        assert clean_recognized_text("don't") == "don't"

    def test_non_latin_word(self):
        assert clean_recognized_text("«привет»") == "привет"

    def test_sentence_untouched_except_whitespace(self):
        """Running text keeps its punctuation; only whitespace is normalized."""
        assert clean_recognized_text("Hello,\n  world!") == "Hello, world!"

    def test_empty(self):
        assert clean_recognized_text("") == ""


class TestIsSingleWord:
    """Tests for is_single_word."""

    def test_word(self):
        assert is_single_word("Hello")

    def test_two_words(self):
        assert not is_single_word("Hello world")

    def test_too_long(self):
        assert not is_single_word("x" * 60)

    def test_blank(self):
        assert not is_single_word("   ")


class TestSelectCandidate:
    """Tests for select_candidate."""

    def test_highest_confidence_wins(self):
        candidates = [
            OcrCandidate("eng", "Hello", 0.91),
            OcrCandidate("rus", "Неllо", 0.42),
        ]

        assert select_candidate(candidates, ["eng", "rus"]).language_id == "eng"

    def test_tie_goes_to_earlier_language(self):
        """Equal confidences resolve by language order, not completion order."""
        candidates = [
            OcrCandidate("jpn", "abc", 0.8),
            OcrCandidate("eng", "abc", 0.8),
        ]

        assert select_candidate(candidates, ["eng", "rus", "jpn"]).language_id == "eng"

    def test_empty(self):
        assert select_candidate([], ["eng"]) is None


class TestOcrEnsemble:
    """Tests for OcrEnsemble.recognize."""

    def test_best_candidate_text_returned(self, ocr_factory, raster_image):
        factory = ocr_factory(
            {
                "eng": {"text": "Hello", "confidence": 0.9},
                "rus": {"text": "Неllо", "confidence": 0.3},
                "jpn": {"text": "ほ", "confidence": 0.1},
            }
        )

        text = OcrEnsemble(factory).recognize(raster_image.pixels, ("eng", "rus", "jpn"))

        assert text == "Hello"

    def test_single_word_is_cleaned(self, ocr_factory, raster_image):
        factory = ocr_factory({"eng": {"text": "(Hello).", "confidence": 0.9}})

        assert OcrEnsemble(factory).recognize(raster_image.pixels, ("eng",)) == "Hello"

    def test_tie_break_uses_language_set_order(self, ocr_factory, raster_image):
        factory = ocr_factory(
            {
                "eng": {"text": "from eng", "confidence": 0.5},
                "kor": {"text": "from kor", "confidence": 0.5},
            }
        )

        assert OcrEnsemble(factory).recognize(raster_image.pixels, ("kor", "eng")) == "from kor"

    def test_nothing_recognized_returns_empty_text(self, ocr_factory, raster_image):
        """An empty result is a valid outcome, not an error."""
        factory = ocr_factory({})

        assert OcrEnsemble(factory).recognize(raster_image.pixels, ("eng", "rus")) == ""

    def test_failed_run_is_dropped(self, ocr_factory, raster_image):
        factory = ocr_factory(
            {
                "eng": {"error": RuntimeError("tesseract crashed")},
                "rus": {"text": "привет", "confidence": 0.7},
            }
        )

        assert OcrEnsemble(factory).recognize(raster_image.pixels, ("eng", "rus")) == "привет"

    def test_every_run_failed_raises(self, ocr_factory, raster_image):
        factory = ocr_factory(
            {
                "eng": {"error": RuntimeError("boom")},
                "rus": {"error": RuntimeError("boom")},
            }
        )

        with pytest.raises(EngineUnavailable):
            OcrEnsemble(factory).recognize(raster_image.pixels, ("eng", "rus"))

    def test_missing_model_propagates(self, ocr_factory, raster_image):
        factory = ocr_factory({"kor": {"load_error": EngineUnavailable("no kor")}})

        with pytest.raises(EngineUnavailable, match="no kor"):
            OcrEnsemble(factory).recognize(raster_image.pixels, ("eng", "kor"))

    def test_empty_language_set_rejected(self, ocr_factory, raster_image):
        with pytest.raises(ValueError):
            OcrEnsemble(ocr_factory({})).recognize(raster_image.pixels, ())


class TestTesseractBackend:
    """Tests for TesseractOCRBackend with pytesseract mocked out."""

    @pytest.fixture(autouse=True)
    def _reset_cache(self):
        from floating_dictionary.backends.ocr.tesseract import reset_language_cache

        reset_language_cache()
        yield
        reset_language_cache()

    def test_load_missing_language_raises(self):
        from floating_dictionary.backends.ocr.tesseract import TesseractOCRBackend

        with patch(
            "floating_dictionary.backends.ocr.tesseract.available_languages",
            return_value={"eng", "osd"},
        ):
            backend = TesseractOCRBackend("kor")
            with pytest.raises(EngineUnavailable, match="kor"):
                backend.load()

        assert not backend.is_loaded()

    def test_tesseract_not_installed(self):
        import pytesseract

        from floating_dictionary.backends.ocr.tesseract import available_languages

        with patch("pytesseract.get_tesseract_version", side_effect=pytesseract.TesseractNotFoundError()):
            with pytest.raises(EngineUnavailable, match="not installed"):
                available_languages()

    def test_available_languages_cached(self):
        from floating_dictionary.backends.ocr.tesseract import available_languages

        with (
            patch("pytesseract.get_tesseract_version", return_value="5.3.0"),
            patch("pytesseract.get_languages", return_value=["eng", "tha"]) as get_languages,
        ):
            assert available_languages() == {"eng", "tha"}
            assert available_languages() == {"eng", "tha"}

        get_languages.assert_called_once()

    def test_recognize_averages_word_confidence(self):
        """Layout rows (conf -1) and blanks are ignored; confidence is scaled to 0..1."""
        from floating_dictionary.backends.ocr.tesseract import TesseractOCRBackend

        data = {
            "text": ["", "Hello", "  ", "world", ""],
            "conf": ["-1", "90", "-1", "80", -1],
        }
        image = np.zeros((20, 40, 4), dtype=np.uint8)

        with (
            patch("floating_dictionary.backends.ocr.tesseract.available_languages", return_value={"eng"}),
            patch("pytesseract.image_to_data", return_value=data) as image_to_data,
        ):
            candidate = TesseractOCRBackend("eng").recognize(image)

        assert candidate.text == "Hello world"
        assert candidate.mean_confidence == pytest.approx(0.85)
        assert image_to_data.call_args.kwargs["lang"] == "eng"

    def test_recognize_nothing_has_zero_confidence(self):
        from floating_dictionary.backends.ocr.tesseract import TesseractOCRBackend

        data = {"text": ["", ""], "conf": ["-1", "-1"]}
        image = np.zeros((20, 40, 4), dtype=np.uint8)

        with (
            patch("floating_dictionary.backends.ocr.tesseract.available_languages", return_value={"rus"}),
            patch("pytesseract.image_to_data", return_value=data),
        ):
            candidate = TesseractOCRBackend("rus").recognize(image)

        assert candidate.text == ""
        assert candidate.mean_confidence == 0.0

    @pytest.mark.parametrize(
        "language_id, words, expected",
        [
            ("jpn", ["こ", "ん", "に", "ち", "は"], "こんにちは"),
            ("chi_sim", ["你", "好"], "你好"),
            ("tha", ["สวัส", "ดี"], "สวัสดี"),
            ("kor", ["안녕", "하세요"], "안녕 하세요"),
        ],
    )
    def test_recognize_joins_words_per_script(self, language_id, words, expected):
        """Japanese, Chinese and Thai words are joined without spaces; Korean keeps them."""
        from floating_dictionary.backends.ocr.tesseract import TesseractOCRBackend

        data = {"text": [""] + words, "conf": ["-1"] + ["88"] * len(words)}
        image = np.zeros((20, 40, 4), dtype=np.uint8)

        with (
            patch("floating_dictionary.backends.ocr.tesseract.available_languages", return_value={language_id}),
            patch("pytesseract.image_to_data", return_value=data),
        ):
            candidate = TesseractOCRBackend(language_id).recognize(image)

        assert candidate.text == expected
        assert candidate.mean_confidence == pytest.approx(0.88)
