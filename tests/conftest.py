"""Shared fixtures: fake backends and small images, no display or network."""

import numpy as np
import pytest

from floating_dictionary.backends.base import BackendInfo, OCRBackend, OcrCandidate
from floating_dictionary.capture.base import RasterImage


class FakeOCRBackend(OCRBackend):
    """OCR backend returning a canned candidate (or raising) per language."""

    def __init__(self, language_id, text="", confidence=0.0, error=None, load_error=None):
        super().__init__(language_id)
        self.text = text
        self.confidence = confidence
        self.error = error
        self.load_error = load_error
        self.loaded = False

    @classmethod
    def get_info(cls):
        return BackendInfo(id="fake", name="Fake", description="test backend")

    def load(self):
        if self.load_error is not None:
            raise self.load_error
        self.loaded = True

    def recognize(self, image):
        if self.error is not None:
            raise self.error
        return OcrCandidate(language_id=self.language_id, text=self.text, mean_confidence=self.confidence)


@pytest.fixture
def ocr_factory():
    """Build a backend factory from {language_id: kwargs}."""

    def make(results):
        def factory(language_id):
            return FakeOCRBackend(language_id, **results.get(language_id, {}))

        return factory

    return make


@pytest.fixture
def raster_image():
    return RasterImage(pixels=np.zeros((30, 120, 4), dtype=np.uint8))
