"""Languages known to the OCR and translation stages."""

from enum import Enum

AUTO = "auto"


class Language(Enum):
    """Languages with a bundled Tesseract model.

    Values are the codes the translation service uses.
    """

    ENGLISH = "en"
    RUSSIAN = "ru"
    JAPANESE = "ja"
    KOREAN = "ko"
    CHINESE = "zh-CN"
    THAI = "th"

    @property
    def display_name(self) -> str:
        """Human-readable name for the language."""
        names = {
            Language.ENGLISH: "English",
            Language.RUSSIAN: "Russian",
            Language.JAPANESE: "Japanese",
            Language.KOREAN: "Korean",
            Language.CHINESE: "Chinese (Simplified)",
            Language.THAI: "Thai",
        }
        return names.get(self, self.value)

    @property
    def tesseract_id(self) -> str:
        """Tesseract traineddata name for this language."""
        return LANGUAGE_TO_TESSERACT[self]

    @classmethod
    def from_code(cls, code: str) -> "Language | None":
        """Look up a language by translation code, None if unknown."""
        for language in cls:
            if language.value.lower() == code.lower():
                return language
        return None


LANGUAGE_TO_TESSERACT = {
    Language.ENGLISH: "eng",
    Language.RUSSIAN: "rus",
    Language.JAPANESE: "jpn",
    Language.KOREAN: "kor",
    Language.CHINESE: "chi_sim",
    Language.THAI: "tha",
}

# Order matters: it is the tie-break order of the OCR ensemble.
SUPPORTED_OCR_LANGUAGES = ("eng", "rus", "jpn", "kor", "chi_sim", "tha")

# Names accepted by --ocr-lang. "thai" is the user-facing spelling of "tha".
OCR_LANG_CHOICES = {
    AUTO: AUTO,
    "eng": "eng",
    "rus": "rus",
    "kor": "kor",
    "jpn": "jpn",
    "chi_sim": "chi_sim",
    "thai": "tha",
    "tha": "tha",
}


def tesseract_id_for_target(target_lang: str) -> str | None:
    """Map a translation target code to the matching OCR model, if any."""
    language = Language.from_code(target_lang)
    if language is None:
        return None
    return language.tesseract_id


def resolve_ocr_languages(ocr_lang: str, target_lang: str) -> tuple[str, ...]:
    """Compute the ordered set of OCR models to run.

    Args:
        ocr_lang: An explicit model name (see OCR_LANG_CHOICES) or "auto".
        target_lang: Translation target code, e.g. "th".

    Returns:
        Non-empty tuple of Tesseract identifiers. In auto mode this is every
        supported model except the one for the target language, since text
        already in the target language is not what the user wants translated.

    Raises:
        ValueError: If ocr_lang is not a known model name.
    """
    key = ocr_lang.lower()
    if key not in OCR_LANG_CHOICES:
        raise ValueError(f"unknown OCR language: {ocr_lang}")

    if OCR_LANG_CHOICES[key] != AUTO:
        return (OCR_LANG_CHOICES[key],)

    excluded = tesseract_id_for_target(target_lang)
    languages = tuple(lang for lang in SUPPORTED_OCR_LANGUAGES if lang != excluded)
    if not languages:
        return SUPPORTED_OCR_LANGUAGES
    return languages
