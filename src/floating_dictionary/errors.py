"""Error taxonomy for the capture → OCR → translate pipeline.

Every stage raises one of these; the pipeline coordinator records it on the
session and hands it to the result presenter. Nothing outside the
translation client retries.
"""


class FloatingDictionaryError(Exception):
    """Base exception for all pipeline errors."""

    #: Short text shown in the result window's error indicator.
    user_message = "Something went wrong"


class EnvironmentUnsupported(FloatingDictionaryError):
    """No usable screenshot backend on this desktop."""

    user_message = "No screenshot backend available"


class SessionBusy(FloatingDictionaryError):
    """A capture session is already running in this process."""

    user_message = "A capture is already in progress"


class CaptureError(FloatingDictionaryError):
    """Base exception for region capture failures."""

    user_message = "Screenshot failed"


class UserCancelled(CaptureError):
    """The user dismissed the region selection.

    Not a failure from the user's point of view: the session ends silently.
    """

    user_message = ""


class BackendFailed(CaptureError):
    """The capture backend exited abnormally or produced no image."""


class OcrError(FloatingDictionaryError):
    """Base exception for text recognition failures."""

    user_message = "Text recognition failed"


class EngineUnavailable(OcrError):
    """Tesseract or its language data could not be loaded."""

    user_message = "OCR engine unavailable"


class TranslationError(FloatingDictionaryError):
    """Base exception for translation failures."""

    user_message = "Translation failed"


class ServiceUnavailable(TranslationError):
    """The translation service could not be reached or returned an error."""

    user_message = "Translation service unavailable"


class ProtocolMismatch(TranslationError):
    """The translation service answered with an unexpected payload."""

    user_message = "Unexpected answer from translation service"


class DictionaryError(FloatingDictionaryError):
    """Dictionary lookup failed. Never escalated past the translation client."""
