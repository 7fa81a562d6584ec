"""Per-run state of the capture → OCR → translate → present pipeline."""

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum

from .backends.base import DictionaryEntry
from .capture.base import RasterImage, Region
from .errors import FloatingDictionaryError, SessionBusy


class Stage(Enum):
    """Where a session is in the pipeline."""

    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    TRANSLATING = "translating"
    PRESENTING = "presenting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CaptureSession:
    """One pipeline run. Owned by the coordinating thread, never persisted."""

    target_lang: str
    ocr_languages: tuple[str, ...]
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    region: Region | None = None
    raster_image: RasterImage | None = None
    ocr_text: str = ""
    detected_source_lang: str = ""
    translated_text: str = ""
    dictionary_entry: DictionaryEntry | None = None
    stage: Stage = Stage.CAPTURING
    error: FloatingDictionaryError | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    def cancel(self) -> None:
        """Mark the session cancelled. Later stages and results are dropped."""
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def advance(self, stage: Stage) -> None:
        self.stage = stage

    def fail(self, error: FloatingDictionaryError) -> None:
        self.stage = Stage.FAILED
        self.error = error

    def release_image(self) -> None:
        """Drop the pixel buffer once OCR has consumed it."""
        self.raster_image = None

    @property
    def is_finished(self) -> bool:
        return self.stage in (Stage.DONE, Stage.FAILED)


class SessionGuard:
    """Allows at most one active session per process.

    A second start while a session is running is rejected rather than queued:
    the user triggered a new capture while the previous result is still on
    screen, and silently stacking selections would be confusing.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """Claim the session slot.

        Raises:
            SessionBusy: Another session is active.
        """
        if not self._lock.acquire(blocking=False):
            raise SessionBusy("a capture session is already active")

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()
