"""Coordinates one capture → OCR → translate run on a worker thread.

Uses Python threading (not QThread) like the rest of the background work;
results reach the GUI through a PipelineObserver, which the Qt bridge turns
into signals.
"""

import threading
import time
from collections.abc import Callable
from typing import Protocol

from . import log
from .capture import CaptureBackend, RegionCapture, estimate_region, get_capture
from .errors import FloatingDictionaryError, UserCancelled
from .ocr import OcrEnsemble
from .session import CaptureSession, SessionGuard, Stage
from .translate import TranslationClient

logger = log.get_logger()


class PipelineObserver(Protocol):
    """Receives progress from the worker thread. Calls arrive off the GUI thread."""

    def region_captured(self, session: CaptureSession) -> None:
        """The user finished drawing; session.region is set."""
        ...

    def session_succeeded(self, session: CaptureSession) -> None:
        """OCR and translation are done; results are on the session."""
        ...

    def session_failed(self, session: CaptureSession) -> None:
        """A stage failed; session.error says which."""
        ...

    def session_cancelled(self, session: CaptureSession) -> None:
        """The user cancelled the selection, or the window closed mid-run."""
        ...


class _Cancelled(Exception):
    """Raised inside run() when cancel() was called between stages."""


class Pipeline:
    """Runs sessions one at a time.

    Stages execute strictly in order on a single worker thread. Closing the
    result window while a stage is still running cancels the session: the
    pending capture is aborted, no new network attempt starts, and results
    that arrive later are dropped instead of being applied.
    """

    def __init__(
        self,
        backend: CaptureBackend,
        ocr: OcrEnsemble,
        translator: TranslationClient,
        capture_factory: Callable[[CaptureBackend, bool], RegionCapture] = get_capture,
        pointer: Callable[[], tuple[int, int] | None] | None = None,
        keep_screenshots: bool = False,
        guard: SessionGuard | None = None,
    ):
        """Initialize the pipeline.

        Args:
            backend: Screenshot backend chosen by capture.detect().
            ocr: OCR ensemble.
            translator: Translation client.
            capture_factory: Builds the capture implementation for backend.
            pointer: Returns the pointer position, used to locate the region.
            keep_screenshots: Keep the backend's screenshot files on disk.
            guard: Single-session guard, shared if several pipelines exist.
        """
        self._backend = backend
        self._ocr = ocr
        self._translator = translator
        self._capture_factory = capture_factory
        self._pointer = pointer
        self._keep_screenshots = keep_screenshots
        self._guard = guard or SessionGuard()

        self._session: CaptureSession | None = None
        self._captures: dict[str, RegionCapture] = {}
        self._capture_lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def start(
        self,
        target_lang: str,
        ocr_languages: tuple[str, ...],
        observer: PipelineObserver,
    ) -> CaptureSession:
        """Create a session and run it on a background thread.

        Raises:
            SessionBusy: A session is already active in this process.
        """
        self._guard.acquire()
        session = CaptureSession(target_lang=target_lang, ocr_languages=ocr_languages)
        self._session = session
        log.session_logger(session.session_id).info(
            "session started",
            backend=self._backend.value,
            target=target_lang,
            ocr_languages="+".join(ocr_languages),
        )
        self._thread = threading.Thread(
            target=self.run, args=(session, observer), name="pipeline", daemon=True
        )
        self._thread.start()
        return session

    def run(self, session: CaptureSession, observer: PipelineObserver) -> None:
        """Run all stages for a session in the calling thread."""
        slog = log.session_logger(session.session_id)
        start = time.perf_counter()

        try:
            self._run_stages(session, observer, slog)
        except (_Cancelled, UserCancelled):
            self._end_cancelled(session, observer, slog)
        except FloatingDictionaryError as e:
            if session.cancelled:
                self._end_cancelled(session, observer, slog)
            else:
                session.fail(e)
                slog.error("session failed", err=type(e).__name__, detail=str(e))
                observer.session_failed(session)
        except Exception as e:
            logger.exception("unexpected pipeline error")
            if session.cancelled:
                self._end_cancelled(session, observer, slog)
            else:
                session.fail(FloatingDictionaryError(str(e)))
                observer.session_failed(session)
        else:
            slog.info("session ready", ms=int((time.perf_counter() - start) * 1000))
        finally:
            session.release_image()

    def _end_cancelled(self, session: CaptureSession, observer: PipelineObserver, slog) -> None:
        # Cancellation is not an error: the session ends DONE with no error set
        slog.info("session cancelled", stage=session.stage.value)
        session.advance(Stage.DONE)
        observer.session_cancelled(session)

    @staticmethod
    def _check_cancelled(session: CaptureSession) -> None:
        if session.cancelled:
            raise _Cancelled()

    def _run_stages(self, session: CaptureSession, observer: PipelineObserver, slog) -> None:
        # Capture
        capture = self._capture_factory(self._backend, self._keep_screenshots)
        with self._capture_lock:
            self._captures[session.session_id] = capture
        try:
            self._check_cancelled(session)
            image = capture.capture()
        finally:
            with self._capture_lock:
                self._captures.pop(session.session_id, None)
        self._check_cancelled(session)

        pointer = self._pointer() if self._pointer else None
        session.raster_image = image
        session.region = estimate_region(pointer, image.width, image.height)
        slog.debug("region captured", width=image.width, height=image.height)
        session.advance(Stage.RECOGNIZING)
        observer.region_captured(session)

        # OCR; the pixel buffer is released as soon as recognition returns
        try:
            text = self._ocr.recognize(image.pixels, session.ocr_languages)
        finally:
            session.release_image()
        self._check_cancelled(session)
        session.ocr_text = text
        slog.info("text recognized", text=text)
        session.advance(Stage.TRANSLATING)

        # Translation (+ dictionary side path)
        result = self._translator.translate_with_dictionary(
            text, session.target_lang, cancel=session.cancel_event
        )
        self._check_cancelled(session)
        session.translated_text = result.response.translated_text
        session.detected_source_lang = result.response.resolved_source_lang
        session.dictionary_entry = result.dictionary_entry
        session.advance(Stage.PRESENTING)
        observer.session_succeeded(session)

    def cancel(self, session: CaptureSession | None = None) -> None:
        """Abort a session, by default the most recently started one.

        Safe to call from any thread.
        """
        session = session or self._session
        if session is None:
            return
        session.cancel()
        with self._capture_lock:
            capture = self._captures.get(session.session_id)
        if capture is not None:
            capture.cancel()

    def close(self, session: CaptureSession) -> None:
        """The result window is gone: finish or cancel the session and free the slot."""
        if not session.is_finished and session.stage is not Stage.PRESENTING:
            self.cancel(session)
        if session.stage is Stage.PRESENTING:
            session.advance(Stage.DONE)
        session.release_image()
        self._guard.release()
        log.session_logger(session.session_id).debug("session closed", stage=session.stage.value)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
