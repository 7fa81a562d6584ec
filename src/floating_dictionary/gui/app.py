"""PySide6 application entry point."""

import os
import platform
import sys

# On Linux, force Qt to use X11/XWayland instead of native Wayland.
# Native Wayland compositors don't respect WindowStaysOnTopHint or let a
# client place its own window next to the captured region.
# Qt must also stay off the GLib main context: the portal capture runs its
# own GLib loop on the pipeline thread.
# Must be set BEFORE importing Qt.
if platform.system() == "Linux" and "QT_QPA_PLATFORM" not in os.environ:
    os.environ["QT_QPA_PLATFORM"] = "xcb"
os.environ.setdefault("QT_NO_GLIB", "1")

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QCursor, QGuiApplication
from PySide6.QtWidgets import QApplication

from .. import __version__, capture, log
from ..backends.dictionary import LongdoDictionaryBackend
from ..backends.ocr import TesseractOCRBackend
from ..backends.translation import GoogleTranslationBackend
from ..capture.base import estimate_region
from ..config import Config
from ..errors import EnvironmentUnsupported, FloatingDictionaryError
from ..ocr import OcrEnsemble
from ..pipeline import Pipeline
from ..presenter import CloseReason
from ..session import CaptureSession
from ..translate import TranslationClient
from .result_window import ResultWindow

logger = log.get_logger()

# Seconds to wait for the worker thread on exit
WORKER_JOIN_TIMEOUT = 1.0


class PipelineBridge(QObject):
    """PipelineObserver that re-emits worker callbacks as Qt signals.

    Signals are emitted from the pipeline thread; Qt queues them onto the
    GUI thread because the bridge lives there.
    """

    region_ready = Signal(object)
    succeeded = Signal(object)
    failed = Signal(object)
    cancelled = Signal(object)

    def region_captured(self, session: CaptureSession) -> None:
        self.region_ready.emit(session)

    def session_succeeded(self, session: CaptureSession) -> None:
        self.succeeded.emit(session)

    def session_failed(self, session: CaptureSession) -> None:
        self.failed.emit(session)

    def session_cancelled(self, session: CaptureSession) -> None:
        self.cancelled.emit(session)


def build_pipeline(config: Config, backend: capture.CaptureBackend) -> Pipeline:
    """Wire OCR, translation and dictionary backends from configuration."""
    translator = TranslationClient(
        GoogleTranslationBackend(url=config.translate_url, timeout=config.translate_timeout),
        dictionary=LongdoDictionaryBackend(url=config.dictionary_url, timeout=config.dictionary_timeout),
        retry_backoff=config.retry_backoff,
        dictionary_join_timeout=config.dictionary_join_timeout,
    )
    return Pipeline(
        backend,
        OcrEnsemble(TesseractOCRBackend),
        translator,
        keep_screenshots=config.keep_screenshots,
    )


class FloatingDictionaryApp:
    """One capture → translate → show run, then exit."""

    def __init__(self, config: Config, ocr_languages: tuple[str, ...]):
        self._config = config
        self._ocr_languages = ocr_languages
        self._app: QApplication | None = None
        self._window: ResultWindow | None = None
        self._bridge: PipelineBridge | None = None
        self._pipeline: Pipeline | None = None
        self._session: CaptureSession | None = None
        self._exit_code = 0

    def setup(self):
        """Set up the application."""
        if platform.system() == "Linux":
            QApplication.setDesktopFileName("floating-dictionary")

        self._app = QApplication.instance() or QApplication(sys.argv)
        self._app.setApplicationName("Floating Dictionary")
        # Exit is driven by _finish(), not by the last window closing
        self._app.setQuitOnLastWindowClosed(False)

        backend = capture.detect()
        self._pipeline = build_pipeline(self._config, backend)

        self._window = ResultWindow(self._config)
        self._window.closed.connect(self._on_window_closed)

        self._bridge = PipelineBridge()
        self._bridge.region_ready.connect(self._on_region_ready)
        self._bridge.succeeded.connect(self._on_succeeded)
        self._bridge.failed.connect(self._on_failed)
        self._bridge.cancelled.connect(self._on_cancelled)

        self._app.aboutToQuit.connect(self._on_quit)

    def _pointer_region(self, session: CaptureSession):
        """Locate the captured rectangle in logical screen coordinates.

        Capture backends only hand back pixels; the pointer rests on the
        selection's bottom-right corner when the drag ends.
        """
        pos = QCursor.pos()
        screen = QGuiApplication.screenAt(pos) or QGuiApplication.primaryScreen()
        scale = screen.devicePixelRatio() if screen else 1.0
        width = round(session.region.width / scale)
        height = round(session.region.height / scale)
        return estimate_region((pos.x(), pos.y()), width, height)

    def _on_region_ready(self, session: CaptureSession):
        if session is not self._session:
            return
        session.region = self._pointer_region(session)
        self._window.show_loading(session.region)

    def _on_succeeded(self, session: CaptureSession):
        if session is not self._session:
            return
        self._window.show_result(session)

    def _on_failed(self, session: CaptureSession):
        if session is not self._session:
            return
        error = session.error or FloatingDictionaryError()
        if isinstance(error, EnvironmentUnsupported):
            logger.error("no usable screenshot backend", err=str(error))
            self._finish(1)
            return
        self._exit_code = 1
        self._window.show_error(error.user_message)

    def _on_cancelled(self, session: CaptureSession):
        if session is not self._session:
            return
        self._finish(0)

    def _on_window_closed(self, reason: CloseReason | None):
        logger.debug("result window closed", reason=reason.value if reason else None)
        self._finish(self._exit_code)

    def _finish(self, exit_code: int):
        if self._session is not None:
            self._pipeline.close(self._session)
            self._session = None
        self._app.exit(exit_code)

    def _on_quit(self):
        """Handle application quit."""
        if self._pipeline is not None:
            self._pipeline.cancel()
            self._pipeline.join(WORKER_JOIN_TIMEOUT)

    def run(self) -> int:
        """Run the application.

        Returns:
            Exit code.
        """
        self._session = self._pipeline.start(
            self._config.target_lang, self._ocr_languages, self._bridge
        )
        return self._app.exec()


def run(config: Config, ocr_languages: tuple[str, ...]) -> int:
    """Main entry point for GUI application.

    Returns:
        Process exit code.
    """
    logger.info(f"floating-dictionary v{__version__}")
    logger.info(
        "system",
        platform=platform.system(),
        version=platform.release(),
        python=platform.python_version(),
        desktop=os.environ.get("XDG_CURRENT_DESKTOP", ""),
    )

    app = FloatingDictionaryApp(config, ocr_languages)
    app.setup()
    return app.run()
