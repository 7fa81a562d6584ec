"""Floating result window.

A frameless, always-on-top popup placed next to the captured region. All
lifecycle decisions are made by presenter.PresenterStateMachine; this widget
only turns Qt events into presenter events and renders the current state.
"""

from PySide6.QtCore import QEvent, QPoint, Qt, QTimer, Signal
from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QFrame, QLabel, QProgressBar, QScrollArea, QVBoxLayout, QWidget

from .. import log
from ..capture.base import Region
from ..config import Config
from ..presenter import (
    CloseReason,
    PresenterState,
    PresenterStateMachine,
    fit_size,
    place_near_region,
    render_result_html,
)
from ..session import CaptureSession

logger = log.get_logger()

# Layout margins around the content (left/right, top/bottom)
CONTENT_MARGIN_H = 16
CONTENT_MARGIN_V = 12

LOADING_TEXT = "Translating..."
ERROR_COLOR = "#FF7070"


class ResultWindow(QWidget):
    """Popup showing a spinner, then the translation, then going away.

    Signals:
        closed: Emitted once with the CloseReason after the window is gone.
    """

    closed = Signal(object)

    def __init__(self, config: Config, presenter: PresenterStateMachine | None = None):
        super().__init__()
        self._config = config
        self._presenter = presenter or PresenterStateMachine()
        self._presenter.add_listener(self._on_transition)
        self._region: Region | None = None
        self._drag_pos: QPoint | None = None
        self._torn_down = False

        self._idle_timer = QTimer(self)
        self._idle_timer.setSingleShot(True)
        self._idle_timer.setInterval(int(config.display_timeout_seconds * 1000))
        self._idle_timer.timeout.connect(self._presenter.on_timeout)

        self._setup_window()
        self._setup_ui()

    @property
    def presenter(self) -> PresenterStateMachine:
        return self._presenter

    def _setup_window(self):
        """Configure window flags for a focusable popup."""
        flags = (
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool  # Hides from taskbar
        )
        self.setWindowFlags(flags)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setMinimumSize(self._config.min_width, self._config.min_height)
        self.setMaximumSize(self._config.max_width, self._config.max_height)
        self.resize(self._config.min_width, self._config.min_height)
        self.setStyleSheet(f"background-color: {self._config.background_color};")

    def _setup_ui(self):
        """Build the loading and result views."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(CONTENT_MARGIN_H, CONTENT_MARGIN_V, CONTENT_MARGIN_H, CONTENT_MARGIN_V)

        self._spinner = QProgressBar()
        self._spinner.setRange(0, 0)  # Busy indicator
        self._spinner.setTextVisible(False)
        self._spinner.setFixedHeight(6)
        layout.addWidget(self._spinner)

        self._status = QLabel(LOADING_TEXT)
        self._status.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._status.setWordWrap(True)
        self._status.setFont(QFont(self.font().family(), self._config.font_size))
        self._status.setStyleSheet(f"color: {self._config.font_color}; background: transparent;")
        layout.addWidget(self._status)

        self._content = QLabel()
        self._content.setTextFormat(Qt.TextFormat.RichText)
        self._content.setWordWrap(True)
        self._content.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self._content.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self._content.setFont(QFont(self.font().family(), self._config.font_size))
        self._content.setStyleSheet(f"color: {self._config.font_color}; background: transparent;")

        self._scroll = QScrollArea()
        self._scroll.setWidget(self._content)
        self._scroll.setWidgetResizable(True)
        self._scroll.setFrameShape(QFrame.Shape.NoFrame)
        self._scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self._scroll.setStyleSheet("background: transparent;")
        self._scroll.viewport().installEventFilter(self)
        self._scroll.hide()
        layout.addWidget(self._scroll)

    # Presenter inputs

    def show_loading(self, region: Region | None):
        """Capture finished: show the busy indicator next to the region."""
        self._region = region
        if not self._presenter.on_loading():
            return
        self._spinner.show()
        self._status.setText(LOADING_TEXT)
        self._status.show()
        self._scroll.hide()
        self._place(self.size().width(), self.size().height())
        self.show()
        self.raise_()
        self.activateWindow()

    def show_result(self, session: CaptureSession):
        """Pipeline succeeded: render the translation."""
        if not self._presenter.on_success():
            return
        self._spinner.hide()
        self._status.hide()
        self._content.setText(render_result_html(session))
        self._scroll.show()
        self._resize_to_fit()
        self._idle_timer.start()

    def show_error(self, message: str):
        """Pipeline failed: flash message, then tear down."""
        self._presenter.on_failure(message)

    # Presenter outputs

    def _on_transition(self, old: PresenterState, new: PresenterState):
        if new is not PresenterState.CLOSED:
            return
        self._idle_timer.stop()
        reason = self._presenter.close_reason
        logger.debug("result window closing", reason=reason.value if reason else None)

        if reason is CloseReason.FAILED:
            self._show_error_indicator(self._presenter.error_message)
            QTimer.singleShot(int(self._config.error_display_seconds * 1000), self._teardown)
        else:
            self._teardown()

    def _show_error_indicator(self, message: str):
        self._spinner.hide()
        self._scroll.hide()
        self._status.setText(message)
        self._status.setStyleSheet(f"color: {ERROR_COLOR}; background: transparent;")
        self._status.show()
        if not self.isVisible():
            self._place(self._config.min_width, self._config.min_height)
            self.show()

    def _teardown(self):
        if self._torn_down:
            return
        self._torn_down = True
        self.hide()
        self.closed.emit(self._presenter.close_reason)

    # Geometry

    def _available_geometry(self) -> tuple[int, int, int, int]:
        screen = None
        if self._region is not None:
            screen = QGuiApplication.screenAt(QPoint(self._region.x, self._region.y))
        if screen is None:
            screen = QGuiApplication.primaryScreen()
        geometry = screen.availableGeometry()
        return (geometry.x(), geometry.y(), geometry.width(), geometry.height())

    def _place(self, width: int, height: int):
        x, y = place_near_region((width, height), self._region, self._available_geometry())
        self.move(x, y)

    def _resize_to_fit(self):
        """Size the window to its content, within the configured bounds."""
        min_inner = self._config.min_width - 2 * CONTENT_MARGIN_H
        max_inner = self._config.max_width - 2 * CONTENT_MARGIN_H
        width = min(max(self._content.sizeHint().width(), min_inner), max_inner)

        # Use heightForWidth for accurate word-wrapped height calculation
        content_height = self._content.heightForWidth(width)
        if content_height < 0:
            content_height = self._content.sizeHint().height()
        content = (
            width + 2 * CONTENT_MARGIN_H,
            content_height + 2 * CONTENT_MARGIN_V,
        )
        size = fit_size(content, self._config.min_size, self._config.max_size)
        self.resize(*size)
        self._place(*size)

    # Qt events

    def changeEvent(self, event):
        if event.type() == QEvent.Type.ActivationChange:
            if self.isActiveWindow():
                self._presenter.on_focus_gained()
            else:
                self._presenter.on_focus_lost()
        super().changeEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            self._presenter.on_dismiss()
            event.accept()
            return
        self._touch()
        super().keyPressEvent(event)

    def wheelEvent(self, event):
        self._touch()
        super().wheelEvent(event)

    def eventFilter(self, watched, event):
        if event.type() in (QEvent.Type.MouseMove, QEvent.Type.MouseButtonPress, QEvent.Type.Wheel):
            self._touch()
        return super().eventFilter(watched, event)

    def _touch(self):
        """User interaction restarts the display timeout."""
        if self._presenter.state is PresenterState.PRESENTING:
            self._idle_timer.start()

    # Dragging support
    def mousePressEvent(self, event):
        self._touch()
        if event.button() == Qt.MouseButton.LeftButton:
            self._drag_pos = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()

    def mouseMoveEvent(self, event):
        self._touch()
        if event.buttons() == Qt.MouseButton.LeftButton and self._drag_pos:
            self.move(event.globalPosition().toPoint() - self._drag_pos)
            event.accept()

    def mouseReleaseEvent(self, event):
        if self._drag_pos is not None:
            self._drag_pos = None
            event.accept()

    def closeEvent(self, event):
        # Window manager close counts as a dismissal
        if not self._presenter.is_closed:
            self._presenter.on_dismiss()
        if not self._presenter.is_closed:
            self._teardown()
        super().closeEvent(event)
