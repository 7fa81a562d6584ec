"""Result presenter: state machine, window geometry and result layout.

The Qt window in gui/result_window.py feeds events in; this module decides
what they mean. Keeping it free of Qt lets the lifecycle rules be tested
without a display.

    HIDDEN --capture done--> LOADING --success--> PRESENTING
       |                        |                     |
       +--------failure---------+---failure/dismiss---+--focus lost/dismiss/timeout--> CLOSED
"""

from collections.abc import Callable
from enum import Enum
from html import escape

from . import log
from .capture.base import Region
from .session import CaptureSession

logger = log.get_logger()

# Gap between the captured region and the result window
PLACEMENT_MARGIN = 8


class PresenterState(Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    PRESENTING = "presenting"
    CLOSED = "closed"


class CloseReason(Enum):
    FOCUS_LOST = "focus-lost"
    DISMISSED = "dismissed"
    TIMEOUT = "timeout"
    FAILED = "failed"


StateListener = Callable[[PresenterState, PresenterState], None]


class PresenterStateMachine:
    """Lifecycle of the result window for one session.

    Focus loss only counts once the window has actually had focus: a freshly
    mapped window reports "not focused" before the compositor activates it.
    CLOSED is terminal; events arriving afterwards are ignored.
    """

    def __init__(self):
        self._state = PresenterState.HIDDEN
        self._focus_gained = False
        self._close_reason: CloseReason | None = None
        self._error_message = ""
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> PresenterState:
        return self._state

    @property
    def close_reason(self) -> CloseReason | None:
        return self._close_reason

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def is_closed(self) -> bool:
        return self._state is PresenterState.CLOSED

    def add_listener(self, listener: StateListener) -> None:
        """Call listener(old, new) after every transition."""
        self._listeners.append(listener)

    def _transition(self, new_state: PresenterState) -> None:
        old_state = self._state
        self._state = new_state
        logger.debug("presenter transition", old=old_state.value, new=new_state.value)
        for listener in self._listeners:
            listener(old_state, new_state)

    def _close(self, reason: CloseReason) -> bool:
        if self._state is PresenterState.CLOSED:
            return False
        self._close_reason = reason
        self._transition(PresenterState.CLOSED)
        return True

    def on_loading(self) -> bool:
        """The region was captured and recognition/translation has started."""
        if self._state is not PresenterState.HIDDEN:
            return False
        self._transition(PresenterState.LOADING)
        return True

    def on_success(self) -> bool:
        """Results are ready to show."""
        if self._state is not PresenterState.LOADING:
            return False
        self._transition(PresenterState.PRESENTING)
        return True

    def on_failure(self, message: str) -> bool:
        """The pipeline failed; the window shows message briefly, then goes away."""
        if self._state not in (PresenterState.HIDDEN, PresenterState.LOADING):
            return False
        self._error_message = message
        return self._close(CloseReason.FAILED)

    def on_focus_gained(self) -> None:
        self._focus_gained = True

    def on_focus_lost(self) -> bool:
        if not self._focus_gained:
            return False
        if self._state not in (PresenterState.LOADING, PresenterState.PRESENTING):
            return False
        return self._close(CloseReason.FOCUS_LOST)

    def on_dismiss(self) -> bool:
        """Escape key or similar explicit dismissal."""
        if self._state not in (PresenterState.LOADING, PresenterState.PRESENTING):
            return False
        return self._close(CloseReason.DISMISSED)

    def on_timeout(self) -> bool:
        """The display ceiling elapsed without user interaction."""
        if self._state is not PresenterState.PRESENTING:
            return False
        return self._close(CloseReason.TIMEOUT)


def fit_size(
    content: tuple[int, int],
    minimum: tuple[int, int],
    maximum: tuple[int, int],
) -> tuple[int, int]:
    """Clamp a content size hint between the window's minimum and maximum."""
    width = min(max(content[0], minimum[0]), maximum[0])
    height = min(max(content[1], minimum[1]), maximum[1])
    return width, height


def place_near_region(
    size: tuple[int, int],
    region: Region | None,
    screen: tuple[int, int, int, int],
    margin: int = PLACEMENT_MARGIN,
) -> tuple[int, int]:
    """Top-left position for a window of the given size next to a region.

    Prefers just below the region, then just above it, and finally clamps
    so the window stays inside the screen's available area.

    Args:
        size: Window (width, height).
        region: Captured region in screen coordinates, None if unknown.
        screen: Available area as (x, y, width, height).
        margin: Gap between region and window.
    """
    width, height = size
    sx, sy, sw, sh = screen

    if region is None or region.is_empty:
        x = sx + (sw - width) // 2
        y = sy + (sh - height) // 2
    else:
        x = region.x
        y = region.y + region.height + margin
        if y + height > sy + sh:
            y = region.y - margin - height

    x = max(sx, min(x, sx + sw - width))
    y = max(sy, min(y, sy + sh - height))
    return x, y


# Longdo usually returns a dozen examples; the window only has room for a few
MAX_EXAMPLES = 2

HEADWORD_COLOR = "#FFFFFF"
SECTION_COLOR = "#DCDCDC"
WORD_COLOR = "#A0DCFF"
MUTED_COLOR = "#B4B4B4"


def _section(title: str) -> str:
    return f'<p style="margin-top:10px; margin-bottom:2px;"><u><b style="color:{SECTION_COLOR};">{escape(title)}</b></u></p>'


def _bullet(body: str) -> str:
    return f'<p style="margin:0 0 4px 8px;">&bull; {body}</p>'


def render_result_html(session: CaptureSession, max_examples: int = MAX_EXAMPLES) -> str:
    """Rich text for a finished session.

    Layout: the recognized text as headword, the translation under
    "Google (<TARGET>):", then Longdo senses and example sentences when a
    dictionary entry is present.
    """
    target = session.target_lang.upper()
    parts = [
        f'<p style="font-size:150%; margin-bottom:6px;"><b style="color:{HEADWORD_COLOR};">{escape(session.ocr_text)}</b></p>',
        "<hr/>",
        _section(f"Google ({target}):"),
        _bullet(escape(session.translated_text)),
    ]

    entry = session.dictionary_entry
    if entry is not None and entry.senses:
        parts.append(_section("Longdo Dict:"))
        for sense in entry.senses:
            parts.append(
                _bullet(
                    f'<b style="color:{WORD_COLOR};">{escape(sense.word)}</b> '
                    f'<i style="color:{MUTED_COLOR};">[{escape(sense.pos)}]</i><br/>'
                    f"{escape(sense.translation)} ({escape(sense.dictionary)})"
                )
            )

    if entry is not None and entry.example_sentences:
        source = (session.detected_source_lang or "auto").upper()
        parts.append(_section("Example Sentences (Longdo):"))
        for example in entry.example_sentences[:max_examples]:
            parts.append(
                _bullet(
                    f'<i style="color:{MUTED_COLOR};">{escape(source)}:</i> {escape(example.source)}<br/>'
                    f'<i style="color:{MUTED_COLOR};">-&gt; {escape(target)}:</i> {escape(example.target)}'
                )
            )

    return "\n".join(parts)
