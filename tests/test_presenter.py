"""Tests for the result presenter state machine, geometry and layout."""

from floating_dictionary.backends.base import DictionaryEntry, DictionarySense, ExampleSentence
from floating_dictionary.capture.base import Region
from floating_dictionary.presenter import (
    CloseReason,
    PresenterState,
    PresenterStateMachine,
    fit_size,
    place_near_region,
    render_result_html,
)
from floating_dictionary.session import CaptureSession

SCREEN = (0, 0, 1920, 1080)


def _presenting():
    presenter = PresenterStateMachine()
    presenter.on_loading()
    presenter.on_success()
    return presenter


class TestPresenterStateMachine:
    """Tests for PresenterStateMachine transitions."""

    def test_happy_path(self):
        presenter = PresenterStateMachine()

        assert presenter.on_loading()
        assert presenter.state is PresenterState.LOADING
        assert presenter.on_success()
        assert presenter.state is PresenterState.PRESENTING

    def test_success_requires_loading(self):
        presenter = PresenterStateMachine()

        assert not presenter.on_success()
        assert presenter.state is PresenterState.HIDDEN

    def test_focus_loss_before_focus_gained_ignored(self):
        """A freshly mapped window is not focused yet; that is not a focus loss."""
        presenter = _presenting()

        assert not presenter.on_focus_lost()
        assert presenter.state is PresenterState.PRESENTING

    def test_focus_loss_closes(self):
        presenter = _presenting()
        presenter.on_focus_gained()

        assert presenter.on_focus_lost()
        assert presenter.state is PresenterState.CLOSED
        assert presenter.close_reason is CloseReason.FOCUS_LOST

    def test_escape_closes(self):
        presenter = _presenting()

        assert presenter.on_dismiss()
        assert presenter.close_reason is CloseReason.DISMISSED

    def test_dismiss_while_loading(self):
        presenter = PresenterStateMachine()
        presenter.on_loading()

        assert presenter.on_dismiss()
        assert presenter.is_closed

    def test_timeout_only_while_presenting(self):
        presenter = PresenterStateMachine()
        presenter.on_loading()

        assert not presenter.on_timeout()

        presenter.on_success()
        assert presenter.on_timeout()
        assert presenter.close_reason is CloseReason.TIMEOUT

    def test_failure_from_loading(self):
        presenter = PresenterStateMachine()
        presenter.on_loading()

        assert presenter.on_failure("Translation failed")
        assert presenter.state is PresenterState.CLOSED
        assert presenter.close_reason is CloseReason.FAILED
        assert presenter.error_message == "Translation failed"

    def test_failure_before_capture_finished(self):
        presenter = PresenterStateMachine()

        assert presenter.on_failure("Screenshot failed")
        assert presenter.close_reason is CloseReason.FAILED

    def test_failure_after_presenting_ignored(self):
        presenter = _presenting()

        assert not presenter.on_failure("late")
        assert presenter.state is PresenterState.PRESENTING

    def test_closed_is_terminal(self):
        presenter = _presenting()
        presenter.on_dismiss()

        assert not presenter.on_timeout()
        assert not presenter.on_dismiss()
        assert not presenter.on_loading()
        assert presenter.close_reason is CloseReason.DISMISSED

    def test_listeners_see_transitions(self):
        presenter = PresenterStateMachine()
        seen = []
        presenter.add_listener(lambda old, new: seen.append((old, new)))

        presenter.on_loading()
        presenter.on_dismiss()

        assert seen == [
            (PresenterState.HIDDEN, PresenterState.LOADING),
            (PresenterState.LOADING, PresenterState.CLOSED),
        ]


class TestFitSize:
    """Tests for fit_size."""

    def test_within_bounds(self):
        assert fit_size((500, 300), (400, 150), (800, 600)) == (500, 300)

    def test_clamped_to_minimum(self):
        assert fit_size((100, 50), (400, 150), (800, 600)) == (400, 150)

    def test_clamped_to_maximum(self):
        assert fit_size((1200, 2000), (400, 150), (800, 600)) == (800, 600)


class TestPlaceNearRegion:
    """Tests for place_near_region."""

    def test_below_region(self):
        region = Region(100, 100, 300, 40)

        assert place_near_region((400, 200), region, SCREEN) == (100, 148)

    def test_above_when_no_room_below(self):
        region = Region(100, 950, 300, 40)

        assert place_near_region((400, 200), region, SCREEN) == (100, 742)

    def test_clamped_to_right_edge(self):
        region = Region(1800, 100, 100, 40)

        x, _ = place_near_region((400, 200), region, SCREEN)

        assert x == 1920 - 400

    def test_centered_without_region(self):
        assert place_near_region((400, 200), None, SCREEN) == (760, 440)

    def test_respects_screen_offset(self):
        """Available geometry can start below a top panel or on a second monitor."""
        screen = (1920, 32, 1280, 1000)
        region = Region(1900, 0, 100, 20)

        assert place_near_region((400, 200), region, screen) == (1920, 32)


class TestRenderResultHtml:
    """Tests for render_result_html."""

    def _session(self, entry=None):
        session = CaptureSession(target_lang="th", ocr_languages=("eng",))
        session.ocr_text = "Hello"
        session.translated_text = "สวัสดี"
        session.detected_source_lang = "en"
        session.dictionary_entry = entry
        return session

    def test_translation_only(self):
        html = render_result_html(self._session())

        assert "Hello" in html
        assert "Google (TH):" in html
        assert "สวัสดี" in html
        assert "Longdo Dict:" not in html
        assert "Example Sentences (Longdo):" not in html

    def test_dictionary_sections(self):
        entry = DictionaryEntry(
            headword="Hello",
            senses=[DictionarySense("hello", "int", "สวัสดี", "Hope Dictionary")],
            example_sentences=[
                ExampleSentence("Hello there.", "สวัสดีครับ"),
                ExampleSentence("Say hello.", "ทักทาย"),
                ExampleSentence("Third one.", "อันที่สาม"),
            ],
        )

        html = render_result_html(self._session(entry))

        assert "Longdo Dict:" in html
        assert "[int]" in html
        assert "(Hope Dictionary)" in html
        assert "Example Sentences (Longdo):" in html
        assert "Say hello." in html
        assert "Third one." not in html
        assert "EN:" in html

    def test_text_is_escaped(self):
        session = self._session()
        session.ocr_text = "<b>x</b> & y"

        html = render_result_html(session)

        assert "&lt;b&gt;x&lt;/b&gt; &amp; y" in html
