"""Tests for the Longdo dictionary backend."""

from unittest.mock import MagicMock

import pytest
import requests

from floating_dictionary.backends.base import DictionaryEntry, DictionarySense, ExampleSentence
from floating_dictionary.backends.dictionary.longdo import (
    USER_AGENT,
    LongdoDictionaryBackend,
    parse_definition,
    parse_longdo_html,
)
from floating_dictionary.errors import DictionaryError

LONGDO_PAGE = """
<html><body>
<b>NECTEC Lexitron Dictionary EN-TH</b>
<table class="result-table">
  <tr><td>hello</td><td>(int) สวัสดี</td></tr>
  <tr><td>hello</td><td>(n) การทักทาย</td></tr>
  <tr><td colspan="2">See also: hi</td></tr>
</table>
<b>Some Other Dictionary</b>
<table class="result-table">
  <tr><td>hello</td><td>(n) ignored</td></tr>
</table>
<b>Hope Dictionary</b>
<br/>
<table class="result-table">
  <tr><td>hello</td><td>(vi) adj. ทักทาย</td></tr>
</table>
<b>ตัวอย่างประโยค</b>
<table class="result-table">
  <tr><td><font color="black">Hello, world.</font><br/><font color="black">สวัสดีชาวโลก</font></td></tr>
  <tr><td><font color="black">Say hello to him.</font><br/><font color="black">ทักทายเขา</font></td></tr>
  <tr><td><font color="black">Half a pair</font></td></tr>
  <tr><td><font color="black">Third</font><br/><font color="black">ที่สาม</font></td></tr>
</table>
</body></html>
"""


class TestParseDefinition:
    """Tests for parse_definition."""

    def test_bracketed_pos(self):
        assert parse_definition("(n) การทักทาย") == ("n", "การทักทาย")

    def test_leading_abbreviation_wins(self):
        assert parse_definition("(vt) adj. สวย") == ("adj", "สวย")

    def test_word_starting_like_abbreviation(self):
        """A translation starting with "never" is not read as pos "n"."""
        assert parse_definition("(adv) never ever") == ("adv", "never ever")

    def test_no_pos(self):
        assert parse_definition("สวัสดี") == ("N/A", "สวัสดี")

    def test_empty_brackets(self):
        assert parse_definition("() สวัสดี") == ("N/A", "สวัสดี")


class TestParseLongdoHtml:
    """Tests for parse_longdo_html."""

    def test_senses_from_known_dictionaries_in_order(self):
        entry = parse_longdo_html(LONGDO_PAGE, "Hello")

        assert entry.headword == "Hello"
        assert entry.senses == [
            DictionarySense("hello", "int", "สวัสดี", "NECTEC Lexitron Dictionary EN-TH"),
            DictionarySense("hello", "n", "การทักทาย", "NECTEC Lexitron Dictionary EN-TH"),
            DictionarySense("hello", "adj", "ทักทาย", "Hope Dictionary"),
        ]

    def test_examples_need_both_sentences(self):
        entry = parse_longdo_html(LONGDO_PAGE, "Hello")

        assert entry.example_sentences[:2] == [
            ExampleSentence("Hello, world.", "สวัสดีชาวโลก"),
            ExampleSentence("Say hello to him.", "ทักทายเขา"),
        ]
        assert len(entry.example_sentences) == 3

    def test_definitions_and_examples_text(self):
        entry = parse_longdo_html(LONGDO_PAGE, "Hello")

        assert entry.definitions[0] == "hello [int] สวัสดี (NECTEC Lexitron Dictionary EN-TH)"
        assert entry.examples[0] == "Hello, world. -> สวัสดีชาวโลก"

    def test_page_without_results(self):
        entry = parse_longdo_html("<html><body><p>ไม่พบคำ</p></body></html>", "qwzx")

        assert entry.is_empty()


class TestLongdoDictionaryBackend:
    """Tests for LongdoDictionaryBackend.lookup with a mocked session."""

    def _session(self, text="", error=None):
        session = MagicMock()
        if error is not None:
            session.get.side_effect = error
        else:
            session.get.return_value.text = text
        return session

    def test_lookup(self):
        session = self._session(LONGDO_PAGE)
        backend = LongdoDictionaryBackend(url="https://example.test/m.php", timeout=2, session=session)

        entry = backend.lookup("Hello")

        assert isinstance(entry, DictionaryEntry)
        assert len(entry.senses) == 3
        args, kwargs = session.get.call_args
        assert args[0] == "https://example.test/m.php"
        assert kwargs["params"] == {"search": "Hello"}
        assert kwargs["headers"]["User-Agent"] == USER_AGENT
        assert kwargs["timeout"] == 2

    def test_no_entry_raises(self):
        backend = LongdoDictionaryBackend(session=self._session("<html></html>"))

        with pytest.raises(DictionaryError, match="no dictionary entry"):
            backend.lookup("qwzx")

    def test_network_error_raises(self):
        backend = LongdoDictionaryBackend(session=self._session(error=requests.Timeout("slow")))

        with pytest.raises(DictionaryError):
            backend.lookup("Hello")
