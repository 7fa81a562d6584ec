"""Longdo Dict backend (English to Thai), scraped from the mobile page."""

import re

import requests
from bs4 import BeautifulSoup

from ... import log
from ...errors import DictionaryError
from ..base import BackendInfo, DictionaryBackend, DictionaryEntry, DictionarySense, ExampleSentence

logger = log.get_logger()

DEFAULT_URL = "https://dict.longdo.com/mobile.php"
DEFAULT_TIMEOUT = 10.0

# The mobile page serves a stripped-down layout to unknown clients
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Dictionaries whose tables are kept, in display order
TARGET_DICTIONARIES = (
    "NECTEC Lexitron Dictionary EN-TH",
    "Nontri Dictionary",
    "Hope Dictionary",
)

# Header above the example sentence table ("example sentences")
EXAMPLES_HEADER = "ตัวอย่างประโยค"

_BRACKETED_POS = re.compile(r"^\s*\((.*?)\)\s*(.*)", re.DOTALL)
_LEADING_POS = re.compile(r"^(pron|adj|det|n|v|adv|int|conj)(?:\.|\b)\s*(.*)", re.IGNORECASE | re.DOTALL)


def parse_definition(definition: str) -> tuple[str, str]:
    """Split a definition cell into (part of speech, translation).

    Cells look like "(n) คำ, คำศัพท์" or "(vt) adj. สวย". A part-of-speech
    abbreviation at the start of the remainder wins over the bracketed one.
    """
    match = _BRACKETED_POS.match(definition)
    if not match:
        return "N/A", definition

    pos = match.group(1).strip() or "N/A"
    rest = match.group(2).strip()

    leading = _LEADING_POS.match(rest)
    if leading:
        return leading.group(1), leading.group(2).strip()
    return pos, rest


def _following_result_table(header):
    """First sibling <table class="result-table"> after a <b> header."""
    for sibling in header.find_next_siblings():
        if sibling.name == "table" and "result-table" in (sibling.get("class") or []):
            return sibling
    return None


def _parse_senses(soup: BeautifulSoup) -> list[DictionarySense]:
    senses = []
    for dictionary in TARGET_DICTIONARIES:
        for header in soup.find_all("b"):
            if dictionary not in header.get_text():
                continue
            table = _following_result_table(header)
            if table is None:
                continue
            for row in table.find_all("tr"):
                cells = row.find_all("td")
                if len(cells) != 2:
                    continue
                word = cells[0].get_text().strip()
                definition = cells[1].get_text().strip()
                if not word or not definition:
                    continue
                pos, translation = parse_definition(definition)
                senses.append(DictionarySense(word=word, pos=pos, translation=translation, dictionary=dictionary))
    return senses


def _parse_examples(soup: BeautifulSoup) -> list[ExampleSentence]:
    for header in soup.find_all("b"):
        if EXAMPLES_HEADER not in header.get_text():
            continue
        table = _following_result_table(header)
        if table is None:
            continue
        examples = []
        for row in table.find_all("tr"):
            fonts = row.select('font[color="black"]')
            if len(fonts) != 2:
                continue
            source = fonts[0].get_text().strip()
            target = fonts[1].get_text().strip()
            if source and target:
                examples.append(ExampleSentence(source=source, target=target))
        return examples
    return []


def parse_longdo_html(html: str, headword: str) -> DictionaryEntry:
    """Build a DictionaryEntry from a Longdo mobile result page."""
    soup = BeautifulSoup(html, "html.parser")
    return DictionaryEntry(
        headword=headword,
        senses=_parse_senses(soup),
        example_sentences=_parse_examples(soup),
    )


class LongdoDictionaryBackend(DictionaryBackend):
    """Looks up English headwords on dict.longdo.com."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def get_info(cls) -> BackendInfo:
        """Get metadata about this backend."""
        return BackendInfo(
            id="longdo",
            name="Longdo Dict",
            description="English-Thai dictionary senses and example sentences",
        )

    def lookup(self, word: str) -> DictionaryEntry:
        try:
            response = self._session.get(
                self._url,
                params={"search": word},
                headers={"User-Agent": USER_AGENT},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DictionaryError(f"dictionary request failed: {e}") from e

        entry = parse_longdo_html(response.text, word)
        if entry.is_empty():
            raise DictionaryError(f"no dictionary entry for '{word}'")

        logger.debug(
            "dictionary entry found",
            word=word,
            senses=len(entry.senses),
            examples=len(entry.example_sentences),
        )
        return entry
