"""Translation client: remote translation with one retry, plus the dictionary side path."""

import re
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass

from . import log
from .backends.base import (
    DictionaryBackend,
    DictionaryEntry,
    TranslationBackend,
    TranslationRequest,
    TranslationResponse,
)
from .errors import DictionaryError, ServiceUnavailable

logger = log.get_logger()

# Translation retry defaults
DEFAULT_MAX_RETRIES = 1          # One retry after the first failure, never more
DEFAULT_RETRY_BACKOFF = 0.5      # Seconds before the first retry, doubled per attempt
DEFAULT_DICTIONARY_JOIN_TIMEOUT = 3.0  # Seconds to wait for the lookup after translating

# The dictionary backend only covers English headwords translated to Thai
DICTIONARY_TARGET_LANG = "th"
ENGLISH_WORD = re.compile(r"^[A-Za-z]+(?:['-][A-Za-z]+)*$")


def should_lookup_dictionary(text: str, target_lang: str) -> bool:
    """Whether the recognized text qualifies for a dictionary lookup.

    Requires exactly one whitespace-delimited token shaped like an English
    word, and Thai as the target language.
    """
    if target_lang.lower() != DICTIONARY_TARGET_LANG:
        return False
    tokens = text.split()
    return len(tokens) == 1 and bool(ENGLISH_WORD.match(tokens[0]))


@dataclass
class TranslationResult:
    """What the translation stage hands to the presenter."""

    response: TranslationResponse
    dictionary_entry: DictionaryEntry | None = None


class TranslationClient:
    """Translates recognized text and, for single English words, looks them up."""

    def __init__(
        self,
        backend: TranslationBackend,
        dictionary: DictionaryBackend | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        dictionary_join_timeout: float = DEFAULT_DICTIONARY_JOIN_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the client.

        Args:
            backend: Translation service.
            dictionary: Optional headword lookup service.
            max_retries: Retries after a ServiceUnavailable failure.
            retry_backoff: Delay before the first retry in seconds.
            dictionary_join_timeout: How long to wait for a lookup that is
                still running once translation is done.
            sleep: Delay function used when no cancel token is given,
                replaceable for tests.
        """
        self._backend = backend
        self._dictionary = dictionary
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._dictionary_join_timeout = dictionary_join_timeout
        self._sleep = sleep

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        cancel: threading.Event | None = None,
    ) -> TranslationResponse:
        """Translate text, retrying once if the service is unavailable.

        Args:
            text: Text to translate.
            target_lang: Target language code.
            source_lang: Source language code, None to auto-detect.
            cancel: When set, no further attempt is started. The backoff
                wait ends early once it is set.

        Raises:
            ServiceUnavailable: Both attempts failed.
            ProtocolMismatch: The service answered with an unexpected payload.
        """
        if not text or not text.strip():
            return TranslationResponse(translated_text="", resolved_source_lang=source_lang or "")

        request = TranslationRequest(text=text, target_lang=target_lang, source_lang=source_lang)
        attempt = 0
        while True:
            start = time.perf_counter()
            try:
                response = self._backend.translate(request)
            except ServiceUnavailable as e:
                if attempt >= self._max_retries or (cancel is not None and cancel.is_set()):
                    raise
                delay = self._retry_backoff * (2**attempt)
                attempt += 1
                logger.warning("translation attempt failed", attempt=attempt, retry_in=delay, err=str(e))
                if cancel is None:
                    self._sleep(delay)
                elif cancel.wait(delay):
                    logger.debug("translation retry abandoned after cancel")
                    raise
                continue

            logger.info(
                "translation complete",
                source=response.resolved_source_lang,
                target=target_lang,
                ms=int((time.perf_counter() - start) * 1000),
            )
            return response

    def lookup_dictionary(self, word: str) -> DictionaryEntry | None:
        """Best-effort dictionary lookup. Failures are logged and return None."""
        if self._dictionary is None:
            return None
        try:
            return self._dictionary.lookup(word)
        except DictionaryError as e:
            logger.debug("dictionary lookup failed", word=word, err=str(e))
            return None

    def translate_with_dictionary(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        cancel: threading.Event | None = None,
    ) -> TranslationResult:
        """Translate text and, when eligible, look it up in the dictionary concurrently.

        The lookup never delays the result by more than the join timeout and
        never turns into an error.
        """
        if self._dictionary is None or not should_lookup_dictionary(text, target_lang):
            return TranslationResult(self.translate(text, target_lang, source_lang, cancel))

        word = text.strip()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dictionary")
        try:
            lookup = executor.submit(self.lookup_dictionary, word)
            response = self.translate(text, target_lang, source_lang, cancel)
            try:
                entry = lookup.result(timeout=self._dictionary_join_timeout)
            except FutureTimeoutError:
                logger.debug("dictionary lookup timed out", word=word)
                entry = None
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return TranslationResult(response=response, dictionary_entry=entry)
