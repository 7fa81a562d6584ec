"""Google Translate backend using the public web endpoint."""

import requests

from ... import log
from ...errors import ProtocolMismatch, ServiceUnavailable
from ..base import BackendInfo, TranslationBackend, TranslationRequest, TranslationResponse

logger = log.get_logger()

DEFAULT_URL = "https://translate.googleapis.com/translate_a/single"
DEFAULT_TIMEOUT = 10.0


def parse_response(payload) -> tuple[str, str]:
    """Extract (translated text, detected source language) from the JSON body.

    The endpoint answers with nested arrays: element 0 is a list of segments
    whose first item is translated text, element 2 is the detected language.

    Raises:
        ProtocolMismatch: The payload does not have that shape.
    """
    try:
        segments = payload[0]
        detected = payload[2]
    except (TypeError, IndexError, KeyError) as e:
        raise ProtocolMismatch(f"unexpected translation payload: {e}") from e

    if not isinstance(segments, list) or not isinstance(detected, str):
        raise ProtocolMismatch("translation payload has no segments or source language")

    parts = []
    for segment in segments:
        if isinstance(segment, list) and segment and isinstance(segment[0], str):
            parts.append(segment[0])
    return "".join(parts), detected


class GoogleTranslationBackend(TranslationBackend):
    """Translates text with translate.googleapis.com (client=gtx).

    Makes exactly one HTTP request per call; retries belong to the
    TranslationClient.
    """

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
            id="google",
            name="Google Translate",
            description="Web translation with source language detection",
        )

    def translate(self, request: TranslationRequest) -> TranslationResponse:
        params = {
            "client": "gtx",
            "sl": request.source_lang or "auto",
            "tl": request.target_lang,
            "dt": "t",
            "q": request.text,
        }
        try:
            response = self._session.get(self._url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ServiceUnavailable(f"translation request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolMismatch(f"translation response is not JSON: {e}") from e

        translated, detected = parse_response(payload)
        return TranslationResponse(translated_text=translated, resolved_source_lang=detected)
