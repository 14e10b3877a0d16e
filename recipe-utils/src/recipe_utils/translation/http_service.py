"""Translation through a JSON-over-HTTP translation service."""

import logging
from typing import List, Optional

import requests

from recipe_utils.translation.base import Translator
from recipe_utils.translation.retry import retry_on_connection_error

logger = logging.getLogger(__name__)


class HttpTranslator(Translator):
    """Calls a translation service that translates a batch per request.

    The service receives ``{"q": [...], "source": "en", "target": "nl"}`` and
    answers ``{"translatedText": [...]}``.

    Attributes:
        session: The underlying requests session.
        endpoint: URL of the translation endpoint.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = 30,
        user_agent: str = "recipe-utils/1.0",
    ):
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout

    @retry_on_connection_error()
    def _post(self, payload: dict) -> requests.Response:
        response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response

    def translate_batch(
        self, sentences: List[str], source_tag: str, target_tag: str
    ) -> List[str]:
        if not sentences:
            return []
        payload = {"q": sentences, "source": source_tag, "target": target_tag}
        if self.api_key:
            payload["api_key"] = self.api_key

        try:
            response = self._post(payload)
            translated = response.json().get("translatedText")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Translation request to {self.endpoint} failed: {e}")
            return []

        if not isinstance(translated, list) or len(translated) != len(sentences):
            logger.error(f"Unexpected translation response from {self.endpoint}")
            return []
        return [str(item) for item in translated]
