"""
LunaTranslator provider over its local HTTP API.
"""
from typing import Optional
from urllib.parse import urljoin

import requests

from ..errors import ProviderInitError
from ..models import TranslationResult, TranslatorCode
from .base import LineTranslator


class LunaTranslator(LineTranslator):
    """LunaTranslator network service; one request per line

    Luna does not report languages, so ``source_lang``/``target_lang`` are
    only declarations used for classification and validation.
    """

    code = TranslatorCode.LUNA

    def __init__(
        self,
        endpoint: str = "http://127.0.0.1:2333/",
        translator_name: Optional[str] = None,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = "en",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(source_lang=source_lang, target_lang=target_lang)
        self.endpoint = endpoint
        self.translator_name = translator_name or ""
        self.translator_id = ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def _initialize(self) -> None:
        list_url = urljoin(self.endpoint, "/api/list/translator")
        try:
            resp = self.session.get(list_url, timeout=self.timeout)
            resp.raise_for_status()
            translators = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderInitError(
                f"Error initializing translator! {e}",
                hint=f"Make sure LunaTranslator's network service is enabled at {self.endpoint} (LUNA_ENDPOINT)",
            ) from e

        if not translators:
            raise ProviderInitError(
                "No translators enabled in LunaTranslator",
                hint="Enable at least one translator in LunaTranslator's settings",
            )
        if not self.translator_name:
            return

        match = next(
            (t for t in translators if (t.get("name") or "").lower() == self.translator_name.lower()),
            None,
        )
        if not match or not match.get("id"):
            raise ProviderInitError(
                f"Invalid translator \"{self.translator_name}\"",
                hint=(
                    f"Please visit {list_url} for a list of enabled translators. "
                    "You must configure these yourself in LunaTranslator."
                ),
            )
        self.translator_id = match["id"]

    def translate_line(self, line: str) -> TranslationResult:
        params = {"text": line}
        if self.translator_id:
            params["id"] = self.translator_id
        resp = self.session.get(urljoin(self.endpoint, "/api/translate"), params=params, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json() or {}
        return TranslationResult(text=(data.get("result") or "").strip(), translator=self.code)
