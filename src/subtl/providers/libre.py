"""
LibreTranslate provider over its REST API.
"""
from typing import Optional
from urllib.parse import urljoin

import requests

from ..errors import ProviderInitError
from ..models import TranslationResult, TranslatorCode
from .base import LineTranslator


class LibreTranslator(LineTranslator):
    """Self-hosted LibreTranslate; one request per line"""

    code = TranslatorCode.LIBRE

    def __init__(
        self,
        endpoint: str = "http://127.0.0.1:5000/",
        source_lang: Optional[str] = "auto",
        target_lang: Optional[str] = "en",
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(source_lang=source_lang or "auto", target_lang=target_lang or "en")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def languages_url(self) -> str:
        return urljoin(self.endpoint, "/languages")

    def _initialize(self) -> None:
        try:
            resp = self.session.get(self.languages_url, timeout=self.timeout)
            resp.raise_for_status()
            languages = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderInitError(
                f"Error initializing translator! {e}",
                hint=f"Make sure LibreTranslate is running at {self.endpoint} (LIBRE_ENDPOINT)",
            ) from e

        if not languages:
            raise ProviderInitError("No supported languages found")
        if self.source_lang.lower() == "auto":
            return

        source = next(
            (lang for lang in languages if (lang.get("code") or "").lower() == self.source_lang.lower()),
            None,
        )
        if not source or not source.get("targets"):
            raise ProviderInitError(
                f"Invalid source language \"{self.source_lang}\"",
                hint=f"Please visit {self.languages_url} for a list of supported language codes.",
            )
        if not any((t or "").lower() == self.target_lang.lower() for t in source["targets"]):
            raise ProviderInitError(
                f"Invalid target language \"{self.target_lang}\"",
                hint=f"Please visit {self.languages_url} for a list of supported language codes.",
            )

    def translate_line(self, line: str) -> TranslationResult:
        payload = {"q": line, "source": self.source_lang, "target": self.target_lang, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        resp = self.session.post(urljoin(self.endpoint, "/translate"), json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json() or {}

        detected = data.get("detectedLanguage") or {}
        return TranslationResult(
            text=(data.get("translatedText") or "").strip(),
            translator=self.code,
            detected_source_lang=detected.get("language") or None,
        )
