"""
DeepL provider using the official ``deepl`` client library.
"""
from typing import List, Optional

import deepl
from rich.console import Console
from rich.markup import escape

from ..errors import ProviderInitError
from ..models import TranslationResult, TranslatorCode
from .base import Translator

console = Console()

API_KEY_HINT = "Please ensure you have provided a valid DEEPL_API_KEY in the .env file"


class DeepLTranslator(Translator):
    """Batch provider: one request per file"""

    code = TranslatorCode.DEEPL
    batch = True

    def __init__(
        self,
        api_key: str,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = "en-US",
        client: Optional[deepl.Translator] = None,
    ):
        super().__init__(source_lang=source_lang, target_lang=target_lang)
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> deepl.Translator:
        if self._client is None:
            if not (self.api_key or "").strip():
                raise ProviderInitError("No DeepL API key configured", hint=API_KEY_HINT)
            try:
                self._client = deepl.Translator(self.api_key)
            except ValueError as e:
                raise ProviderInitError(f"Error initializing translator: {e}", hint=API_KEY_HINT) from e
        return self._client

    def _initialize(self) -> None:
        try:
            usage = self.client.get_usage()
        except deepl.DeepLException as e:
            raise ProviderInitError(f"Error initializing translator: {e}", hint=API_KEY_HINT) from e

        if usage.any_limit_reached:
            details = ["Translation limit exceeded."]
            if usage.character.valid:
                details.append(f"Characters: {usage.character.count} of {usage.character.limit}")
            if usage.document.valid:
                details.append(f"Documents: {usage.document.count} of {usage.document.limit}")
            raise ProviderInitError(
                "\n".join(details),
                hint="Wait for the quota to reset or use a different DEEPL_API_KEY",
            )

        try:
            if self.source_lang:
                self._check_language(self.source_lang, self.client.get_source_languages(), "source")
            self._check_language(self.effective_target_lang, self.client.get_target_languages(), "target")
        except deepl.DeepLException as e:
            raise ProviderInitError(f"Could not list DeepL languages: {e}", hint=API_KEY_HINT) from e

    @staticmethod
    def _check_language(lang: str, languages, kind: str) -> None:
        codes = {language.code.lower() for language in languages}
        if lang.lower() not in codes:
            raise ProviderInitError(
                f"Invalid {kind} language \"{lang}\"",
                hint=f"Supported {kind} languages: {', '.join(sorted(codes))}",
            )

    def _translate(self, lines: List[str]) -> List[TranslationResult]:
        try:
            results = self.client.translate_text(
                lines,
                source_lang=self.source_lang,
                target_lang=self.effective_target_lang,
            )
        except deepl.DeepLException as e:
            console.print(f"[red]DeepL translation failed: {escape(str(e))}[/red]")
            return [self.empty_result() for _ in lines]

        if not isinstance(results, list):
            results = [results]
        return [
            TranslationResult(
                text=(r.text or "").strip(),
                translator=self.code,
                detected_source_lang=r.detected_source_lang,
            )
            for r in results
        ]
