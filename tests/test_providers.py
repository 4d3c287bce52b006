from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import deepl
import pytest
import requests

from subtl.config import load_settings
from subtl.errors import ProviderInitError
from subtl.models import TranslationResult, TranslatorCode
from subtl.providers import (
    DeepLTranslator,
    LibreTranslator,
    LunaTranslator,
    NLLBTranslator,
    create_translator,
)
from subtl.providers.base import LineTranslator


class FakeResponse:
    def __init__(self, payload: Any, status: int = 200):
        self.payload = payload
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self) -> Any:
        return self.payload


class FakeSession:
    """Records requests and answers from a url -> handler table"""

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[Dict[str, Any]] = []

    def _answer(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        handler = self.routes[url]
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(**kwargs)
        return FakeResponse(handler)

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._answer("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._answer("POST", url, **kwargs)


LIBRE = "http://127.0.0.1:5000"
LUNA = "http://127.0.0.1:2333"
LANGUAGES = [
    {"code": "en", "name": "English", "targets": ["ja", "en"]},
    {"code": "ja", "name": "Japanese", "targets": ["en", "ja"]},
]


# LibreTranslate

def _libre_translate(**kwargs) -> FakeResponse:
    q = kwargs["json"]["q"]
    if q == "fail":
        raise requests.ConnectionError("refused")
    return FakeResponse({"translatedText": f" {q.upper()} ", "detectedLanguage": {"language": "ja"}})


def test_libre_initialize_and_translate_per_line() -> None:
    session = FakeSession({f"{LIBRE}/languages": LANGUAGES, f"{LIBRE}/translate": _libre_translate})
    translator = LibreTranslator(endpoint=f"{LIBRE}/", source_lang="ja", target_lang="en", session=session)

    results = translator.translate(["abc", "fail", "def"])
    assert [r.text for r in results] == ["ABC", "", "DEF"]
    assert results[0].translator is TranslatorCode.LIBRE
    assert results[0].detected_source_lang == "ja"
    assert results[1].detected_source_lang is None

    posts = [r for r in session.requests if r["method"] == "POST"]
    assert len(posts) == 3
    assert posts[0]["json"] == {"q": "abc", "source": "ja", "target": "en", "format": "text"}


def test_libre_sends_api_key() -> None:
    session = FakeSession({f"{LIBRE}/languages": LANGUAGES, f"{LIBRE}/translate": _libre_translate})
    translator = LibreTranslator(endpoint=f"{LIBRE}/", api_key="secret", session=session)
    translator.translate(["abc"])
    assert session.requests[-1]["json"]["api_key"] == "secret"


def test_libre_auto_source_skips_language_check() -> None:
    session = FakeSession({f"{LIBRE}/languages": [{"code": "fr", "targets": []}]})
    translator = LibreTranslator(endpoint=f"{LIBRE}/", source_lang=None, session=session)
    translator.initialize()
    assert translator.source_lang == "auto"
    assert translator.initialized


@pytest.mark.parametrize(
    "source,target,message",
    [
        ("xx", "en", "Invalid source language"),
        ("ja", "xx", "Invalid target language"),
    ],
)
def test_libre_rejects_unsupported_languages(source: str, target: str, message: str) -> None:
    session = FakeSession({f"{LIBRE}/languages": LANGUAGES})
    translator = LibreTranslator(endpoint=f"{LIBRE}/", source_lang=source, target_lang=target, session=session)
    with pytest.raises(ProviderInitError, match=message) as exc:
        translator.initialize()
    assert f"{LIBRE}/languages" in exc.value.hint


def test_libre_unreachable_is_fatal() -> None:
    session = FakeSession({f"{LIBRE}/languages": requests.ConnectionError("refused")})
    with pytest.raises(ProviderInitError):
        LibreTranslator(endpoint=f"{LIBRE}/", session=session).initialize()


def test_libre_empty_language_list_is_fatal() -> None:
    session = FakeSession({f"{LIBRE}/languages": []})
    with pytest.raises(ProviderInitError, match="No supported languages"):
        LibreTranslator(endpoint=f"{LIBRE}/", session=session).initialize()


# LunaTranslator

def test_luna_resolves_translator_id_and_translates() -> None:
    def luna_translate(**kwargs) -> FakeResponse:
        return FakeResponse({"result": f"luna:{kwargs['params']['text']}"})

    session = FakeSession(
        {
            f"{LUNA}/api/list/translator": [{"id": "dev_deepl", "name": "DeepL"}, {"id": "bing", "name": "Bing"}],
            f"{LUNA}/api/translate": luna_translate,
        }
    )
    translator = LunaTranslator(endpoint=f"{LUNA}/", translator_name="bing", session=session)
    results = translator.translate(["こんにちは"])

    assert translator.translator_id == "bing"
    assert results[0].text == "luna:こんにちは"
    assert results[0].translator is TranslatorCode.LUNA
    assert session.requests[-1]["params"] == {"text": "こんにちは", "id": "bing"}


def test_luna_unknown_translator_is_fatal() -> None:
    session = FakeSession({f"{LUNA}/api/list/translator": [{"id": "bing", "name": "Bing"}]})
    translator = LunaTranslator(endpoint=f"{LUNA}/", translator_name="google", session=session)
    with pytest.raises(ProviderInitError, match="Invalid translator"):
        translator.initialize()


def test_luna_line_failure_yields_empty_result() -> None:
    session = FakeSession(
        {
            f"{LUNA}/api/list/translator": [{"id": "bing", "name": "Bing"}],
            f"{LUNA}/api/translate": lambda **kwargs: FakeResponse({}, status=500),
        }
    )
    results = LunaTranslator(endpoint=f"{LUNA}/", session=session).translate(["a", "b"])
    assert [r.text for r in results] == ["", ""]


# DeepL

class FakeDeepLClient:
    def __init__(self, limit_reached: bool = False, error: Optional[Exception] = None):
        self.limit_reached = limit_reached
        self.error = error
        self.translate_calls: List[Dict[str, Any]] = []

    def get_usage(self):
        if self.error:
            raise self.error
        detail = SimpleNamespace(valid=True, count=500000, limit=500000)
        return SimpleNamespace(any_limit_reached=self.limit_reached, character=detail, document=SimpleNamespace(valid=False))

    def get_source_languages(self):
        return [SimpleNamespace(code="JA"), SimpleNamespace(code="EN")]

    def get_target_languages(self):
        return [SimpleNamespace(code="EN-US"), SimpleNamespace(code="JA")]

    def translate_text(self, text, source_lang=None, target_lang=None):
        self.translate_calls.append({"text": text, "source_lang": source_lang, "target_lang": target_lang})
        return [SimpleNamespace(text=f" {t}! ", detected_source_lang="JA") for t in text]


def test_deepl_batches_all_lines_in_one_call() -> None:
    client = FakeDeepLClient()
    translator = DeepLTranslator(api_key="key", source_lang="ja", client=client)
    results = translator.translate(["一", "二"])

    assert client.translate_calls == [{"text": ["一", "二"], "source_lang": "ja", "target_lang": "en-US"}]
    assert [r.text for r in results] == ["一!", "二!"]
    assert results[0].detected_source_lang == "JA"


def test_deepl_quota_exhausted_is_fatal() -> None:
    translator = DeepLTranslator(api_key="key", client=FakeDeepLClient(limit_reached=True))
    with pytest.raises(ProviderInitError, match="Characters: 500000 of 500000"):
        translator.initialize()


def test_deepl_bad_key_is_fatal() -> None:
    client = FakeDeepLClient(error=deepl.AuthorizationException("Authorization failure"))
    with pytest.raises(ProviderInitError) as exc:
        DeepLTranslator(api_key="bad", client=client).initialize()
    assert "DEEPL_API_KEY" in exc.value.hint


def test_deepl_missing_key_is_fatal_before_client_is_built() -> None:
    translator = DeepLTranslator(api_key="")
    with pytest.raises(ProviderInitError, match="No DeepL API key") as exc:
        translator.initialize()
    assert "DEEPL_API_KEY" in exc.value.hint
    assert not translator.initialized


def test_deepl_unsupported_target_is_fatal() -> None:
    translator = DeepLTranslator(api_key="key", target_lang="xx", client=FakeDeepLClient())
    with pytest.raises(ProviderInitError, match="Invalid target language"):
        translator.initialize()


def test_deepl_call_failure_returns_empty_results() -> None:
    class FailingClient(FakeDeepLClient):
        def translate_text(self, text, source_lang=None, target_lang=None):
            raise deepl.DeepLException("timeout")

    translator = DeepLTranslator(api_key="key", client=FailingClient())
    results = translator.translate(["一", "二"])
    assert [r.text for r in results] == ["", ""]


# Registry

@pytest.mark.parametrize(
    "code,cls",
    [
        ("DEEPL", DeepLTranslator),
        ("libre", LibreTranslator),
        ("Luna", LunaTranslator),
        ("NLLB", NLLBTranslator),
    ],
)
def test_create_translator(code: str, cls: type) -> None:
    settings = load_settings({"TRANSLATOR": code, "LUNA_SOURCE_LANG": "ja"})
    translator = create_translator(settings)
    assert isinstance(translator, cls)
    assert not translator.initialized


def test_translate_with_no_lines_does_not_initialize() -> None:
    client = FakeDeepLClient(error=RuntimeError("should not be called"))
    assert DeepLTranslator(api_key="key", client=client).translate([]) == []


class MarkupLineTranslator(LineTranslator):
    code = TranslatorCode.LUNA

    def _initialize(self) -> None:
        pass

    def translate_line(self, line: str) -> TranslationResult:
        if line.startswith("[/i]"):
            raise RuntimeError("bad reply [/bold]")
        return TranslationResult(text=f"ok {line}", translator=self.code)


def test_line_failure_with_markup_text_is_isolated() -> None:
    results = MarkupLineTranslator().translate(["[/i] こんにちは", "さようなら"])
    assert [r.text for r in results] == ["", "ok さようなら"]
