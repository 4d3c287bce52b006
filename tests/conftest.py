from __future__ import annotations

from typing import Callable, Dict, List, Optional, Union

import pytest

from subtl.models import TranslationResult, TranslatorCode
from subtl.providers.base import Translator

Reply = Union[str, TranslationResult]


class FakeTranslator(Translator):
    """In-memory provider answering from a dict or a callable"""

    batch = True

    def __init__(
        self,
        replies: Optional[Union[Dict[str, Reply], Callable[[str], Reply]]] = None,
        code: TranslatorCode = TranslatorCode.DEEPL,
        source_lang: Optional[str] = "ja",
        target_lang: Optional[str] = "en-US",
        detected: Optional[str] = "ja",
    ):
        super().__init__(source_lang=source_lang, target_lang=target_lang)
        self.code = code
        self.replies = replies or {}
        self.detected = detected
        self.calls: List[List[str]] = []
        self.sources: List[Optional[str]] = []
        self.init_calls = 0

    def _initialize(self) -> None:
        self.init_calls += 1

    def _reply(self, line: str) -> TranslationResult:
        reply = self.replies(line) if callable(self.replies) else self.replies.get(line, "")
        if isinstance(reply, TranslationResult):
            return reply
        return TranslationResult(text=reply, translator=self.code, detected_source_lang=self.detected)

    def _translate(self, lines: List[str]) -> List[TranslationResult]:
        self.calls.append(list(lines))
        self.sources.append(self.source_lang)
        return [self._reply(line) for line in lines]


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator(
        {
            "こんにちは": "Hello",
            "さようなら": "Goodbye",
            "ありがとう": "Thank you",
        }
    )


SAMPLE_SRT = """1
00:00:01,000 --> 00:00:02,500
こんにちは

2
00:00:03,000 --> 00:00:04,000
Already English

3
00:00:05,000 --> 00:00:06,000
さようなら
"""
