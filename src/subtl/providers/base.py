"""
Provider contract shared by every translation backend.
"""
from typing import List, Optional, Sequence
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape

from ..models import TranslationResult, TranslatorCode

console = Console()

DEFAULT_TARGET_LANG = "en-US"


class Translator(ABC):
    """Uniform interface over a translation backend

    Subclasses set :attr:`code` and implement :meth:`_initialize` and
    :meth:`_translate`. ``translate`` never raises for per-call failures;
    failed lines come back as empty-text results.
    """

    code: TranslatorCode
    # True when all lines go out in a single request
    batch: bool = False

    def __init__(self, source_lang: Optional[str] = None, target_lang: Optional[str] = None):
        self.source_lang = source_lang or None
        self.target_lang = target_lang or None
        self.initialized = False

    @property
    def effective_target_lang(self) -> str:
        return self.target_lang or DEFAULT_TARGET_LANG

    def initialize(self) -> None:
        """Verify credentials, connectivity and language support

        Raises:
            ProviderInitError: The provider cannot be used; the run must stop
        """
        self._initialize()
        self.initialized = True

    def translate(self, lines: Sequence[str]) -> List[TranslationResult]:
        """Translate lines, preserving length and order

        Args:
            lines: Text to translate

        Returns:
            One result per input line
        """
        if not lines:
            return []
        if not self.initialized:
            self.initialize()
        return self._translate(list(lines))

    def empty_result(self) -> TranslationResult:
        return TranslationResult(text="", translator=self.code)

    def describe(self) -> str:
        source = self.source_lang or "auto"
        return f"{self.code.value} ({source} -> {self.effective_target_lang})"

    @abstractmethod
    def _initialize(self) -> None:
        ...

    @abstractmethod
    def _translate(self, lines: List[str]) -> List[TranslationResult]:
        ...


class LineTranslator(Translator):
    """Provider that needs one round trip per line

    Errors are isolated per line.
    """

    def _translate(self, lines: List[str]) -> List[TranslationResult]:
        results = []
        for line in lines:
            try:
                results.append(self.translate_line(line))
            except Exception as e:
                console.print(f"[red]{self.code.value} translation failed for {escape(repr(line))}: {escape(str(e))}[/red]")
                results.append(self.empty_result())
        return results

    @abstractmethod
    def translate_line(self, line: str) -> TranslationResult:
        ...
