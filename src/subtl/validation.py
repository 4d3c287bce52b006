"""
Acceptance checks applied to every raw provider result.
"""
from typing import Optional
from dataclasses import dataclass
from enum import Enum
import json

from rich.console import Console
from rich.markup import escape

from .models import TranslationResult
from .scripts import ScriptDetector, primary_subtag

console = Console()


class Rejection(str, Enum):
    """Reasons a translation result is refused, in evaluation order"""
    SAME_AS_TARGET = "source lang being the same as target lang"
    SOURCE_MISMATCH = "source lang not matching desired source lang"
    EMPTY = "translation being empty"
    UNCHANGED = "result being unchanged"
    UNTRANSLATED_CHARACTERS = "result still containing untranslated characters"


@dataclass(frozen=True)
class Verdict:
    reason: Optional[Rejection] = None

    @property
    def accepted(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.accepted


ACCEPT = Verdict()


def _is_auto(lang: Optional[str]) -> bool:
    return not lang or lang.strip().lower() == "auto"


class ValidationPolicy:
    """Decides whether a provider result may replace a caption's text"""

    def __init__(
        self,
        target_lang: str,
        source_lang: Optional[str] = None,
        detector: Optional[ScriptDetector] = None,
    ):
        """Initialize the policy

        Args:
            target_lang: Language the provider translates into
            source_lang: Expected source language; ``None`` or ``"auto"``
                disables the source mismatch check
            detector: Script detector shared with the pipeline
        """
        self.target_lang = target_lang
        self.source_lang = None if _is_auto(source_lang) else source_lang
        self.detector = detector or ScriptDetector()

    def check(self, original: str, result: TranslationResult) -> Verdict:
        """Evaluate the rejection rules without logging; first match wins"""
        new_text = (result.text or "").strip()
        detected = (result.detected_source_lang or "").strip().lower()

        if detected and detected[:2] == self.target_lang.strip().lower()[:2]:
            return Verdict(Rejection.SAME_AS_TARGET)
        if detected and self.source_lang and detected[:2] != self.source_lang.strip().lower()[:2]:
            # NLLB-style codes normalise to the same primary subtag
            if primary_subtag(detected) != primary_subtag(self.source_lang):
                return Verdict(Rejection.SOURCE_MISMATCH)
        if not new_text:
            return Verdict(Rejection.EMPTY)
        if new_text == original.strip():
            return Verdict(Rejection.UNCHANGED)
        if self.detector.needs_translation(new_text, self.source_lang, strict=True, target_lang=self.target_lang):
            return Verdict(Rejection.UNTRANSLATED_CHARACTERS)
        return ACCEPT

    def validate(self, original: str, result: TranslationResult) -> Verdict:
        """Evaluate a result and log the reason when it is rejected

        Args:
            original: Trimmed caption text that was submitted
            result: Raw provider result

        Returns:
            Verdict; falsy when rejected
        """
        verdict = self.check(original, result)
        if not verdict.accepted:
            payload = json.dumps(result.to_json(), ensure_ascii=False)
            console.print(f"[yellow]Skipped due to {verdict.reason.value}: {escape(payload)}[/yellow]")
        return verdict
