"""
Per-file caption pipeline: classify, translate, validate and merge.
"""
from typing import Dict, List, Optional
from dataclasses import dataclass, field
import json

from rich.console import Console
from rich.markup import escape

from . import subtitle_io
from .errors import CaptionMismatchError
from .models import Caption, CaptionSource, TranslationResult
from .providers.base import Translator
from .scripts import ScriptDetector
from .store import RejectionLedger, TranslationCache
from .validation import ValidationPolicy

console = Console()


@dataclass
class FileOutcome:
    """Result of running the pipeline over one file's captions"""
    captions: List[Caption]
    content: Optional[str] = None
    cached: int = 0
    translated: int = 0
    rejected: int = 0
    skipped: int = 0
    accepted: Dict[str, TranslationResult] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return any(c.modified for c in self.captions)


class CaptionPipeline:
    """Decides, per caption, whether to reuse, translate, accept or reject"""

    def __init__(
        self,
        translator: Translator,
        cache: TranslationCache,
        ledger: RejectionLedger,
        policy: Optional[ValidationPolicy] = None,
        detector: Optional[ScriptDetector] = None,
    ):
        """Initialize the pipeline

        Args:
            translator: Active provider
            cache: Accepted translations; only updated through :meth:`commit`
            ledger: Rejected attempts; persisted on every rejection
            policy: Validation policy; built from the translator's languages
                when omitted
            detector: Needs-translation predicate
        """
        self.translator = translator
        self.cache = cache
        self.ledger = ledger
        self.detector = detector or ScriptDetector()
        self.policy = policy or ValidationPolicy(
            target_lang=translator.effective_target_lang,
            source_lang=translator.source_lang,
            detector=self.detector,
        )

    def classify(self, captions: List[Caption]) -> None:
        """Tag each caption as skipped, served from cache, or untranslated"""
        for caption in captions:
            caption.modified = False
            caption.source = None
            text = (caption.text or "").strip()
            if (
                not caption.is_dialogue
                or not text
                or not self.detector.needs_translation(text, self.translator.source_lang)
            ):
                continue

            hit = self.cache.get(text, self.translator.code)
            if hit is not None:
                caption.source = CaptionSource.CACHE
                caption.modified = caption.text != hit.text
                caption.text = hit.text
                caption.translator = hit.translator
                caption.detected_source_lang = hit.detected_source_lang
                continue

            caption.source = CaptionSource.UNTRANSLATED

    def translate_pending(self, captions: List[Caption]) -> Dict[str, TranslationResult]:
        """Submit every untranslated caption in one provider call and merge results

        Args:
            captions: Classified captions, mutated in place

        Returns:
            Accepted results keyed by original text

        Raises:
            CaptionMismatchError: A result could not be matched back to its caption
        """
        pending = [c for c in captions if c.source == CaptionSource.UNTRANSLATED]
        if not pending:
            console.print("No lines to translate.")
            return {}

        originals = [c.text.strip() for c in pending]
        console.print(f"Translating {len(pending)} lines")
        try:
            results = self.translator.translate(originals)
        except Exception as e:
            console.print(f"[red]{self.translator.code.value} translation failed: {escape(str(e))}[/red]")
            results = [self.translator.empty_result() for _ in pending]

        if len(results) != len(pending):
            raise CaptionMismatchError(
                f"Provider returned {len(results)} results for {len(pending)} lines"
            )

        positions = {c.index: i for i, c in enumerate(captions)}
        accepted: Dict[str, TranslationResult] = {}
        for caption, original, result in zip(pending, originals, results):
            position = positions.get(caption.index)
            if position is None or captions[position] is not caption:
                self._dump_mismatch(caption, captions)
                raise CaptionMismatchError(
                    f"Unable to find original caption {caption.index} for translated caption"
                )

            if not self.policy.validate(original, result):
                self.ledger.put(original, result)
                continue

            stored = TranslationResult(
                text=result.text.strip(),
                translator=result.translator,
                detected_source_lang=result.detected_source_lang,
            )
            accepted[original] = stored

            target = captions[position]
            target.source = CaptionSource.TRANSLATED
            target.text = stored.text
            target.translator = stored.translator
            target.detected_source_lang = stored.detected_source_lang
            target.modified = True

        console.print(f"Finished translation resulting in {len(accepted)} valid translations")
        return accepted

    @staticmethod
    def _dump_mismatch(caption: Caption, captions: List[Caption]) -> None:
        console.print("[red]Unable to find original caption for translated caption. Something went very wrong.[/red]")
        console.print(escape(json.dumps(caption.to_dict(), ensure_ascii=False)), style="red")
        console.print(escape(json.dumps([c.to_dict() for c in captions], ensure_ascii=False)), style="red")

    def run(self, captions: List[Caption]) -> FileOutcome:
        """Classify and translate a caption sequence in place"""
        self.classify(captions)
        accepted = self.translate_pending(captions)

        outcome = FileOutcome(captions=captions, accepted=accepted)
        for caption in captions:
            if caption.source == CaptionSource.CACHE:
                outcome.cached += 1
            elif caption.source == CaptionSource.TRANSLATED:
                outcome.translated += 1
            elif caption.source == CaptionSource.UNTRANSLATED:
                outcome.rejected += 1
            else:
                outcome.skipped += 1
        return outcome

    def commit(self, outcome: FileOutcome) -> None:
        """Add a file's accepted results to the in-memory cache

        Call only once the file's output has been written, so a failed
        file leaves the cache untouched.
        """
        for original, result in outcome.accepted.items():
            self.cache.put(original, result)

    def process(self, content: str, fmt: str) -> FileOutcome:
        """Run the pipeline over subtitle file content

        Args:
            content: File contents
            fmt: Subtitle format ("srt", "vtt", "lrc")

        Returns:
            Outcome whose ``content`` is the rebuilt file, or None when no
            caption changed
        """
        captions = subtitle_io.parse(content, fmt)
        outcome = self.run(captions)
        if outcome.changed:
            outcome.content = subtitle_io.build(captions, fmt)
        return outcome
