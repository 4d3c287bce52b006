"""
Re-submit previously rejected lines from a ledger file.
"""
from typing import Dict, List, Optional, Tuple, Union
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .errors import ConfigError
from .models import TranslationResult, TranslatorCode
from .providers.base import Translator
from .store import RejectionLedger, TranslationCache, write_results
from .validation import ValidationPolicy

console = Console()

# Providers whose source language takes the same ISO codes the ledger stores
HINTED_PROVIDERS = (TranslatorCode.DEEPL, TranslatorCode.LIBRE)


def translated_path(path: Union[str, Path]) -> Path:
    """``data/tlfix.json`` -> ``data/tlfix-translated.json``"""
    path = Path(path)
    return path.with_name(f"{path.stem}-translated{path.suffix}")


def source_hint(translator: Translator, detected: Optional[str]) -> Optional[str]:
    """Source language to send for an entry, given its stored detection"""
    if not detected or translator.code not in HINTED_PROVIDERS:
        return None
    if translator.code == TranslatorCode.LIBRE:
        return detected.lower()
    return detected.upper()


def _translate_with_hint(translator: Translator, texts: List[str], hint: Optional[str]) -> List[TranslationResult]:
    if hint is None:
        return translator.translate(texts)
    configured = translator.source_lang
    translator.source_lang = hint
    try:
        return translator.translate(texts)
    finally:
        translator.source_lang = configured


def retranslate_ledger(
    ledger_path: Union[str, Path],
    translator: Translator,
    policy: ValidationPolicy,
    cache: Optional[TranslationCache] = None,
) -> Tuple[Dict[str, TranslationResult], Path]:
    """Translate every key of a ledger-shaped JSON file again

    Entries are grouped by their stored ``detectedSourceLang``, which is
    sent as the source language where the provider accepts it. The output
    file holds every entry: accepted ones with the new result, the rest
    unchanged.

    Args:
        ledger_path: JSON object keyed by original text
        translator: Active provider
        policy: Validation applied to the new results
        cache: When given, accepted results are added and the cache saved

    Returns:
        Accepted results keyed by original text, and the path the full map
        was written to
    """
    ledger_path = Path(ledger_path)
    if not ledger_path.exists():
        raise ConfigError(f"Ledger file not found: {ledger_path}")

    entries = dict(RejectionLedger(ledger_path).items())
    console.print(f"Translating {len(entries)} lines from {escape(str(ledger_path))}")

    groups: Dict[Optional[str], List[str]] = {}
    for text, previous in entries.items():
        groups.setdefault(source_hint(translator, previous.detected_source_lang), []).append(text)

    accepted: Dict[str, TranslationResult] = {}
    for hint, texts in groups.items():
        for text, result in zip(texts, _translate_with_hint(translator, texts, hint)):
            if policy.validate(text, result):
                accepted[text] = result
                console.print(f"Result: {escape(result.text)}")

    output = translated_path(ledger_path)
    write_results(output, {**entries, **accepted})

    if cache is not None and accepted:
        for text, result in accepted.items():
            cache.put(text, result)
        cache.save()

    console.print(
        f"[green]{len(accepted)} of {len(entries)} lines accepted, written to {escape(str(output))}[/green]"
    )
    return accepted, output
