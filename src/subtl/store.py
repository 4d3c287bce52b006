"""
Persistent JSON stores for accepted translations and rejected attempts.
"""
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union
from pathlib import Path
import json

from rich.console import Console
from rich.markup import escape

from .errors import ConfigError
from .models import TranslationResult, TranslatorCode

console = Console()

LEGACY_TRANSLATOR = TranslatorCode.DEEPL


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return data


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _is_entry(value: Any) -> bool:
    return isinstance(value, dict) and "text" in value and not isinstance(value.get("text"), dict)


class TranslationCache:
    """Accepted translations, scoped per provider

    On disk::

        {"DEEPL": {"<original text>": {"text": "...", "detectedSourceLang": "ja"}}}

    Flat single-provider files (``{"<original text>": {"text": ...}}``) are
    migrated on load into the bucket of the entry's ``translator`` field, or
    the DeepL bucket when the entry does not name one.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._buckets: Dict[TranslatorCode, Dict[str, TranslationResult]] = {}
        self.load()

    def load(self) -> None:
        """(Re)load the cache from disk; a missing file yields an empty cache"""
        self._buckets = {}
        data = _read_json(self.path)
        migrated = 0
        for key, value in data.items():
            if key in TranslatorCode.__members__ and isinstance(value, dict) and not _is_entry(value):
                code = TranslatorCode(key)
                bucket = self._buckets.setdefault(code, {})
                for text, entry in value.items():
                    if _is_entry(entry):
                        bucket[text] = TranslationResult.from_json(entry, code)
            elif _is_entry(value):
                result = TranslationResult.from_json(value, LEGACY_TRANSLATOR)
                self._buckets.setdefault(result.translator, {})[key] = result
                migrated += 1
        if migrated:
            console.print(
                f"[yellow]Migrated {migrated} unscoped cache entries from {escape(str(self.path))}; "
                f"entries without a translator were assigned to {LEGACY_TRANSLATOR.value}[/yellow]"
            )

    def get(self, text: str, translator: TranslatorCode) -> Optional[TranslationResult]:
        """Look up a usable translation for text under the given provider

        Entries with empty text are treated as absent.
        """
        entry = self._buckets.get(translator, {}).get(text.strip())
        if entry is None or not entry.text:
            return None
        return entry

    def put(self, text: str, result: TranslationResult) -> None:
        self._buckets.setdefault(result.translator, {})[text.strip()] = result

    def items(self, translator: Optional[TranslatorCode] = None) -> Iterator[Tuple[str, TranslationResult]]:
        for code, bucket in self._buckets.items():
            if translator is None or code == translator:
                yield from bucket.items()

    def count(self, translator: Optional[TranslatorCode] = None) -> int:
        return sum(1 for _ in self.items(translator))

    def __len__(self) -> int:
        return self.count()

    def to_json(self) -> Dict[str, Any]:
        return {
            code.value: {
                text: result.to_json(include_translator=False)
                for text, result in bucket.items()
            }
            for code, bucket in self._buckets.items()
        }

    def save(self) -> None:
        """Write the full cache snapshot to disk"""
        _write_json(self.path, self.to_json())


class RejectionLedger:
    """Rejected translation attempts, kept for manual review

    Every :meth:`put` rewrites the whole file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._entries: Dict[str, TranslationResult] = {}
        for text, value in _read_json(self.path).items():
            if _is_entry(value):
                self._entries[text] = TranslationResult.from_json(value, LEGACY_TRANSLATOR)

    def put(self, text: str, result: TranslationResult) -> None:
        self._entries[text] = result
        self.save()

    def get(self, text: str) -> Optional[TranslationResult]:
        return self._entries.get(text)

    def items(self) -> Iterator[Tuple[str, TranslationResult]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def save(self) -> None:
        write_results(self.path, self._entries)


def write_results(path: Union[str, Path], results: Mapping[str, TranslationResult]) -> None:
    """Write a flat {original text: result} snapshot in the ledger shape"""
    _write_json(Path(path), {text: result.to_json() for text, result in results.items()})
