"""
Core data types shared by the subtl pipeline.
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from enum import Enum


class TranslatorCode(str, Enum):
    """Closed set of supported translation providers"""
    DEEPL = "DEEPL"
    LIBRE = "LIBRE"
    LUNA = "LUNA"
    NLLB = "NLLB"


class CaptionSource(str, Enum):
    """Where a caption's current text came from during a run"""
    CACHE = "cache"
    TRANSLATED = "translated"
    UNTRANSLATED = "untranslated"


CAPTION = "caption"
META = "meta"


@dataclass
class Caption:
    """One entry in a subtitle file.

    Dialogue entries have ``type == "caption"``; everything structural
    (headers, notes, style blocks, LRC ID tags) is ``"meta"`` and is carried
    through untouched.
    """
    index: int
    type: str
    text: str
    start: int = 0
    end: int = 0
    data: Dict[str, Any] = field(default_factory=dict)
    source: Optional[CaptionSource] = None
    modified: bool = False
    translator: Optional[TranslatorCode] = None
    detected_source_lang: Optional[str] = None

    @property
    def is_dialogue(self) -> bool:
        return self.type == CAPTION

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view used for diagnostics dumps"""
        return {
            "index": self.index,
            "type": self.type,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "data": self.data,
            "source": self.source.value if self.source else None,
            "modified": self.modified,
            "translator": self.translator.value if self.translator else None,
            "detectedSourceLang": self.detected_source_lang,
        }


@dataclass(frozen=True)
class TranslationResult:
    """Output of a provider for a single line"""
    text: str
    translator: TranslatorCode
    detected_source_lang: Optional[str] = None

    def to_json(self, include_translator: bool = True) -> Dict[str, Any]:
        """Serialize to the persisted JSON shape"""
        data: Dict[str, Any] = {"text": self.text}
        if include_translator:
            data["translator"] = self.translator.value
        if self.detected_source_lang:
            data["detectedSourceLang"] = self.detected_source_lang
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any], translator: TranslatorCode) -> "TranslationResult":
        """Build a result from its persisted JSON shape

        Args:
            data: Mapping with ``text`` and optional ``detectedSourceLang``
            translator: Provider to attribute the result to when the mapping
                does not name one itself
        """
        code = data.get("translator")
        return cls(
            text=data.get("text") or "",
            translator=TranslatorCode(code) if code else translator,
            detected_source_lang=data.get("detectedSourceLang") or None,
        )
