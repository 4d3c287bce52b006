"""
Script detection used to decide whether a caption still needs translating.
"""
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple
import re

CodeRange = Tuple[int, int]

KANA = (0x3040, 0x30FF)
CJK_EXT_A = (0x3400, 0x4DBF)
CJK_UNIFIED = (0x4E00, 0x9FFF)
CJK_COMPAT = (0xF900, 0xFAFF)
HALFWIDTH_KANA = (0xFF66, 0xFF9F)
HANGUL_JAMO = (0x1100, 0x11FF)
HANGUL_COMPAT_JAMO = (0x3130, 0x318F)
HANGUL_SYLLABLES = (0xAC00, 0xD7AF)

CJK_RANGES: Tuple[CodeRange, ...] = (KANA, CJK_EXT_A, CJK_UNIFIED, CJK_COMPAT, HALFWIDTH_KANA)

DEFAULT_SCRIPT_TABLE: Dict[str, Tuple[CodeRange, ...]] = {
    "ja": CJK_RANGES,
    "zh": CJK_RANGES,
    "ko": CJK_RANGES + (HANGUL_JAMO, HANGUL_COMPAT_JAMO, HANGUL_SYLLABLES),
}

# Three-letter codes as used by NLLB ("jpn_Jpan") and ISO 639-2
LANGUAGE_ALIASES: Dict[str, str] = {
    "jpn": "ja",
    "zho": "zh",
    "chi": "zh",
    "cmn": "zh",
    "yue": "zh",
    "kor": "ko",
}

_SUBTAG_SPLIT = re.compile(r"[-_]")


def primary_subtag(lang: Optional[str]) -> str:
    """Return the lowercased primary subtag of a language code

    ``"ZH-Hans"`` -> ``"zh"``, ``"jpn_Jpan"`` -> ``"ja"``, ``None`` -> ``""``
    """
    if not lang:
        return ""
    tag = _SUBTAG_SPLIT.split(lang.strip().lower(), maxsplit=1)[0]
    return LANGUAGE_ALIASES.get(tag, tag)


class ScriptDetector:
    """Needs-translation predicate over a table of language -> code point ranges"""

    def __init__(self, table: Optional[Mapping[str, Sequence[CodeRange]]] = None):
        """Initialize the detector

        Args:
            table: Mapping of primary language subtag to inclusive code point
                ranges characteristic of that language's script. Defaults to
                the CJK table.
        """
        source = DEFAULT_SCRIPT_TABLE if table is None else table
        self.table: Dict[str, Tuple[CodeRange, ...]] = {
            primary_subtag(lang): tuple(ranges) for lang, ranges in source.items()
        }
        merged = sorted({r for ranges in self.table.values() for r in ranges})
        self._all_ranges: Tuple[CodeRange, ...] = tuple(merged)

    def is_script_language(self, lang: Optional[str]) -> bool:
        return primary_subtag(lang) in self.table

    def ranges_for(self, lang: Optional[str]) -> Tuple[CodeRange, ...]:
        """Ranges for a language, or the union of every range when unknown"""
        return self.table.get(primary_subtag(lang), self._all_ranges)

    @staticmethod
    def contains_any(text: str, ranges: Iterable[CodeRange]) -> bool:
        ranges = tuple(ranges)
        for ch in text:
            cp = ord(ch)
            for lo, hi in ranges:
                if lo <= cp <= hi:
                    return True
        return False

    def needs_translation(
        self,
        text: str,
        source_lang: Optional[str] = None,
        strict: bool = False,
        target_lang: Optional[str] = None,
    ) -> bool:
        """Decide whether text is worth submitting for translation

        Args:
            text: Caption or result text
            source_lang: Declared source language of the active provider
            strict: Always apply the script test, even when the source
                language is not one with a table entry
            target_lang: Language the text is meant to be in; its own script
                ranges are never counted as untranslated

        Returns:
            True if the text contains characters of the source script, or
            True unconditionally for non-script languages when not strict
        """
        if self.is_script_language(source_lang) or strict:
            ranges = self.ranges_for(source_lang)
            if self.is_script_language(target_lang):
                allowed = set(self.table[primary_subtag(target_lang)])
                ranges = tuple(r for r in ranges if r not in allowed)
            return self.contains_any(text, ranges)
        return True
