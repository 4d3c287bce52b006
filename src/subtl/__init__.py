"""
subtl - Batch subtitle translation with caching and validation

A package for translating folders of subtitle files through a pluggable
translation provider, with support for:
- DeepL, LibreTranslate, LunaTranslator and local NLLB models
- A provider-scoped translation cache so lines are never translated twice
- Validation of every result, with rejected attempts kept in a ledger
- Backups of every original before translated output is written
"""

__version__ = "0.1.0"

# Import core classes and functions
from .models import Caption, CaptionSource, TranslationResult, TranslatorCode
from .errors import CaptionMismatchError, ConfigError, ProviderInitError, SubtitleParseError, SubtlError
from .config import Settings, load_settings
from .scripts import ScriptDetector
from .validation import Rejection, ValidationPolicy, Verdict
from .store import RejectionLedger, TranslationCache
from .providers import create_translator
from .pipeline import CaptionPipeline, FileOutcome
from .batch import BatchRunner, BatchSummary
from .files import backup_and_write, discover_files, group_files, work_unit_key
from .retranslate import retranslate_ledger
from .subtitle_io import parse, build

__all__ = [
    # Classes
    "Caption",
    "CaptionSource",
    "TranslationResult",
    "TranslatorCode",
    "Settings",
    "ScriptDetector",
    "Rejection",
    "ValidationPolicy",
    "Verdict",
    "RejectionLedger",
    "TranslationCache",
    "CaptionPipeline",
    "FileOutcome",
    "BatchRunner",
    "BatchSummary",

    # Errors
    "SubtlError",
    "ConfigError",
    "ProviderInitError",
    "SubtitleParseError",
    "CaptionMismatchError",

    # Functions
    "load_settings",
    "create_translator",
    "backup_and_write",
    "discover_files",
    "group_files",
    "work_unit_key",
    "retranslate_ledger",
    "parse",
    "build",
]
