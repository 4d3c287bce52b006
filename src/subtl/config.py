"""
Environment-based configuration for subtl.

Values come from the process environment, optionally seeded from a ``.env``
file via python-dotenv. CLI options override individual fields.
"""
from typing import Mapping, Optional
from dataclasses import dataclass, field, replace
from pathlib import Path
import os

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .models import TranslatorCode

SUBTITLE_EXTENSIONS = (".lrc", ".srt", ".vtt")
WORK_UNIT_PATTERN = r"R.\d+"


@dataclass(frozen=True)
class DeepLSettings:
    api_key: str = ""
    source_lang: Optional[str] = None
    target_lang: str = "en-US"


@dataclass(frozen=True)
class LibreSettings:
    endpoint: str = "http://127.0.0.1:5000/"
    source_lang: str = "auto"
    target_lang: str = "en"
    api_key: Optional[str] = None


@dataclass(frozen=True)
class LunaSettings:
    endpoint: str = "http://127.0.0.1:2333/"
    translator: Optional[str] = None
    source_lang: Optional[str] = None
    target_lang: str = "en"


@dataclass(frozen=True)
class NLLBSettings:
    model: str = "facebook/nllb-200-distilled-600M"
    device: str = "cuda"
    source_lang: str = "jpn_Jpan"
    target_lang: str = "eng_Latn"


@dataclass(frozen=True)
class Settings:
    input_path: Path = Path("./queue")
    backup_path: Path = Path("./backup")
    output_path: Path = Path("./output")
    cache_path: Path = Path("./data/tlcache.json")
    ledger_path: Path = Path("./data/tlempty.json")
    translator: TranslatorCode = TranslatorCode.DEEPL
    request_timeout: float = 30.0
    work_unit_pattern: str = WORK_UNIT_PATTERN
    deepl: DeepLSettings = field(default_factory=DeepLSettings)
    libre: LibreSettings = field(default_factory=LibreSettings)
    luna: LunaSettings = field(default_factory=LunaSettings)
    nllb: NLLBSettings = field(default_factory=NLLBSettings)

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied"""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "translator" in values:
            values["translator"] = parse_translator(values["translator"])
        for key in ("input_path", "backup_path", "output_path", "cache_path", "ledger_path"):
            if key in values:
                values[key] = Path(values[key])
        return replace(self, **values)


def parse_translator(value) -> TranslatorCode:
    if isinstance(value, TranslatorCode):
        return value
    try:
        return TranslatorCode(str(value).strip().upper())
    except ValueError:
        choices = ", ".join(code.value for code in TranslatorCode)
        raise ConfigError(f"Unknown translator \"{value}\". Choose one of: {choices}") from None


def _get(env: Mapping[str, str], key: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> Settings:
    """Build settings from environment variables

    Args:
        env: Mapping to read instead of ``os.environ`` (no .env loading then)
        dotenv_path: Explicit .env file; by default the nearest one is used

    Returns:
        Settings with defaults for everything not set
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))
        env = os.environ

    timeout_raw = _get(env, "REQUEST_TIMEOUT", "30")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"REQUEST_TIMEOUT must be a number of seconds, got \"{timeout_raw}\"") from None

    return Settings(
        input_path=Path(_get(env, "RJ_PATH", "./queue")),
        backup_path=Path(_get(env, "BAK_PATH", "./backup")),
        output_path=Path(_get(env, "OUT_PATH", "./output")),
        cache_path=Path(_get(env, "CACHE_PATH", "./data/tlcache.json")),
        ledger_path=Path(_get(env, "EMPTY_PATH", "./data/tlempty.json")),
        translator=parse_translator(_get(env, "TRANSLATOR", TranslatorCode.DEEPL.value)),
        request_timeout=timeout,
        work_unit_pattern=_get(env, "WORK_UNIT_PATTERN", WORK_UNIT_PATTERN),
        deepl=DeepLSettings(
            api_key=_get(env, "DEEPL_API_KEY", ""),
            source_lang=_get(env, "DEEPL_SOURCE_LANG"),
            target_lang=_get(env, "DEEPL_TARGET_LANG", "en-US"),
        ),
        libre=LibreSettings(
            endpoint=_get(env, "LIBRE_ENDPOINT", "http://127.0.0.1:5000/"),
            source_lang=_get(env, "LIBRE_SOURCE_LANG", "auto"),
            target_lang=_get(env, "LIBRE_TARGET_LANG", "en"),
            api_key=_get(env, "LIBRE_API_KEY"),
        ),
        luna=LunaSettings(
            endpoint=_get(env, "LUNA_ENDPOINT", "http://127.0.0.1:2333/"),
            translator=_get(env, "LUNA_TRANSLATOR"),
            source_lang=_get(env, "LUNA_SOURCE_LANG"),
            target_lang=_get(env, "LUNA_TARGET_LANG", "en"),
        ),
        nllb=NLLBSettings(
            model=_get(env, "NLLB_MODEL", "facebook/nllb-200-distilled-600M"),
            device=_get(env, "NLLB_DEVICE", "cuda"),
            source_lang=_get(env, "NLLB_SOURCE_LANG", "jpn_Jpan"),
            target_lang=_get(env, "NLLB_TARGET_LANG", "eng_Latn"),
        ),
    )
