"""
Translation providers.

Each provider code maps to exactly one :class:`Translator` variant; adding a
provider means adding a variant here.
"""
from typing import Callable, Dict

from ..config import Settings
from ..models import TranslatorCode
from .base import DEFAULT_TARGET_LANG, LineTranslator, Translator
from .deepl_translator import DeepLTranslator
from .libre import LibreTranslator
from .luna import LunaTranslator
from .nllb import NLLBTranslator


def _deepl(settings: Settings) -> Translator:
    return DeepLTranslator(
        api_key=settings.deepl.api_key,
        source_lang=settings.deepl.source_lang,
        target_lang=settings.deepl.target_lang,
    )


def _libre(settings: Settings) -> Translator:
    return LibreTranslator(
        endpoint=settings.libre.endpoint,
        source_lang=settings.libre.source_lang,
        target_lang=settings.libre.target_lang,
        api_key=settings.libre.api_key,
        timeout=settings.request_timeout,
    )


def _luna(settings: Settings) -> Translator:
    return LunaTranslator(
        endpoint=settings.luna.endpoint,
        translator_name=settings.luna.translator,
        source_lang=settings.luna.source_lang,
        target_lang=settings.luna.target_lang,
        timeout=settings.request_timeout,
    )


def _nllb(settings: Settings) -> Translator:
    return NLLBTranslator(
        model_name=settings.nllb.model,
        device=settings.nllb.device,
        source_lang=settings.nllb.source_lang,
        target_lang=settings.nllb.target_lang,
    )


PROVIDERS: Dict[TranslatorCode, Callable[[Settings], Translator]] = {
    TranslatorCode.DEEPL: _deepl,
    TranslatorCode.LIBRE: _libre,
    TranslatorCode.LUNA: _luna,
    TranslatorCode.NLLB: _nllb,
}


def create_translator(settings: Settings) -> Translator:
    """Instantiate the provider selected in settings (not yet initialized)"""
    return PROVIDERS[settings.translator](settings)


__all__ = [
    "DEFAULT_TARGET_LANG",
    "PROVIDERS",
    "DeepLTranslator",
    "LibreTranslator",
    "LineTranslator",
    "LunaTranslator",
    "NLLBTranslator",
    "Translator",
    "create_translator",
]
