"""
Fallback translation engines.

The term-aware translator never translates general vocabulary itself; tokens
without a glossary hit go through a single function-shaped seam:

    fallback(token, source_lang, target_lang) -> str

Any callable with that signature plugs in. The engines below are the ones
shipped with the project.
"""
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Callable, Optional

from loguru import logger

from deep_translator import GoogleTranslator
from deep_translator.exceptions import TranslationNotFound

from config import settings

Fallback = Callable[[str, str, str], str]


def identity_fallback(token: str, source_lang: str, target_lang: str) -> str:
    """Leave tokens without a glossary hit untouched"""
    return token


class FallbackEngine(ABC):
    """Abstract base class for fallback engines"""

    @abstractmethod
    def translate(self, token: str, source_lang: str, target_lang: str) -> str:
        """Translate a single token"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name"""
        pass

    def __call__(self, token: str, source_lang: str, target_lang: str) -> str:
        return self.translate(token, source_lang, target_lang)


class IdentityEngine(FallbackEngine):
    """Pass-through engine (offline default)"""

    @property
    def name(self) -> str:
        return "identity"

    def translate(self, token: str, source_lang: str, target_lang: str) -> str:
        return token


class GoogleEngine(FallbackEngine):
    """Google Translate engine (free, via deep-translator)"""

    # Google still uses the legacy code for Hebrew
    LANG_MAP = {
        "he": "iw",
        "ru": "ru",
    }

    def __init__(self, cache_size: Optional[int] = None):
        # Failed requests raise, so lru_cache never stores them
        self._request = lru_cache(maxsize=cache_size or settings.TRANSLATION_CACHE_SIZE)(self._request_uncached)

    @property
    def name(self) -> str:
        return "google"

    def translate(self, token: str, source_lang: str, target_lang: str) -> str:
        if not token.strip():
            return token

        src = self.LANG_MAP.get(source_lang, source_lang)
        tgt = self.LANG_MAP.get(target_lang, target_lang)

        try:
            translated = self._request(token, src, tgt)
        except TranslationNotFound as e:
            logger.warning(f"Translation not found for '{token}': {e}")
            return token
        except Exception as e:
            # Network/service failures must not block document rendering
            logger.warning(f"Google fallback failed for '{token}': {e}")
            return token

        return translated or token

    def _request_uncached(self, token: str, src: str, tgt: str) -> Optional[str]:
        return GoogleTranslator(source=src, target=tgt).translate(token)


SUPPORTED_ENGINES = {
    "identity": {
        "name": "Identity",
        "description": "Leaves non-glossary tokens untranslated",
        "requires_network": False,
    },
    "google": {
        "name": "Google Translate",
        "description": "Free Google Translate API via deep-translator",
        "requires_network": True,
    },
}


def create_fallback(engine: Optional[str] = None) -> FallbackEngine:
    """Create the configured fallback engine"""
    engine = engine or settings.FALLBACK_ENGINE
    if engine == "identity":
        return IdentityEngine()
    elif engine == "google":
        return GoogleEngine()
    else:
        logger.warning(f"Unknown fallback engine {engine}, using identity")
        return IdentityEngine()
