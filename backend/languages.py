"""
Language codes, script detection and direction helpers.
"""
from typing import Optional

from errors import UnsupportedLanguageError

SUPPORTED_LANGUAGES = ("he", "ru")
RTL_LANGUAGES = frozenset({"he", "ar", "fa"})

LANGUAGE_NAMES = {
    "he": "Hebrew",
    "ru": "Russian",
}


def is_hebrew_letter(char: str) -> bool:
    """Letters of the Hebrew block, including final forms"""
    return "א" <= char <= "ת"


def is_russian_letter(char: str) -> bool:
    """Cyrillic letters used by Russian"""
    lower = char.lower()
    return "а" <= lower <= "я" or lower == "ё"


def ensure_supported(language: str) -> str:
    """Return the language code or raise UnsupportedLanguageError"""
    if language not in SUPPORTED_LANGUAGES:
        raise UnsupportedLanguageError(language, SUPPORTED_LANGUAGES)
    return language


def is_rtl_language(language: str) -> bool:
    return language in RTL_LANGUAGES


def detect_language(text: str) -> Optional[str]:
    """
    Guess the language of a text span by its script.

    Counts Hebrew and Cyrillic letters and returns the majority language,
    or None when the text has neither (digits, Latin codes, empty).
    """
    hebrew = 0
    russian = 0
    for char in text:
        if is_hebrew_letter(char):
            hebrew += 1
        elif is_russian_letter(char):
            russian += 1

    if hebrew == 0 and russian == 0:
        return None
    return "he" if hebrew >= russian else "ru"


def other_language(language: str) -> str:
    """The opposite side of the he<->ru pair"""
    ensure_supported(language)
    return "ru" if language == "he" else "he"
