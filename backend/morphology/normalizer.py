"""
Morphological Normalizer

Reduces inflected Hebrew/Russian surface tokens to a lemma-like key so that
glossary lookup tolerates prefixes, declension and conjugation.

This is a heuristic stripper, not a morphological parser:
- Hebrew: prefix clusters (article, conjunction, prepositions) are stripped
  longest-first, each strip accepted only if the remainder still looks like
  a word.
- Russian: inflectional endings are stripped longest-first against a suffix
  table under the same remainder check.

Stripping repeats until no rule applies, so normalize() is a fixpoint and
normalize(normalize(x)) == normalize(x).
"""
import re
from typing import List, Optional

from config import settings
from languages import is_hebrew_letter, is_russian_letter

# Ordered longest-first; every cluster is built from ו ש מ ה ב כ ל
HEBREW_PREFIXES = (
    "ולכש",
    "וכש", "לכש", "ושה", "ושב", "ושכ", "ושל", "ושמ", "ומה",
    "וה", "וב", "וכ", "ול", "ומ", "וש", "כש", "שה", "שב", "שכ", "של", "שמ", "מה",
    "ה", "ו", "ב", "כ", "ל", "מ", "ש",
)

# Final letter forms never start a word
HEBREW_FINAL_LETTERS = frozenset("ךםןףץ")

# Vowel points and cantillation marks
_NIQQUD_PATTERN = re.compile(r"[\u0591-\u05C7]")

# Case/number endings for nouns and adjectives, longest-first
RUSSIAN_SUFFIXES = (
    "иями", "ями", "ами", "ого", "его", "ому", "ему", "ыми", "ими", "ией",
    "иях", "ием", "иям",
    "ия", "ие", "ии", "ию", "ий", "ой", "ей", "ом", "ем", "ам", "ям", "ах", "ях",
    "ов", "ев", "ую", "юю", "ая", "яя", "ое", "ее", "ые", "ых", "их", "ый", "ью",
    "а", "я", "о", "е", "ы", "и", "у", "ю", "ь", "й",
)


class MorphologicalNormalizer:
    """
    Heuristic lemma reducer for Hebrew and Russian tokens.

    Never raises: unknown languages and tokens matching no rule come back
    unchanged.
    """

    def __init__(
        self,
        hebrew_min_stem: Optional[int] = None,
        russian_min_stem: Optional[int] = None
    ):
        self.hebrew_min_stem = hebrew_min_stem or settings.HEBREW_MIN_STEM_LENGTH
        self.russian_min_stem = russian_min_stem or settings.RUSSIAN_MIN_STEM_LENGTH

    def normalize(self, token: str, lang: str) -> str:
        """Reduce a surface token to its lemma key"""
        return self.stages(token, lang)[-1]

    def stages(self, token: str, lang: str) -> List[str]:
        """
        All forms produced on the way to the lemma.

        The first element is the surface token, the last is normalize(token).
        Intermediate forms let callers try a partially stripped form first
        (e.g. "המגוף" -> "מגוף" before over-stripping to "גוף").
        """
        if not token:
            return [token]

        if lang == "he":
            forms = [token]
            cleaned = _NIQQUD_PATTERN.sub("", token)
            if cleaned != token and cleaned:
                forms.append(cleaned)
            return self._strip_repeatedly(forms, self._strip_hebrew_prefix)

        if lang == "ru":
            return self._strip_repeatedly([token], self._strip_russian_suffix)

        return [token]

    def stripped_affix(self, token: str, lang: str) -> str:
        """
        Letters removed on the way to the lemma.

        The stripped prefix for Hebrew (niqqud ignored), the stripped ending
        for Russian, "" when nothing was stripped.
        """
        lemma = self.normalize(token, lang)
        if lang == "he":
            base = _NIQQUD_PATTERN.sub("", token) or token
            return base[:len(base) - len(lemma)] if base.endswith(lemma) else ""
        if lang == "ru":
            return token[len(lemma):]
        return ""

    def _strip_repeatedly(self, forms: List[str], strip) -> List[str]:
        while True:
            stripped = strip(forms[-1])
            if stripped is None:
                return forms
            forms.append(stripped)

    def _strip_hebrew_prefix(self, word: str) -> Optional[str]:
        for prefix in HEBREW_PREFIXES:
            if len(prefix) >= len(word) or not word.startswith(prefix):
                continue
            remainder = word[len(prefix):]
            if self._is_plausible_hebrew(remainder):
                return remainder
        return None

    def _is_plausible_hebrew(self, remainder: str) -> bool:
        if len(remainder) < self.hebrew_min_stem:
            return False
        if remainder[0] in HEBREW_FINAL_LETTERS:
            return False
        # Acronyms (ת"י, צה״ל) and mixed tokens are left alone
        return all(is_hebrew_letter(char) for char in remainder)

    def _strip_russian_suffix(self, word: str) -> Optional[str]:
        lower = word.lower()
        for suffix in RUSSIAN_SUFFIXES:
            if not lower.endswith(suffix):
                continue
            remainder = word[:-len(suffix)]
            if self._is_plausible_russian(remainder):
                return remainder
        return None

    def _is_plausible_russian(self, remainder: str) -> bool:
        if len(remainder) < self.russian_min_stem:
            return False
        return all(is_russian_letter(char) for char in remainder)


_default_normalizer: Optional[MorphologicalNormalizer] = None


def get_normalizer() -> MorphologicalNormalizer:
    """Shared normalizer configured from settings"""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = MorphologicalNormalizer()
    return _default_normalizer


def normalize(token: str, lang: str) -> str:
    """Reduce a token to its lemma key with the shared normalizer"""
    return get_normalizer().normalize(token, lang)
