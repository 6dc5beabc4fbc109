"""
Term-Aware Translator

Translates Hebrew<->Russian text spans while preferring glossary terms:

1. tokenize, keeping separators for reconstruction
2. normalize each word with the morphological normalizer
3. look up single words and multi-word phrases in the glossary store
4. send words without a hit to the fallback seam
5. reassemble with the original separators
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from loguru import logger

from config import settings
from languages import detect_language, ensure_supported, other_language
from morphology import MorphologicalNormalizer

from .engines import Fallback, identity_fallback
from .terminology import GlossaryEntry, GlossaryStore

# Words may carry inner hyphens, apostrophes and Hebrew geresh/gershayim (ת"י, צה״ל)
WORD_PATTERN = re.compile(r"\w+(?:[-'’׳״\"]\w+)*")


@dataclass
class Token:
    """A word or the separator text between words"""
    text: str
    is_word: bool


@dataclass
class TokenTranslation:
    """How one word (or glossary phrase) was translated"""
    original: str
    translated: str
    source: str  # glossary, fallback, passthrough
    entry: Optional[GlossaryEntry] = None


@dataclass
class TranslationResult:
    """Translation result"""
    original_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    tokens: List[TokenTranslation] = field(default_factory=list)

    @property
    def glossary_hits(self) -> List[TokenTranslation]:
        return [t for t in self.tokens if t.source == "glossary"]

    @property
    def fallback_count(self) -> int:
        return sum(1 for t in self.tokens if t.source == "fallback")


def tokenize(text: str) -> List[Token]:
    """Split text into alternating word and separator tokens"""
    tokens: List[Token] = []
    position = 0
    for match in WORD_PATTERN.finditer(text):
        if match.start() > position:
            tokens.append(Token(text[position:match.start()], False))
        tokens.append(Token(match.group(), True))
        position = match.end()
    if position < len(text):
        tokens.append(Token(text[position:], False))
    return tokens


def match_capitalization(surface: str, translated: str) -> str:
    """Capitalize the translation when the source word was capitalized"""
    if surface and translated and surface[0].isupper():
        return translated[0].upper() + translated[1:]
    return translated


class TermAwareTranslator:
    """
    Glossary-first translator for technical text.

    Usage:
        translator = TermAwareTranslator(glossary, fallback=create_fallback("google"))
        translator.translate("בדיקת המגוף", "he", "ru", context="plumbing")
    """

    def __init__(
        self,
        glossary: GlossaryStore,
        fallback: Optional[Fallback] = None,
        normalizer: Optional[MorphologicalNormalizer] = None,
        max_phrase_tokens: Optional[int] = None
    ):
        """
        Initialize translator

        Args:
            glossary: Store consulted before the fallback
            fallback: General translation seam for words without a hit
            normalizer: Lemma reducer (defaults to the glossary's own)
            max_phrase_tokens: Longest multi-word term to match
        """
        self.glossary = glossary
        self.fallback = fallback or identity_fallback
        self.normalizer = normalizer or glossary.normalizer
        self.max_phrase_tokens = max(1, max_phrase_tokens or settings.MAX_PHRASE_TOKENS)

    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> str:
        """Translate text; raises UnsupportedLanguageError for languages outside he/ru"""
        return self.translate_detailed(text, source_lang, target_lang, context).translated_text

    def translate_auto(self, text: str, context: Optional[str] = None) -> TranslationResult:
        """Detect the source language by script and translate to the other one"""
        source_lang = detect_language(text) or settings.SOURCE_LANG
        return self.translate_detailed(text, source_lang, other_language(source_lang), context)

    def translate_detailed(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> TranslationResult:
        """Translate text and report how every word was resolved"""
        ensure_supported(source_lang)
        ensure_supported(target_lang)

        result = TranslationResult(
            original_text=text,
            translated_text=text,
            source_lang=source_lang,
            target_lang=target_lang,
        )
        if not text or source_lang == target_lang:
            return result

        tokens = tokenize(text)
        output: List[str] = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if not token.is_word:
                output.append(token.text)
                index += 1
                continue

            match = self._match_phrase(tokens, index, source_lang, target_lang, context)
            if match:
                entry, last = match
                surface = "".join(t.text for t in tokens[index:last + 1])
                translated = match_capitalization(surface, entry.target_term)
                result.tokens.append(TokenTranslation(surface, translated, "glossary", entry))
                output.append(translated)
                index = last + 1
                continue

            result.tokens.append(self._fall_back(token.text, source_lang, target_lang))
            output.append(result.tokens[-1].translated)
            index += 1

        result.translated_text = "".join(output)
        logger.debug(
            f"Translated {len(result.tokens)} tokens {source_lang}->{target_lang}: "
            f"{len(result.glossary_hits)} glossary, {result.fallback_count} fallback"
        )
        return result

    def _match_phrase(
        self,
        tokens: List[Token],
        start: int,
        source_lang: str,
        target_lang: str,
        context: Optional[str]
    ) -> Optional[Tuple[GlossaryEntry, int]]:
        """Longest glossary phrase starting at `start`, as (entry, last token index)"""
        # Phrases only span whitespace separators
        positions = [start]
        cursor = start
        while len(positions) < self.max_phrase_tokens and cursor + 2 < len(tokens):
            separator = tokens[cursor + 1]
            if separator.text.strip() or not tokens[cursor + 2].is_word:
                break
            cursor += 2
            positions.append(cursor)

        for size in range(len(positions), 0, -1):
            words = [tokens[p].text for p in positions[:size]]
            entry = self._lookup_words(words, source_lang, target_lang, context)
            if entry is not None:
                return entry, positions[size - 1]
        return None

    def _lookup_words(
        self,
        words: List[str],
        source_lang: str,
        target_lang: str,
        context: Optional[str]
    ) -> Optional[GlossaryEntry]:
        # Exact headwords first, peeling prefixes off the first word one step
        # at a time, so "המגוף" finds "מגוף" before it over-strips to "גוף"
        rest = words[1:]
        for form in self.normalizer.stages(words[0], source_lang):
            candidates = self.glossary.lookup_term(" ".join([form, *rest]), source_lang, target_lang, context)
            if candidates:
                return candidates[0]

        lemma = " ".join(self.normalizer.normalize(word, source_lang) for word in words)
        for candidate in self.glossary.lookup(lemma, source_lang, target_lang, context):
            if self._covers_headword(words, candidate, source_lang):
                return candidate
        return None

    def _covers_headword(self, words: List[str], entry: GlossaryEntry, source_lang: str) -> bool:
        # A Hebrew lemma hit must not drop letters the headword itself keeps:
        # "גוף" shares a lemma with "מגוף" but is a different word
        if source_lang != "he":
            return True
        headword = entry.source_term.split()
        if len(headword) != len(words):
            return False
        return all(
            self.normalizer.stripped_affix(word, "he").endswith(self.normalizer.stripped_affix(head, "he"))
            for word, head in zip(words, headword)
        )

    def _fall_back(self, word: str, source_lang: str, target_lang: str) -> TokenTranslation:
        # Numbers and codes carry no language
        if not any(char.isalpha() for char in word):
            return TokenTranslation(word, word, "passthrough")

        try:
            translated = self.fallback(word, source_lang, target_lang)
        except Exception as e:
            logger.warning(f"Fallback translation failed for '{word}': {e}")
            return TokenTranslation(word, word, "passthrough")

        return TokenTranslation(word, translated or word, "fallback")
