"""
Template Translator

Produces a translated copy of a whole template: section titles and the
literal text around placeholder tokens are translated, tokens stay verbatim.
"""
from dataclasses import replace
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from config import settings
from errors import UnsupportedLanguageError
from languages import ensure_supported, is_rtl_language
from translation import TermAwareTranslator

from .models import PLACEHOLDER_PATTERN, DocumentTemplate, Section, ValidatedTemplate


class TemplateTranslator:
    """Translates template text while preserving {{placeholder}} tokens"""

    def __init__(self, translator: TermAwareTranslator, cache_size: Optional[int] = None):
        self.translator = translator
        self._translate_cached = lru_cache(maxsize=cache_size or settings.TRANSLATION_CACHE_SIZE)(
            self.translator.translate
        )

    def translate_template(
        self,
        template: Any,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> DocumentTemplate:
        """
        Translate a template into a new DocumentTemplate.

        Args:
            template: DocumentTemplate or ValidatedTemplate
            source_lang: Language the template is written in
            target_lang: Language to translate to
            context: Glossary domain context

        Returns:
            New template with default_language=target_lang and rtl set for it
        """
        if isinstance(template, ValidatedTemplate):
            template = template.template

        for lang in (source_lang, target_lang):
            ensure_supported(lang)
            if lang not in template.supported_languages:
                raise UnsupportedLanguageError(lang, template.supported_languages)

        sections = tuple(
            self._translate_section(section, source_lang, target_lang, context)
            for section in template.sections
        )
        translated = replace(
            template,
            sections=sections,
            description=self.translate_text(template.description, source_lang, target_lang, context),
            default_language=target_lang,
            rtl=is_rtl_language(target_lang),
        )
        logger.info(f"Translated template '{template.name}' {source_lang}->{target_lang}")
        return translated

    def translate_values(
        self,
        values: Mapping[str, Any],
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> Dict[str, Any]:
        """Translate string values of a field-value map; other values are kept"""
        return {
            key: self.translate_text(value, source_lang, target_lang, context) if isinstance(value, str) else value
            for key, value in values.items()
        }

    def translate_text(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> str:
        if not text:
            return text
        return self._translate_cached(text, source_lang, target_lang, context)

    def _translate_section(
        self,
        section: Section,
        source_lang: str,
        target_lang: str,
        context: Optional[str]
    ) -> Section:
        return replace(
            section,
            title=self.translate_text(section.title, source_lang, target_lang, context),
            content=self._translate_content(section.content, source_lang, target_lang, context),
            subsections=tuple(
                self._translate_section(child, source_lang, target_lang, context)
                for child in section.subsections
            ),
        )

    def _translate_content(
        self,
        content: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str]
    ) -> str:
        parts = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(content):
            parts.append(self.translate_text(content[position:match.start()], source_lang, target_lang, context))
            parts.append(match.group())
            position = match.end()
        parts.append(self.translate_text(content[position:], source_lang, target_lang, context))
        return "".join(parts)
