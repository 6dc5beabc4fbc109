"""
Template Renderer

Walks a validated template depth-first (siblings in ascending order),
substitutes placeholder values and yields flattened section records.

Field values are checked eagerly, before the first record is produced:
a missing required value or a value that does not parse for its kind
aborts the render up front, so a consumer never receives part of a
document that cannot be completed. Substitution and translation then run
lazily as the result is iterated.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from loguru import logger

from errors import InvalidFieldValueError, MissingFieldError, SchemaError, UnsupportedLanguageError
from languages import detect_language, ensure_supported, is_rtl_language
from translation import TermAwareTranslator

from .formatters import ValueFormatter
from .models import PLACEHOLDER_PATTERN, PlaceholderKind, Section, ValidatedTemplate, find_malformed_tokens

# Kinds whose formatted value is free text and may be translated
TRANSLATABLE_KINDS = (PlaceholderKind.TEXT, PlaceholderKind.LIST, PlaceholderKind.TABLE)


@dataclass
class FieldValue:
    """A field value with per-field translation options"""
    value: Any
    translate: bool = False
    language: Optional[str] = None  # language of the value; detected when omitted
    context: Optional[str] = None   # glossary domain context

    OPTION_KEYS = frozenset({"value", "translate", "language", "lang", "context"})

    @classmethod
    def coerce(cls, raw: Any) -> "FieldValue":
        """Accept a FieldValue, an options dict with a 'value' key, or a bare value"""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, Mapping) and "value" in raw and set(raw) <= cls.OPTION_KEYS:
            return cls(
                value=raw["value"],
                translate=bool(raw.get("translate", False)),
                language=raw.get("language", raw.get("lang")),
                context=raw.get("context"),
            )
        return cls(value=raw)

    @property
    def is_missing(self) -> bool:
        if self.value is None:
            return True
        return isinstance(self.value, str) and not self.value.strip()


@dataclass(frozen=True)
class RenderedSection:
    """A flattened section record"""
    id: str
    title: str
    content: str
    style: str
    depth: int
    required: bool = False
    parent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "style": self.style,
            "depth": self.depth,
            "required": self.required,
            "parent_id": self.parent_id,
        }


@dataclass(frozen=True)
class RenderWarning:
    """A non-fatal problem recorded while rendering"""
    section_id: str
    placeholder: str
    message: str


@dataclass
class _PreparedValue:
    text: str
    translate_from: Optional[str] = None
    context: Optional[str] = None


class RenderResult:
    """
    Lazy, single-pass sequence of RenderedSection records.

    Iterating consumes the records. materialize() drains whatever has not
    been consumed yet into a list and keeps it for random access.
    """

    def __init__(self, records: Iterator[RenderedSection], metadata: Dict[str, Any]):
        self._records = records
        self._materialized: Optional[List[RenderedSection]] = None
        self.metadata = metadata

    def __iter__(self) -> "RenderResult":
        return self

    def __next__(self) -> RenderedSection:
        return next(self._records)

    def materialize(self) -> List[RenderedSection]:
        if self._materialized is None:
            self._materialized = list(self._records)
        return self._materialized

    @property
    def warnings(self) -> List[RenderWarning]:
        return self.metadata["warnings"]

    @property
    def language(self) -> str:
        return self.metadata["language"]

    @property
    def rtl(self) -> bool:
        return self.metadata["rtl"]


class TemplateRenderer:
    """
    Fills validated templates with field values.

    Usage:
        renderer = TemplateRenderer(translator)
        result = renderer.render(template, {"approval_date": "2024-05-01"}, language="ru")
        for record in result:
            ...
    """

    def __init__(
        self,
        translator: Optional[TermAwareTranslator] = None,
        formatter: Optional[ValueFormatter] = None
    ):
        self.translator = translator
        self.formatter = formatter or ValueFormatter()

    def render(
        self,
        template: ValidatedTemplate,
        values: Mapping[str, Any],
        language: Optional[str] = None,
        context: Optional[str] = None
    ) -> RenderResult:
        """
        Render the whole document.

        Args:
            template: Validated template handle
            values: placeholder name -> raw value or FieldValue
            language: Rendering language (template default when omitted)
            context: Glossary domain context for translated fields

        Raises:
            MissingFieldError: a required section has no value for a placeholder
            InvalidFieldValueError: a value does not parse for its declared kind
            SchemaError: content holds an undeclared or malformed placeholder token
            UnsupportedLanguageError: language outside the template's languages
        """
        return self._render(template, None, values, language, context)

    def render_section(
        self,
        template: ValidatedTemplate,
        section_id: str,
        values: Mapping[str, Any],
        language: Optional[str] = None,
        context: Optional[str] = None
    ) -> RenderResult:
        """Re-render one section subtree; raises NotFoundError for unknown ids"""
        template.find_section(section_id)
        return self._render(template, section_id, values, language, context)

    def _render(
        self,
        template: ValidatedTemplate,
        section_id: Optional[str],
        values: Mapping[str, Any],
        language: Optional[str],
        context: Optional[str]
    ) -> RenderResult:
        language = language or template.default_language
        if language not in template.supported_languages:
            raise UnsupportedLanguageError(language, template.supported_languages)

        walk = list(template.walk(section_id))
        warnings: List[RenderWarning] = []
        prepared = self._prepare(template, walk, values, language, context, warnings)

        rtl = template.rtl if language == template.default_language else is_rtl_language(language)
        metadata = {
            "template": template.name,
            "language": language,
            "rtl": rtl,
            "section_count": len(walk),
            "warnings": warnings,
        }
        if section_id is not None:
            metadata["section_id"] = section_id

        logger.info(
            f"Rendering template '{template.name}' ({language}): "
            f"{len(walk)} sections, {len(warnings)} warnings"
        )
        return RenderResult(self._generate(walk, prepared, language), metadata)

    def _prepare(
        self,
        template: ValidatedTemplate,
        walk: List[Tuple[Section, int, Optional[str]]],
        values: Mapping[str, Any],
        language: str,
        context: Optional[str],
        warnings: List[RenderWarning]
    ) -> Dict[str, _PreparedValue]:
        """Check and format every referenced value before rendering starts"""
        prepared: Dict[str, _PreparedValue] = {}

        for section, _, _ in walk:
            for token in find_malformed_tokens(section.content):
                raise SchemaError("Malformed placeholder token", section_id=section.id, placeholder=token)
            for name in section.placeholders:
                if name not in template.placeholders:
                    # validate() rejects this already; templates are re-checked here
                    raise SchemaError("Unknown placeholder token", section_id=section.id, placeholder=name)

                field_value = FieldValue.coerce(values.get(name))
                if field_value.is_missing:
                    if section.required:
                        raise MissingFieldError(name, section.id)
                    warnings.append(RenderWarning(section.id, name, "missing optional value, left empty"))
                    logger.warning(f"No value for optional placeholder '{name}' in section '{section.id}'")
                    continue

                if name in prepared:
                    continue
                prepared[name] = self._prepare_value(
                    template, section, name, field_value, language, context, warnings
                )

        return prepared

    def _prepare_value(
        self,
        template: ValidatedTemplate,
        section: Section,
        name: str,
        field_value: FieldValue,
        language: str,
        context: Optional[str],
        warnings: List[RenderWarning]
    ) -> _PreparedValue:
        kind = template.placeholder_kind(name)
        try:
            text = self.formatter.format(kind, field_value.value)
        except (TypeError, ValueError) as e:
            raise InvalidFieldValueError(name, section.id, kind.value, field_value.value) from e

        if not field_value.translate or kind not in TRANSLATABLE_KINDS:
            return _PreparedValue(text)

        source = field_value.language or detect_language(text)
        if source is None or source == language:
            return _PreparedValue(text)
        ensure_supported(source)
        ensure_supported(language)

        if self.translator is None:
            warnings.append(RenderWarning(section.id, name, "translation requested but no translator configured"))
            logger.warning(f"Placeholder '{name}' asks for translation but the renderer has no translator")
            return _PreparedValue(text)

        return _PreparedValue(text, translate_from=source, context=field_value.context or context)

    def _generate(
        self,
        walk: List[Tuple[Section, int, Optional[str]]],
        prepared: Dict[str, _PreparedValue],
        language: str
    ) -> Iterator[RenderedSection]:
        resolved: Dict[str, str] = {}

        def substitute(match) -> str:
            name = match.group(1)
            if name not in resolved:
                value = prepared.get(name)
                if value is None:
                    resolved[name] = ""
                elif value.translate_from is None:
                    resolved[name] = value.text
                else:
                    resolved[name] = self.translator.translate(
                        value.text, value.translate_from, language, value.context
                    )
            return resolved[name]

        for section, depth, parent_id in walk:
            yield RenderedSection(
                id=section.id,
                title=section.title,
                content=PLACEHOLDER_PATTERN.sub(substitute, section.content),
                style=section.style,
                depth=depth,
                required=section.required,
                parent_id=parent_id,
            )
