"""
Document template model.

A DocumentTemplate is a tree of ordered sections with placeholder tokens
({{name}}) in their content, a placeholder registry, a style registry and
language settings. validate() checks every cross-reference once and returns
a ValidatedTemplate: a read-only handle with the id index built in, safe to
share between concurrent renders. Reloading a template means building a new
handle, never mutating an existing one.
"""
import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from errors import NotFoundError, SchemaError
from .schema import SectionDefinition, StyleDefinition, TemplateDefinition

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")
# Anything between double braces, well-formed or not
TOKEN_PATTERN = re.compile(r"\{\{(.*?)\}\}")


def find_placeholders(content: str) -> List[str]:
    """Placeholder names in order of first appearance"""
    names: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(content):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def find_malformed_tokens(content: str) -> List[str]:
    """Double-brace tokens that are not valid {{name}} placeholders"""
    return [
        match.group(0)
        for match in TOKEN_PATTERN.finditer(content)
        if not PLACEHOLDER_PATTERN.fullmatch(match.group(0))
    ]


class PlaceholderKind(str, Enum):
    """Closed set of placeholder kinds"""
    DATE = "date"
    TEXT = "text"
    NUMBER = "number"
    LIST = "list"
    TABLE = "table"

    @classmethod
    def parse(cls, value: Any) -> "PlaceholderKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise SchemaError(f"Unknown placeholder kind: {value}") from None


class TemplateType(str, Enum):
    """Kinds of standardized documents"""
    TECHNICAL_SPEC = "technical_spec"
    STANDARD_REPORT = "standard_report"
    DRAWING_SHEET = "drawing_sheet"
    CALCULATION_SHEET = "calculation_sheet"
    INSPECTION = "inspection"
    APPROVAL = "approval"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Style:
    """Named, inheritable visual attributes"""
    name: str
    based_on: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    font_weight: Optional[str] = None
    font_style: Optional[str] = None
    color: Optional[str] = None
    line_spacing: Optional[float] = None
    paragraph_spacing: Optional[float] = None
    margin_top: Optional[float] = None
    margin_bottom: Optional[float] = None
    margin_left: Optional[float] = None
    margin_right: Optional[float] = None
    page_size: Optional[str] = None
    orientation: Optional[str] = None

    def inherit(self, parent: "Style") -> "Style":
        """Fill attributes this style leaves unset from its parent"""
        updates = {
            f.name: getattr(parent, f.name)
            for f in fields(self)
            if f.name not in ("name", "based_on") and getattr(self, f.name) is None
        }
        return replace(self, **updates)

    def attributes(self) -> Dict[str, Any]:
        """Set attributes only"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("name", "based_on") and getattr(self, f.name) is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.attributes()
        if self.based_on:
            data["based_on"] = self.based_on
        return data


@dataclass(frozen=True)
class Section:
    """A node in the document tree; owns its subsections"""
    id: str
    title: str = ""
    content: str = ""
    required: bool = False
    order: int = 0
    style: str = "default"
    subsections: Tuple["Section", ...] = ()

    @property
    def placeholders(self) -> List[str]:
        return find_placeholders(self.content)

    def ordered_subsections(self) -> List["Section"]:
        return sorted(self.subsections, key=lambda s: s.order)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "required": self.required,
            "order": self.order,
            "style": self.style,
            "subsections": [s.to_dict() for s in self.subsections],
        }

    @classmethod
    def from_definition(cls, definition: SectionDefinition) -> "Section":
        return cls(
            id=definition.id,
            title=definition.title,
            content=definition.content,
            required=definition.required,
            order=definition.order,
            style=definition.style,
            subsections=tuple(cls.from_definition(s) for s in definition.subsections),
        )


@dataclass(frozen=True)
class DocumentTemplate:
    """Root aggregate of a document template (unvalidated)"""
    name: str
    sections: Tuple[Section, ...] = ()
    placeholders: Mapping[str, PlaceholderKind] = field(default_factory=dict)
    styles: Mapping[str, Style] = field(default_factory=dict)
    rtl: bool = False
    default_language: str = "he"
    supported_languages: FrozenSet[str] = frozenset({"he", "ru"})
    description: str = ""
    version: str = "1.0.0"
    template_type: TemplateType = TemplateType.CUSTOM

    def validate(self) -> "ValidatedTemplate":
        """
        Check every cross-reference and build the read-only handle.

        Raises SchemaError on an undeclared or malformed placeholder token, an
        unknown placeholder kind, an unresolved style (or style parent), a
        style inheritance cycle, colliding sibling order values, a duplicate
        section id, or a default language missing from supported_languages.

        The handle wraps a frozen copy: kinds parsed, sections as tuples.
        """
        if not self.supported_languages:
            raise SchemaError(f"Template '{self.name}' declares no supported languages")
        if self.default_language not in self.supported_languages:
            raise SchemaError(
                f"Default language '{self.default_language}' of template '{self.name}' "
                f"is not in supported languages {sorted(self.supported_languages)}"
            )

        placeholders: Dict[str, PlaceholderKind] = {}
        for name, kind in self.placeholders.items():
            if not PLACEHOLDER_PATTERN.fullmatch("{{" + name + "}}"):
                raise SchemaError("Invalid placeholder name", placeholder=name)
            try:
                placeholders[name] = PlaceholderKind.parse(kind)
            except SchemaError as e:
                raise SchemaError(str(e), placeholder=name) from None

        frozen = replace(
            self,
            sections=_freeze_sections(self.sections),
            placeholders=placeholders,
            styles=dict(self.styles),
            supported_languages=frozenset(self.supported_languages),
        )

        for style in frozen.styles.values():
            frozen._check_style_chain(style)

        index: Dict[str, Tuple[Section, int, Optional[str]]] = {}
        frozen._index_level(frozen.sections, 0, None, index)

        logger.debug(
            f"Validated template '{self.name}': {len(index)} sections, "
            f"{len(placeholders)} placeholders, {len(frozen.styles)} styles"
        )
        return ValidatedTemplate(frozen, index)

    def _check_style_chain(self, style: Style) -> None:
        seen = {style.name}
        current = style
        while current.based_on is not None:
            parent = self.styles.get(current.based_on)
            if parent is None:
                raise SchemaError(f"Style '{current.name}' is based on unknown style '{current.based_on}'")
            if parent.name in seen:
                raise SchemaError(f"Style inheritance cycle through '{parent.name}'")
            seen.add(parent.name)
            current = parent

    def _index_level(
        self,
        siblings: Tuple[Section, ...],
        depth: int,
        parent_id: Optional[str],
        index: Dict[str, Tuple[Section, int, Optional[str]]]
    ) -> None:
        orders: Dict[int, str] = {}
        for section in siblings:
            if section.order in orders:
                raise SchemaError(
                    f"Sibling order {section.order} used by both '{orders[section.order]}' "
                    f"and '{section.id}'",
                    section_id=section.id,
                )
            orders[section.order] = section.id

            if section.id in index:
                raise SchemaError("Duplicate section id", section_id=section.id)
            if section.style not in self.styles:
                raise SchemaError(f"Unresolved style '{section.style}'", section_id=section.id)
            for token in find_malformed_tokens(section.content):
                raise SchemaError("Malformed placeholder token", section_id=section.id, placeholder=token)
            for name in section.placeholders:
                if name not in self.placeholders:
                    raise SchemaError("Undeclared placeholder", section_id=section.id, placeholder=name)

            index[section.id] = (section, depth, parent_id)
            self._index_level(section.subsections, depth + 1, section.id, index)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible definition"""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "template_type": self.template_type.value,
            "sections": [s.to_dict() for s in self.sections],
            "placeholders": {name: kind.value for name, kind in self.placeholders.items()},
            "styles": {name: style.to_dict() for name, style in self.styles.items()},
            "rtl": self.rtl,
            "default_language": self.default_language,
            "supported_languages": sorted(self.supported_languages),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentTemplate":
        """Build from a JSON-compatible definition; shape errors raise SchemaError"""
        try:
            definition = TemplateDefinition.model_validate(data)
        except ValidationError as e:
            raise SchemaError(f"Malformed template definition: {e}") from e
        return cls.from_definition(definition)

    @classmethod
    def from_definition(cls, definition: TemplateDefinition) -> "DocumentTemplate":
        try:
            template_type = TemplateType(definition.template_type)
        except ValueError:
            raise SchemaError(f"Unknown template type: {definition.template_type}") from None

        return cls(
            name=definition.name,
            sections=tuple(Section.from_definition(s) for s in definition.sections),
            placeholders={
                name: PlaceholderKind.parse(kind)
                for name, kind in definition.placeholders.items()
            },
            styles={
                name: _style_from_definition(name, style)
                for name, style in definition.styles.items()
            },
            rtl=definition.rtl,
            default_language=definition.default_language,
            supported_languages=frozenset(definition.supported_languages),
            description=definition.description,
            version=definition.version,
            template_type=template_type,
        )


def _style_from_definition(name: str, definition: StyleDefinition) -> Style:
    return Style(name=name, **definition.model_dump())


def _freeze_sections(sections) -> Tuple[Section, ...]:
    return tuple(
        replace(section, subsections=_freeze_sections(section.subsections))
        for section in sections
    )


class ValidatedTemplate:
    """
    Read-only handle on a validated DocumentTemplate.

    The id index is built once at validation time; nothing here mutates.
    """

    __slots__ = ("_template", "_index", "_placeholders", "_styles")

    def __init__(
        self,
        template: DocumentTemplate,
        index: Dict[str, Tuple[Section, int, Optional[str]]]
    ):
        self._template = template
        self._index = MappingProxyType(dict(index))
        self._placeholders = MappingProxyType({
            name: PlaceholderKind.parse(kind) for name, kind in template.placeholders.items()
        })
        self._styles = MappingProxyType(dict(template.styles))

    @property
    def template(self) -> DocumentTemplate:
        return self._template

    @property
    def name(self) -> str:
        return self._template.name

    @property
    def sections(self) -> List[Section]:
        """Top-level sections in render order"""
        return sorted(self._template.sections, key=lambda s: s.order)

    @property
    def placeholders(self) -> Mapping[str, PlaceholderKind]:
        return self._placeholders

    @property
    def styles(self) -> Mapping[str, Style]:
        return self._styles

    @property
    def rtl(self) -> bool:
        return self._template.rtl

    @property
    def default_language(self) -> str:
        return self._template.default_language

    @property
    def supported_languages(self) -> FrozenSet[str]:
        return self._template.supported_languages

    def find_section(self, section_id: str) -> Section:
        """Section by id; raises NotFoundError"""
        entry = self._index.get(section_id)
        if entry is None:
            raise NotFoundError("section", section_id)
        return entry[0]

    def section_depth(self, section_id: str) -> int:
        entry = self._index.get(section_id)
        if entry is None:
            raise NotFoundError("section", section_id)
        return entry[1]

    def parent_id(self, section_id: str) -> Optional[str]:
        entry = self._index.get(section_id)
        if entry is None:
            raise NotFoundError("section", section_id)
        return entry[2]

    def placeholder_kind(self, name: str) -> PlaceholderKind:
        """Declared kind of a placeholder; raises NotFoundError"""
        kind = self._placeholders.get(name)
        if kind is None:
            raise NotFoundError("placeholder", name)
        return kind

    def resolve_style(self, name: str) -> Style:
        """Style with its based_on chain merged in; raises NotFoundError"""
        style = self._styles.get(name)
        if style is None:
            raise NotFoundError("style", name)
        resolved = style
        while style.based_on is not None:
            style = self._styles[style.based_on]
            resolved = resolved.inherit(style)
        return resolved

    def walk(self, section_id: Optional[str] = None) -> Iterator[Tuple[Section, int, Optional[str]]]:
        """
        Depth-first pre-order traversal as (section, depth, parent_id).

        Siblings come in ascending order. With section_id, only that subtree
        is walked (depths stay relative to the whole tree).
        """
        if section_id is None:
            stack = [(s, 0, None) for s in reversed(self.sections)]
        else:
            section, depth, parent = self._index.get(section_id) or (None, 0, None)
            if section is None:
                raise NotFoundError("section", section_id)
            stack = [(section, depth, parent)]

        while stack:
            section, depth, parent = stack.pop()
            yield section, depth, parent
            for child in reversed(section.ordered_subsections()):
                stack.append((child, depth + 1, section.id))

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, section_id: str) -> bool:
        return section_id in self._index

    def __repr__(self) -> str:
        return f"ValidatedTemplate(name={self.name!r}, sections={len(self)})"
