"""
Document Template Package

Provides:
- Template model with nested ordered sections, placeholders and styles
- Validation into read-only template handles
- Rendering with typed placeholder substitution and optional translation
- Template loading and whole-template translation
"""
from .models import (
    DocumentTemplate,
    PlaceholderKind,
    Section,
    Style,
    TemplateType,
    ValidatedTemplate,
    find_malformed_tokens,
    find_placeholders,
)
from .formatters import ValueFormatter
from .renderer import (
    FieldValue,
    RenderedSection,
    RenderResult,
    RenderWarning,
    TemplateRenderer,
)
from .loader import TemplateManager
from .template_translator import TemplateTranslator

__all__ = [
    # Model
    "DocumentTemplate",
    "PlaceholderKind",
    "Section",
    "Style",
    "TemplateType",
    "ValidatedTemplate",
    "find_malformed_tokens",
    "find_placeholders",
    # Rendering
    "ValueFormatter",
    "FieldValue",
    "RenderedSection",
    "RenderResult",
    "RenderWarning",
    "TemplateRenderer",
    # Loading and translation
    "TemplateManager",
    "TemplateTranslator",
]
