"""
Translation Package

Provides:
- Term-aware Hebrew<->Russian translation (glossary first, fallback second)
- Terminology management with context-aware term resolution
- Pluggable fallback engines for general vocabulary
"""
from .translator import (
    TermAwareTranslator,
    TranslationResult,
    TokenTranslation,
    tokenize,
)
from .engines import (
    Fallback,
    FallbackEngine,
    GoogleEngine,
    IdentityEngine,
    create_fallback,
    identity_fallback,
)
from .terminology import GlossaryEntry, GlossaryStore, create_fire_protection_glossary

__all__ = [
    # Translator
    "TermAwareTranslator",
    "TranslationResult",
    "TokenTranslation",
    "tokenize",
    # Fallback seam
    "Fallback",
    "FallbackEngine",
    "GoogleEngine",
    "IdentityEngine",
    "create_fallback",
    "identity_fallback",
    # Terminology management
    "GlossaryEntry",
    "GlossaryStore",
    "create_fire_protection_glossary",
]
