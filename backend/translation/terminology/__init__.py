"""
Terminology Management System

Provides consistent translation of domain-specific technical terms.
"""
from .glossary import (
    GlossaryEntry,
    GlossaryStore,
    create_fire_protection_glossary,
    fold_term,
)

__all__ = [
    "GlossaryEntry",
    "GlossaryStore",
    "create_fire_protection_glossary",
    "fold_term",
]
