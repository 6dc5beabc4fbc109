"""
Morphology Package

Heuristic Hebrew/Russian lemma reduction used to raise glossary hit-rate.
"""
from .normalizer import MorphologicalNormalizer, get_normalizer, normalize

__all__ = [
    "MorphologicalNormalizer",
    "get_normalizer",
    "normalize",
]
