"""
Glossary Data Structures

Defines glossary entries and the store used for technical-term lookup.

The store keeps an immutable snapshot of its indexes. Writers build a new
snapshot under a lock and swap it in with a single assignment, so readers
always see either the state before a write or the state after it.
"""
import itertools
import json
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from morphology import MorphologicalNormalizer, get_normalizer


@dataclass(frozen=True)
class GlossaryEntry:
    """A single glossary entry with source term and translation"""
    source_term: str
    target_term: str
    source_lang: str = "he"
    target_lang: str = "ru"
    domain_context: Optional[str] = None  # e.g. "plumbing", "fire_protection"
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "source_term": self.source_term,
            "target_term": self.target_term,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "domain_context": self.domain_context,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlossaryEntry":
        """Create from dictionary"""
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        else:
            created_at = datetime.now()

        return cls(
            source_term=data["source_term"],
            target_term=data["target_term"],
            source_lang=data.get("source_lang", "he"),
            target_lang=data.get("target_lang", "ru"),
            domain_context=data.get("domain_context"),
            notes=data.get("notes"),
            created_at=created_at,
        )


# (sequence number, entry); higher sequence = added later
_Record = Tuple[int, GlossaryEntry]
_IndexKey = Tuple[str, str, str]


@dataclass(frozen=True)
class _Snapshot:
    records: Tuple[_Record, ...] = ()
    by_lemma: Dict[_IndexKey, Tuple[_Record, ...]] = field(default_factory=dict)
    by_term: Dict[_IndexKey, Tuple[_Record, ...]] = field(default_factory=dict)


def fold_term(text: str) -> str:
    """Case- and whitespace-insensitive key for a term"""
    return " ".join(text.split()).casefold().replace("ё", "е")


def rank_candidates(records: Iterable[_Record], context: Optional[str]) -> List[GlossaryEntry]:
    """
    Order candidates by resolution precedence.

    1. entries whose domain_context equals the requested context
    2. general entries (no domain_context)
    3. entries tagged with a different domain
    Within a tier the most recently added entry comes first.
    """
    def tier(entry: GlossaryEntry) -> int:
        if context is not None and entry.domain_context == context:
            return 0
        if entry.domain_context is None:
            return 1
        return 2

    ordered = sorted(records, key=lambda record: (tier(record[1]), -record[0]))
    return [entry for _, entry in ordered]


class GlossaryStore:
    """
    Bidirectional technical-term store keyed by lemma and language pair.

    Features:
    - Lookup by normalized lemma (morphology-tolerant) or exact headword
    - Context-aware candidate ranking
    - Copy-on-write snapshots for lock-free reads
    - JSON persistence helpers for external loaders
    """

    def __init__(
        self,
        entries: Optional[Iterable[GlossaryEntry]] = None,
        normalizer: Optional[MorphologicalNormalizer] = None,
        name: str = "default"
    ):
        self.name = name
        self.normalizer = normalizer or get_normalizer()
        self._write_lock = threading.Lock()
        self._sequence = itertools.count()
        self._snapshot = _Snapshot()
        if entries:
            self.add_many(entries)

    def lemma_key(self, term: str, lang: str) -> str:
        """Lemma key of a (possibly multi-word) term"""
        words = term.split()
        return fold_term(" ".join(self.normalizer.normalize(word, lang) for word in words))

    # ------------------------------------------------------------------ reads

    def lookup(
        self,
        lemma: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> List[GlossaryEntry]:
        """
        Ranked candidates whose source term normalizes to `lemma`.

        Returns an empty list when nothing matches; never raises.
        """
        snapshot = self._snapshot
        records = snapshot.by_lemma.get((fold_term(lemma), source_lang, target_lang), ())
        return rank_candidates(records, context)

    def lookup_term(
        self,
        term: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> List[GlossaryEntry]:
        """Ranked candidates whose source term equals `term` (case-insensitive)"""
        snapshot = self._snapshot
        records = snapshot.by_term.get((fold_term(term), source_lang, target_lang), ())
        return rank_candidates(records, context)

    def resolve(
        self,
        lemma: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> Optional[GlossaryEntry]:
        """Best candidate for a lemma, or None"""
        candidates = self.lookup(lemma, source_lang, target_lang, context)
        return candidates[0] if candidates else None

    def entries(self) -> List[GlossaryEntry]:
        """Snapshot of all entries in insertion order"""
        return [entry for _, entry in self._snapshot.records]

    def __len__(self) -> int:
        return len(self._snapshot.records)

    def __contains__(self, entry: GlossaryEntry) -> bool:
        return any(existing == entry for _, existing in self._snapshot.records)

    # ----------------------------------------------------------------- writes

    def add(self, entry: GlossaryEntry) -> GlossaryEntry:
        """
        Add an entry.

        An existing entry with the same source term, language pair and
        domain context is replaced, and the new one counts as most recent.
        """
        self.add_many([entry])
        return entry

    def add_many(self, entries: Iterable[GlossaryEntry]) -> int:
        """Add several entries as one atomic update"""
        # Last one wins for duplicates inside the batch
        latest: Dict[Tuple[str, str, str, Optional[str]], GlossaryEntry] = {}
        for entry in entries:
            identity = self._identity(entry)
            latest.pop(identity, None)
            latest[identity] = entry
        entries = list(latest.values())
        if not entries:
            return 0

        with self._write_lock:
            kept = [
                record for record in self._snapshot.records
                if self._identity(record[1]) not in latest
            ]
            kept.extend((next(self._sequence), entry) for entry in entries)
            self._snapshot = self._build_snapshot(kept)

        logger.debug(f"Glossary '{self.name}': added {len(entries)} entries ({len(self)} total)")
        return len(entries)

    def add_bidirectional(
        self,
        term_a: str,
        lang_a: str,
        term_b: str,
        lang_b: str,
        domain_context: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Tuple[GlossaryEntry, GlossaryEntry]:
        """Add a term pair in both translation directions"""
        forward = GlossaryEntry(term_a, term_b, lang_a, lang_b, domain_context, notes)
        backward = GlossaryEntry(term_b, term_a, lang_b, lang_a, domain_context, notes)
        self.add_many([forward, backward])
        return forward, backward

    def remove(
        self,
        lemma: str,
        source_lang: str,
        target_lang: str,
        context: Optional[str] = None
    ) -> int:
        """
        Remove entries for a lemma (or exact headword) and language pair.

        Only entries whose domain_context equals `context` are removed, so
        context=None removes the general entry. Returns the removed count.
        """
        key = fold_term(lemma)

        def matches(entry: GlossaryEntry) -> bool:
            return (
                entry.source_lang == source_lang
                and entry.target_lang == target_lang
                and entry.domain_context == context
                and key in (fold_term(entry.source_term), self.lemma_key(entry.source_term, source_lang))
            )

        with self._write_lock:
            kept = [record for record in self._snapshot.records if not matches(record[1])]
            removed = len(self._snapshot.records) - len(kept)
            if removed:
                self._snapshot = self._build_snapshot(kept)

        if removed:
            logger.info(f"Glossary '{self.name}': removed {removed} entries for '{lemma}'")
        return removed

    def clear(self) -> None:
        with self._write_lock:
            self._snapshot = _Snapshot()

    def _identity(self, entry: GlossaryEntry) -> Tuple[str, str, str, Optional[str]]:
        return (fold_term(entry.source_term), entry.source_lang, entry.target_lang, entry.domain_context)

    def _build_snapshot(self, records: List[_Record]) -> _Snapshot:
        by_lemma: Dict[_IndexKey, List[_Record]] = {}
        by_term: Dict[_IndexKey, List[_Record]] = {}
        for record in records:
            entry = record[1]
            pair = (entry.source_lang, entry.target_lang)
            lemma = self.lemma_key(entry.source_term, entry.source_lang)
            by_lemma.setdefault((lemma, *pair), []).append(record)
            by_term.setdefault((fold_term(entry.source_term), *pair), []).append(record)

        return _Snapshot(
            records=tuple(records),
            by_lemma={key: tuple(value) for key, value in by_lemma.items()},
            by_term={key: tuple(value) for key, value in by_term.items()},
        )

    # ------------------------------------------------------------ persistence

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "name": self.name,
            "entries": [entry.to_dict() for entry in self.entries()],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        normalizer: Optional[MorphologicalNormalizer] = None
    ) -> "GlossaryStore":
        """Create from dictionary"""
        entries = [GlossaryEntry.from_dict(e) for e in data.get("entries", [])]
        return cls(entries=entries, normalizer=normalizer, name=data.get("name", "default"))

    def save(self, file_path: Path) -> bool:
        """Save glossary to JSON file"""
        try:
            file_path = Path(file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            logger.info(f"Saved glossary '{self.name}' to {file_path}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save glossary: {e}")
            return False

    @classmethod
    def load(
        cls,
        file_path: Path,
        normalizer: Optional[MorphologicalNormalizer] = None
    ) -> Optional["GlossaryStore"]:
        """Load glossary from JSON file"""
        try:
            file_path = Path(file_path)
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            store = cls.from_dict(data, normalizer=normalizer)
            logger.info(f"Loaded glossary '{store.name}' with {len(store)} entries")
            return store
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to load glossary: {e}")
            return None

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about loaded terminology"""
        pairs: Dict[str, int] = {}
        contexts: Dict[str, int] = {}
        for entry in self.entries():
            pair = f"{entry.source_lang}->{entry.target_lang}"
            pairs[pair] = pairs.get(pair, 0) + 1
            context = entry.domain_context or "general"
            contexts[context] = contexts.get(context, 0) + 1

        return {
            "name": self.name,
            "total_terms": len(self),
            "language_pairs": pairs,
            "contexts": contexts,
        }


# Built-in fire-suppression terminology (Hebrew, Russian, domain context)
FIRE_PROTECTION_TERMS_HE_RU = [
    ("ראש ספרינקלר", "спринклерный ороситель", "fire_protection"),
    ("ספרינקלר", "спринклер", "fire_protection"),
    ("צנרת אספקה", "питающий трубопровод", "plumbing"),
    ("צנרת", "трубопровод", None),
    ("צינור", "труба", None),
    ("מגוף שליטה", "контрольно-сигнальный клапан", "fire_protection"),
    ("מגוף", "задвижка", "plumbing"),
    ("שסתום", "клапан", None),
    ("לחץ עבודה", "рабочее давление", None),
    ("לחץ", "давление", None),
    ("משאבה", "насос", None),
    ("משאבת כיבוי", "пожарный насос", "fire_protection"),
    ("ברז כיבוי", "пожарный кран", "fire_protection"),
    ("הידרנט", "гидрант", "fire_protection"),
    ("מטפה", "огнетушитель", "fire_protection"),
    ("גלאי עשן", "дымовой извещатель", "fire_protection"),
    ("מערכת כיבוי", "система пожаротушения", "fire_protection"),
    ("מערכת", "система", None),
    ("בדיקה", "проверка", None),
    ("ביקורת", "инспекция", "fire_protection"),
    ("דוח", "отчёт", None),
    ("תקן", "стандарт", None),
    ("מפרט טכני", "техническая спецификация", None),
]


def create_fire_protection_glossary(name: str = "fire_protection") -> GlossaryStore:
    """Create a pre-built Hebrew<->Russian fire-suppression glossary"""
    store = GlossaryStore(name=name)
    entries = []
    for hebrew, russian, context in FIRE_PROTECTION_TERMS_HE_RU:
        entries.append(GlossaryEntry(hebrew, russian, "he", "ru", context))
        entries.append(GlossaryEntry(russian, hebrew, "ru", "he", context))
    store.add_many(entries)
    logger.info(f"Loaded built-in glossary '{name}' with {len(store)} entries")
    return store
