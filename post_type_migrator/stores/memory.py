"""
Dictionary-backed content store.

Useful for previews and for exercising the migration job without a
database.  Writes can be made to fail per record or per term so that
error handling paths can be driven deterministically.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models.record import Record, Term
from ..utils.terms import normalize_term_name, slugify
from .base import STATUS_ANY, ContentStore, StoreError


class InMemoryContentStore(ContentStore):
    def __init__(
        self,
        records: Iterable[Record] = (),
        *,
        taxonomies: Optional[Iterable[str]] = None,
    ) -> None:
        self.records: Dict[int, Record] = {}
        for record in records:
            self.records[record.id] = record.model_copy()
        self.terms: Dict[int, Term] = {}
        self.relationships: Dict[Tuple[int, str], Set[int]] = {}
        self.taxonomies: Optional[Set[str]] = set(taxonomies) if taxonomies is not None else None

        # Failure injection
        self.fail_updates: Dict[int, str] = {}
        self.fail_create_term: Optional[str] = None
        self.fail_assign_term: Optional[str] = None

        self.calls: List[str] = []
        self.resets = 0
        self._query_cache: Dict[Tuple[str, int, int, str], List[int]] = {}

    def query_by_category(
        self, category: str, limit: int, offset: int = 0, status: str = STATUS_ANY
    ) -> List[Record]:
        self.calls.append("query_by_category")
        key = (category, limit, offset, status)
        matches = [
            r for r in self.records.values()
            if r.category == category and (status == STATUS_ANY or r.status == status)
        ]
        page = matches[offset:offset + limit]
        self._query_cache[key] = [r.id for r in page]
        # Callers mutate what they get back; hand out copies
        return [r.model_copy() for r in page]

    def update_record(self, record: Record) -> int:
        self.calls.append("update_record")
        if record.id in self.fail_updates:
            raise StoreError(self.fail_updates[record.id])
        if record.id not in self.records:
            raise StoreError("Invalid post ID.")
        self.records[record.id] = record.model_copy()
        return record.id

    def term_exists(self, name: str, taxonomy: str) -> Optional[int]:
        self.calls.append("term_exists")
        for term in self.terms.values():
            if term.taxonomy == taxonomy and term.name == name:
                return term.id
        return None

    def create_term(self, name: str, taxonomy: str) -> int:
        self.calls.append("create_term")
        if self.fail_create_term is not None:
            raise StoreError(self.fail_create_term)
        if not self.has_taxonomy(taxonomy):
            raise StoreError("Invalid taxonomy.")
        name = normalize_term_name(name)
        if not name:
            raise StoreError("A name is required for this term.")
        if self.term_exists(name, taxonomy) is not None:
            raise StoreError("A term with the name provided already exists in this taxonomy.")
        term_id = max(self.terms, default=0) + 1
        self.terms[term_id] = Term(id=term_id, name=name, slug=slugify(name), taxonomy=taxonomy)
        return term_id

    def assign_term(self, record_id: int, term_id: int, taxonomy: str) -> None:
        self.calls.append("assign_term")
        if self.fail_assign_term is not None:
            raise StoreError(self.fail_assign_term)
        term = self.terms.get(term_id)
        if term is None or term.taxonomy != taxonomy:
            raise StoreError("Invalid term ID.")
        self.relationships[(record_id, taxonomy)] = {term_id}

    def terms_for(self, record_id: int, taxonomy: str) -> List[Term]:
        ids = sorted(self.relationships.get((record_id, taxonomy), ()))
        return [self.terms[i] for i in ids]

    def reset_caches(self) -> None:
        self.resets += 1
        self._query_cache.clear()

    def has_taxonomy(self, taxonomy: str) -> bool:
        return self.taxonomies is None or taxonomy in self.taxonomies

    def writes(self) -> List[str]:
        """Calls that mutate the store, in order."""
        return [c for c in self.calls if c in ("update_record", "create_term", "assign_term")]
