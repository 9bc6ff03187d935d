"""Base content store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.record import Record

STATUS_ANY = "any"


class StoreError(Exception):
    """A content store operation failed.

    Only the message is ever shown to the user.
    """


class ContentStore(ABC):
    """
    Operations the migration job needs from a content store.

    Implementations raise :class:`StoreError` for any failed write or
    lookup.  All calls are synchronous; nothing is retried.
    """

    @abstractmethod
    def query_by_category(
        self, category: str, limit: int, offset: int = 0, status: str = STATUS_ANY
    ) -> List[Record]:
        """Return one page of records of ``category`` in store order.

        ``status="any"`` applies no status filter.
        """

    @abstractmethod
    def update_record(self, record: Record) -> int:
        """Persist ``record`` and return its id."""

    @abstractmethod
    def term_exists(self, name: str, taxonomy: str) -> Optional[int]:
        """Return the id of the term named exactly ``name``, or ``None``."""

    @abstractmethod
    def create_term(self, name: str, taxonomy: str) -> int:
        """Create a term and return its id."""

    @abstractmethod
    def assign_term(self, record_id: int, term_id: int, taxonomy: str) -> None:
        """Set ``term_id`` as the record's term in ``taxonomy``."""

    def reset_caches(self) -> None:
        """Drop any cached queries or objects held by the store."""

    def has_taxonomy(self, taxonomy: str) -> bool:
        return True

    def has_schema(self) -> bool:
        return True
