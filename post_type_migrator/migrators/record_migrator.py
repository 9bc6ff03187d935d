"""
Per-record migration steps.

:func:`migrate_record` persists a record whose post type has already
been reassigned by the job, then tags it with the configured taxonomy
term through :func:`ensure_term_assigned`.  Failures of the record
update abort that record; failures of the term step are only reported,
since the record update is not rolled back.
"""

from __future__ import annotations

from typing import Optional

from ..models.config import MigrationConfig
from ..models.record import Record
from ..stores.base import ContentStore, StoreError
from ..utils.errors import (
    InvalidRecord,
    StoreUpdateFailed,
    TermAssignFailed,
    TermCreateFailed,
    TermError,
    TermLookupFailed,
)
from ..utils.reporter import Reporter


def ensure_term_assigned(
    store: ContentStore,
    record_id: int,
    taxonomy: str,
    term_name: str,
    *,
    dry_run: bool = False,
) -> int:
    """
    Make sure ``term_name`` exists in ``taxonomy`` and assign it to the record.

    The term is looked up by exact name and created when missing.  In
    dry-run mode nothing is looked up or written.

    :param store: Content store holding the record and the taxonomy.
    :param record_id: Id of the record to tag.
    :param taxonomy: Taxonomy name, e.g. ``category`` or ``post_tag``.
    :param term_name: Name of the term inside ``taxonomy``.
    :param dry_run: Skip the whole step when true.
    :return: The id of the assigned term, or ``0`` when nothing was assigned.
    :raises TermLookupFailed: if the store could not be searched.
    :raises TermCreateFailed: if the missing term could not be created.
    :raises TermAssignFailed: if the store rejected the assignment.
    """
    if dry_run:
        return 0

    try:
        term_id: Optional[int] = store.term_exists(term_name, taxonomy)
    except StoreError as e:
        raise TermLookupFailed(f"Error looking up term: {e}") from e

    if term_id is None:
        try:
            term_id = store.create_term(term_name, taxonomy)
        except StoreError as e:
            raise TermCreateFailed(f"Error inserting term: {e}") from e

    if not term_id:
        return 0

    try:
        store.assign_term(record_id, term_id, taxonomy)
    except StoreError as e:
        raise TermAssignFailed(f"Error assigning term: {e}") from e
    return term_id


def migrate_record(
    store: ContentStore,
    record: Record,
    config: MigrationConfig,
    reporter: Optional[Reporter] = None,
) -> int:
    """
    Persist ``record`` under its new post type.

    :param store: Content store to write to.
    :param record: Record whose ``category`` already equals the target.
    :param config: Run configuration; ``dry_run`` and the taxonomy term
        are read from it.
    :param reporter: Receives a warning when term assignment fails.
    :return: The id of the persisted record (or of the untouched record in
        dry-run mode).
    :raises InvalidRecord: if the category was not reassigned beforehand.
    :raises StoreUpdateFailed: if the store rejected the update.
    """
    if record.category != config.target_category:
        raise InvalidRecord(
            f'Post type "{record.category}" does not match target "{config.target_category}"'
        )

    if config.dry_run:
        return record.id

    try:
        record_id = store.update_record(record)
    except StoreError as e:
        raise StoreUpdateFailed(str(e)) from e

    if config.assigns_term:
        try:
            ensure_term_assigned(store, record_id, config.taxonomy, config.term)
        except TermError as e:
            if reporter is not None:
                reporter.warning(e.message)

    return record_id
