import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from post_type_migrator.migrators import ensure_term_assigned, migrate_record
from post_type_migrator.models import MigrationConfig, Record
from post_type_migrator.stores import InMemoryContentStore, StoreError
from post_type_migrator.utils.errors import (
    InvalidRecord,
    StoreUpdateFailed,
    TermAssignFailed,
    TermCreateFailed,
    TermLookupFailed,
)
from post_type_migrator.utils.reporter import Reporter


def _store():
    return InMemoryContentStore(
        [
            Record(id=1, category="event", title="Launch party"),
            Record(id=2, category="event", title="Meetup"),
        ]
    )


def _config(**kwargs):
    values = {"source_category": "event", "target_category": "article", "dry_run": False}
    values.update(kwargs)
    return MigrationConfig(**values)


def _reassigned(record_id=1, title="Launch party"):
    return Record(id=record_id, category="article", title=title)


def test_category_must_already_match_target():
    store = _store()
    with pytest.raises(InvalidRecord):
        migrate_record(store, Record(id=1, category="event"), _config())
    assert store.writes() == []


def test_dry_run_returns_existing_id_without_writing():
    store = _store()
    config = _config(dry_run=True, taxonomy="category", term="Events")
    assert migrate_record(store, _reassigned(), config) == 1
    assert store.calls == []
    assert store.records[1].category == "event"


def test_live_run_persists_the_new_post_type():
    store = _store()
    assert migrate_record(store, _reassigned(), _config()) == 1
    assert store.records[1].category == "article"
    assert store.records[2].category == "event"
    assert "term_exists" not in store.calls


def test_store_failure_becomes_store_update_failed():
    store = _store()
    store.fail_updates[1] = "Could not update post in the database"
    with pytest.raises(StoreUpdateFailed) as exc_info:
        migrate_record(store, _reassigned(), _config())
    assert exc_info.value.message == "Could not update post in the database"
    assert exc_info.value.code == "STORE_UPDATE_FAILED"


def test_missing_term_is_created_and_assigned():
    store = _store()
    migrate_record(store, _reassigned(), _config(taxonomy="category", term="Events"))
    terms = store.terms_for(1, "category")
    assert [t.name for t in terms] == ["Events"]
    assert terms[0].slug == "events"


def test_existing_term_is_reused():
    store = _store()
    term_id = store.create_term("Events", "category")
    migrate_record(store, _reassigned(), _config(taxonomy="category", term="Events"))
    migrate_record(store, _reassigned(2, "Meetup"), _config(taxonomy="category", term="Events"))
    assert store.calls.count("create_term") == 1
    assert [t.id for t in store.terms_for(2, "category")] == [term_id]


def test_term_failure_does_not_fail_the_record():
    store = _store()
    store.fail_create_term = "Invalid taxonomy."
    reporter = Reporter()
    result = migrate_record(store, _reassigned(), _config(taxonomy="category", term="Events"), reporter)
    assert result == 1
    assert store.records[1].category == "article"
    assert reporter.lines("WARNING") == ["Error inserting term: Invalid taxonomy."]


def test_ensure_term_assigned_skipped_in_dry_run():
    store = _store()
    assert ensure_term_assigned(store, 1, "category", "Events", dry_run=True) == 0
    assert store.calls == []


def test_ensure_term_assigned_raises_typed_errors():
    store = _store()
    store.fail_create_term = "nope"
    with pytest.raises(TermCreateFailed):
        ensure_term_assigned(store, 1, "category", "Events")

    store = _store()
    store.fail_assign_term = "locked"
    with pytest.raises(TermAssignFailed) as exc_info:
        ensure_term_assigned(store, 1, "category", "Events")
    assert exc_info.value.message == "Error assigning term: locked"


class _BrokenLookupStore(InMemoryContentStore):
    def term_exists(self, name, taxonomy):
        raise StoreError("lookup timed out")


def test_term_lookup_failure():
    store = _BrokenLookupStore([Record(id=1, category="article")])
    with pytest.raises(TermLookupFailed):
        ensure_term_assigned(store, 1, "category", "Events")
    assert "create_term" not in store.calls
