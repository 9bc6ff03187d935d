import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pandas as pd
import pytest

from post_type_migrator.migration_tool import PostTypeMigrationTool
from post_type_migrator.models import MigrationConfig, Record
from post_type_migrator.stores import DuckDBContentStore, StoreError


def _frame():
    return pd.DataFrame(
        {
            "id": [1, 2, 3, 4],
            "title": ["Launch party", "Meetup", "Old conference", "About us"],
            "post_type": ["event", "event", "event", "page"],
            "status": ["publish", "draft", "trash", "publish"],
            "post_date": pd.to_datetime(["2024-01-01", "2024-03-01", "2024-02-01", "2024-01-15"]),
        }
    )


@pytest.fixture
def store():
    s = DuckDBContentStore()
    s.ensure_schema()
    s.import_posts(_frame())
    yield s
    s.close()


def test_schema_detection():
    with DuckDBContentStore() as s:
        assert not s.has_schema()
        s.ensure_schema()
        assert s.has_schema()


def test_import_skips_known_ids(store):
    assert store.import_posts(_frame()) == 0
    assert store.get_record(1).title == "Launch party"


def test_query_orders_newest_first_and_includes_any_status(store):
    page = store.query_by_category("event", limit=10)
    assert [r.id for r in page] == [2, 3, 1]
    assert {r.status for r in page} == {"publish", "draft", "trash"}


def test_query_status_filter_and_paging(store):
    assert [r.id for r in store.query_by_category("event", limit=10, status="publish")] == [1]
    assert [r.id for r in store.query_by_category("event", limit=1, offset=1)] == [3]
    assert store.query_by_category("event", limit=10, offset=10) == []


def test_update_record(store):
    record = store.get_record(1)
    record.category = "article"
    assert store.update_record(record) == 1
    assert store.get_record(1).category == "article"
    assert [r.id for r in store.query_by_category("event", limit=10)] == [2, 3]


def test_update_unknown_record(store):
    with pytest.raises(StoreError, match="Invalid post ID."):
        store.update_record(Record(id=99, category="article"))


def test_create_and_find_terms(store):
    assert store.term_exists("Events & Shows", "category") is None
    term_id = store.create_term("Events &amp; Shows", "category")
    assert store.term_exists("Events & Shows", "category") == term_id
    assert store.term_exists("Events & Shows", "post_tag") is None
    with pytest.raises(StoreError, match="already exists"):
        store.create_term("Events & Shows", "category")


def test_slugs_are_unique_within_a_taxonomy(store):
    first = store.create_term("Events & Shows", "category")
    second = store.create_term("Events Shows", "category")
    store.assign_term(1, first, "category")
    store.assign_term(2, second, "category")
    assert store.terms_for(1, "category")[0].slug == "events-shows"
    assert store.terms_for(2, "category")[0].slug == "events-shows-2"


def test_assign_term_replaces_terms_in_taxonomy(store):
    a = store.create_term("A", "category")
    b = store.create_term("B", "category")
    tag = store.create_term("Featured", "post_tag")

    store.assign_term(1, a, "category")
    store.assign_term(1, tag, "post_tag")
    store.assign_term(1, b, "category")
    store.assign_term(1, b, "category")

    assert [t.name for t in store.terms_for(1, "category")] == ["B"]
    assert [t.name for t in store.terms_for(1, "post_tag")] == ["Featured"]
    assert store.term_count(a, "category") == 0
    assert store.term_count(b, "category") == 1


def test_assign_unknown_term(store):
    with pytest.raises(StoreError, match="Invalid term ID."):
        store.assign_term(1, 42, "category")


def test_restricted_taxonomies():
    with DuckDBContentStore(taxonomies={"category"}) as s:
        s.ensure_schema()
        assert s.has_taxonomy("category")
        assert not s.has_taxonomy("genre")
        with pytest.raises(StoreError, match="Invalid taxonomy."):
            s.create_term("Jazz", "genre")


def test_reset_caches_drops_query_log_and_term_cache(store):
    term_id = store.create_term("Events", "category")
    assert store.term_exists("Events", "category") == term_id
    assert store.queries
    store.reset_caches()
    assert store.queries == []
    assert store._term_cache == {}
    assert store.term_exists("Events", "category") == term_id


def test_invalid_table_prefix():
    with pytest.raises(ValueError):
        DuckDBContentStore(table_prefix="wp; DROP TABLE")


def test_custom_table_prefix():
    with DuckDBContentStore(table_prefix="site2_") as s:
        s.ensure_schema()
        s.import_posts(_frame())
        assert s.has_schema()
        assert len(s.query_by_category("event", limit=10)) == 3


def test_full_run_against_duckdb(store, tmp_path):
    tool = PostTypeMigrationTool(store, report_dir=str(tmp_path))
    context = tool.new_context(sleep_fn=lambda seconds: None)
    config = MigrationConfig(
        source_category="event",
        target_category="article",
        taxonomy="category",
        term="Events",
        dry_run=False,
    )
    report = tool.run(config, context)

    assert report.migrated == 3
    assert report.failed == 0
    assert store.query_by_category("event", limit=10) == []
    term_id = store.term_exists("Events", "category")
    for record_id in (1, 2, 3):
        assert store.get_record(record_id).category == "article"
        assert [t.id for t in store.terms_for(record_id, "category")] == [term_id]
    assert store.term_count(term_id, "category") == 3
    assert store.get_record(4).category == "page"


class _TaxonomyInsertFails(DuckDBContentStore):
    def _execute(self, sql, params=()):
        if sql.startswith("INSERT INTO") and "term_taxonomy" in sql.split("(")[0]:
            raise StoreError("Could not insert term taxonomy")
        return super()._execute(sql, params)


def test_create_term_leaves_no_orphan_rows():
    with _TaxonomyInsertFails() as s:
        s.ensure_schema()
        with pytest.raises(StoreError, match="term taxonomy"):
            s.create_term("Events", "category")
        assert s.con.execute("SELECT COUNT(*) FROM wp_terms").fetchone()[0] == 0
        assert s.term_exists("Events", "category") is None
