"""
DuckDB content store laid out like a WordPress database.

Four tables are used, named with a configurable prefix (``wp_`` by
default) so that a local copy of a WordPress database can be migrated
in place:

* ``posts``: ``ID``, ``post_title``, ``post_type``, ``post_status``,
  ``post_date``, ``post_modified``
* ``terms``: ``term_id``, ``name``, ``slug``
* ``term_taxonomy``: ``term_taxonomy_id``, ``term_id``, ``taxonomy``,
  ``count``
* ``term_relationships``: ``object_id``, ``term_taxonomy_id``

Every statement goes through :meth:`DuckDBContentStore._execute`, which
keeps a log of executed SQL much like ``$wpdb->queries``.  That log and
the term id cache grow for the lifetime of the store until
:meth:`~DuckDBContentStore.reset_caches` is called, which the migration
job does every fifty records.

Usage example::

    with DuckDBContentStore("data/migration.duckdb") as store:
        page = store.query_by_category("event", limit=150)
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import duckdb
import pandas as pd

from ..models.record import Record, Term
from ..utils.terms import normalize_term_name, slugify
from .base import STATUS_ANY, ContentStore, StoreError

_PREFIX_RE = re.compile(r"^[A-Za-z0-9_]*$")
TABLES = ("posts", "terms", "term_taxonomy", "term_relationships")


class DuckDBContentStore(ContentStore):
    def __init__(
        self,
        database: str = ":memory:",
        *,
        table_prefix: str = "wp_",
        taxonomies: Optional[Iterable[str]] = None,
        read_only: bool = False,
    ) -> None:
        if not _PREFIX_RE.match(table_prefix):
            raise ValueError(f"Invalid table prefix: {table_prefix!r}")
        self.database = database
        self.prefix = table_prefix
        self.taxonomies: Optional[Set[str]] = set(taxonomies) if taxonomies is not None else None
        try:
            self.con = duckdb.connect(database=database, read_only=read_only)
        except duckdb.Error as e:
            raise StoreError(f"Could not open {database}: {e}") from e
        self.queries: List[str] = []
        self._term_cache: Dict[Tuple[str, str], int] = {}

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def __enter__(self) -> "DuckDBContentStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.con.close()

    def table(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> duckdb.DuckDBPyConnection:
        self.queries.append(sql)
        try:
            return self.con.execute(sql, list(params))
        except duckdb.Error as e:
            raise StoreError(str(e)) from e

    def ensure_schema(self) -> None:
        """Create the four tables if they do not exist yet."""
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table('posts')} (
                ID BIGINT PRIMARY KEY,
                post_title VARCHAR DEFAULT '',
                post_type VARCHAR NOT NULL,
                post_status VARCHAR DEFAULT 'publish',
                post_date TIMESTAMP,
                post_modified TIMESTAMP
            )
            """
        )
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table('terms')} (
                term_id BIGINT PRIMARY KEY,
                name VARCHAR NOT NULL,
                slug VARCHAR NOT NULL
            )
            """
        )
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table('term_taxonomy')} (
                term_taxonomy_id BIGINT PRIMARY KEY,
                term_id BIGINT NOT NULL,
                taxonomy VARCHAR NOT NULL,
                "count" BIGINT DEFAULT 0
            )
            """
        )
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table('term_relationships')} (
                object_id BIGINT NOT NULL,
                term_taxonomy_id BIGINT NOT NULL
            )
            """
        )

    def has_schema(self) -> bool:
        rows = self._execute(
            "SELECT table_name FROM information_schema.tables WHERE table_name IN (?, ?, ?, ?)",
            [self.table(name) for name in TABLES],
        ).fetchall()
        return len({r[0] for r in rows}) == len(TABLES)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def import_posts(self, frame: pd.DataFrame) -> int:
        """Insert rows from a normalized export frame, skipping known IDs.

        ``frame`` must have ``id``, ``title``, ``post_type``, ``status`` and
        ``post_date`` columns (see
        :func:`post_type_migrator.extractors.read_posts_export`).
        Returns the number of inserted posts.
        """
        posts = self.table("posts")
        before = self._execute(f"SELECT COUNT(*) FROM {posts}").fetchone()[0]
        self.con.register("posts_frame", frame)
        try:
            self._execute(
                f"""
                INSERT INTO {posts} (ID, post_title, post_type, post_status, post_date, post_modified)
                SELECT DISTINCT ON (id) id, title, post_type, status, post_date, post_date
                FROM posts_frame
                WHERE id NOT IN (SELECT ID FROM {posts})
                """
            )
        finally:
            self.con.unregister("posts_frame")
        after = self._execute(f"SELECT COUNT(*) FROM {posts}").fetchone()[0]
        return after - before

    def query_by_category(
        self, category: str, limit: int, offset: int = 0, status: str = STATUS_ANY
    ) -> List[Record]:
        sql = (
            f"SELECT ID, post_type, post_title, post_status FROM {self.table('posts')} "
            "WHERE post_type = ?"
        )
        params: List[Any] = [category]
        if status != STATUS_ANY:
            sql += " AND post_status = ?"
            params.append(status)
        # Same default ordering as a WordPress post query
        sql += " ORDER BY post_date DESC NULLS LAST, ID DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])
        rows = self._execute(sql, params).fetchall()
        return [
            Record(id=row[0], category=row[1], title=row[2] or "", status=row[3] or "publish")
            for row in rows
        ]

    def get_record(self, record_id: int) -> Optional[Record]:
        row = self._execute(
            f"SELECT ID, post_type, post_title, post_status FROM {self.table('posts')} WHERE ID = ?",
            [record_id],
        ).fetchone()
        if row is None:
            return None
        return Record(id=row[0], category=row[1], title=row[2] or "", status=row[3] or "publish")

    def update_record(self, record: Record) -> int:
        posts = self.table("posts")
        exists = self._execute(f"SELECT 1 FROM {posts} WHERE ID = ?", [record.id]).fetchone()
        if exists is None:
            raise StoreError("Invalid post ID.")
        self._execute(
            f"UPDATE {posts} SET post_type = ?, post_title = ?, post_status = ?, post_modified = ? WHERE ID = ?",
            [record.category, record.title, record.status, datetime.now(), record.id],
        )
        return record.id

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def has_taxonomy(self, taxonomy: str) -> bool:
        return self.taxonomies is None or taxonomy in self.taxonomies

    def term_exists(self, name: str, taxonomy: str) -> Optional[int]:
        key = (taxonomy, name)
        if key in self._term_cache:
            return self._term_cache[key]
        row = self._execute(
            f"""
            SELECT t.term_id
            FROM {self.table('terms')} AS t
            JOIN {self.table('term_taxonomy')} AS tt ON tt.term_id = t.term_id
            WHERE tt.taxonomy = ? AND t.name = ?
            ORDER BY t.term_id
            LIMIT 1
            """,
            [taxonomy, name],
        ).fetchone()
        if row is None:
            return None
        self._term_cache[key] = row[0]
        return row[0]

    def create_term(self, name: str, taxonomy: str) -> int:
        if not self.has_taxonomy(taxonomy):
            raise StoreError("Invalid taxonomy.")
        name = normalize_term_name(name)
        if not name:
            raise StoreError("A name is required for this term.")
        if self.term_exists(name, taxonomy) is not None:
            raise StoreError("A term with the name provided already exists in this taxonomy.")

        terms = self.table("terms")
        term_taxonomy = self.table("term_taxonomy")
        term_id = self._execute(f"SELECT COALESCE(MAX(term_id), 0) + 1 FROM {terms}").fetchone()[0]
        tt_id = self._execute(
            f"SELECT COALESCE(MAX(term_taxonomy_id), 0) + 1 FROM {term_taxonomy}"
        ).fetchone()[0]
        slug = self._unique_slug(name, taxonomy)

        # A term row without its taxonomy row would be invisible but keep its slug
        self.con.begin()
        try:
            self._execute(
                f"INSERT INTO {terms} (term_id, name, slug) VALUES (?, ?, ?)",
                [term_id, name, slug],
            )
            self._execute(
                f'INSERT INTO {term_taxonomy} (term_taxonomy_id, term_id, taxonomy, "count") VALUES (?, ?, ?, 0)',
                [tt_id, term_id, taxonomy],
            )
        except StoreError:
            self.con.rollback()
            raise
        self.con.commit()
        self._term_cache[(taxonomy, name)] = term_id
        return term_id

    def _unique_slug(self, name: str, taxonomy: str) -> str:
        base = slugify(name) or "term"
        slug = base
        suffix = 2
        while self._execute(
            f"""
            SELECT 1 FROM {self.table('terms')} AS t
            JOIN {self.table('term_taxonomy')} AS tt ON tt.term_id = t.term_id
            WHERE tt.taxonomy = ? AND t.slug = ?
            """,
            [taxonomy, slug],
        ).fetchone():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def _term_taxonomy_id(self, term_id: int, taxonomy: str) -> Optional[int]:
        row = self._execute(
            f"SELECT term_taxonomy_id FROM {self.table('term_taxonomy')} WHERE term_id = ? AND taxonomy = ?",
            [term_id, taxonomy],
        ).fetchone()
        return row[0] if row else None

    def assign_term(self, record_id: int, term_id: int, taxonomy: str) -> None:
        """Make ``term_id`` the only term of ``record_id`` in ``taxonomy``."""
        tt_id = self._term_taxonomy_id(term_id, taxonomy)
        if tt_id is None:
            raise StoreError("Invalid term ID.")
        relationships = self.table("term_relationships")
        term_taxonomy = self.table("term_taxonomy")

        current = {
            row[0]
            for row in self._execute(
                f"""
                SELECT r.term_taxonomy_id FROM {relationships} AS r
                JOIN {term_taxonomy} AS tt ON tt.term_taxonomy_id = r.term_taxonomy_id
                WHERE r.object_id = ? AND tt.taxonomy = ?
                """,
                [record_id, taxonomy],
            ).fetchall()
        }
        if current == {tt_id}:
            return

        stale = sorted(current - {tt_id})
        for old in stale:
            self._execute(
                f"DELETE FROM {relationships} WHERE object_id = ? AND term_taxonomy_id = ?",
                [record_id, old],
            )
        if tt_id not in current:
            self._execute(
                f"INSERT INTO {relationships} (object_id, term_taxonomy_id) VALUES (?, ?)",
                [record_id, tt_id],
            )
        for changed in stale + [tt_id]:
            self._execute(
                f"""
                UPDATE {term_taxonomy}
                SET "count" = (SELECT COUNT(*) FROM {relationships} WHERE term_taxonomy_id = ?)
                WHERE term_taxonomy_id = ?
                """,
                [changed, changed],
            )

    def terms_for(self, record_id: int, taxonomy: str) -> List[Term]:
        rows = self._execute(
            f"""
            SELECT t.term_id, t.name, t.slug, tt.taxonomy
            FROM {self.table('term_relationships')} AS r
            JOIN {self.table('term_taxonomy')} AS tt ON tt.term_taxonomy_id = r.term_taxonomy_id
            JOIN {self.table('terms')} AS t ON t.term_id = tt.term_id
            WHERE r.object_id = ? AND tt.taxonomy = ?
            ORDER BY t.term_id
            """,
            [record_id, taxonomy],
        ).fetchall()
        return [Term(id=r[0], name=r[1], slug=r[2], taxonomy=r[3]) for r in rows]

    def term_count(self, term_id: int, taxonomy: str) -> int:
        term_taxonomy = self.table("term_taxonomy")
        row = self._execute(
            f'SELECT "count" FROM {term_taxonomy} WHERE term_id = ? AND taxonomy = ?',
            [term_id, taxonomy],
        ).fetchone()
        return row[0] if row else 0

    def reset_caches(self) -> None:
        self.queries = []
        self._term_cache.clear()
