#!/usr/bin/env python3
"""
Creates the DuckDB content store and loads posts from a WordPress export.

Usage:
  python scripts/initialize_database.py docs/posts-export.csv \
    [--database data/migration.duckdb] [--table-prefix wp_]

Both CSV exports and WXR (.xml) exports are accepted.  Posts whose ID is
already in the store are skipped, so the script can be re-run safely.
"""

import argparse
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from post_type_migrator.extractors import read_posts_export, read_posts_wxr
from post_type_migrator.settings import load_settings
from post_type_migrator.stores import DuckDBContentStore, StoreError


def initialize_database(export_path: str, db_path: str, table_prefix: str = "wp_") -> int:
    """
    Creates the posts and taxonomy tables if needed and imports the export.

    Returns the number of posts inserted.
    """
    if export_path.lower().endswith(".xml"):
        frame = read_posts_wxr(export_path)
    else:
        frame = read_posts_export(export_path)

    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    with DuckDBContentStore(db_path, table_prefix=table_prefix) as store:
        store.ensure_schema()
        return store.import_posts(frame)


def main():
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Create the content store and import a WordPress export.")
    parser.add_argument("export", help="WordPress CSV or WXR export file")
    parser.add_argument("--database", default=settings["store"]["database"], help="DuckDB file to create/update")
    parser.add_argument("--table-prefix", default=settings["store"]["table_prefix"], help="Table prefix (default: wp_)")
    args = parser.parse_args()

    if not os.path.exists(args.export):
        print(f"Error: export file not found: {args.export}", file=sys.stderr)
        sys.exit(1)

    try:
        inserted = initialize_database(args.export, args.database, args.table_prefix)
    except (StoreError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Imported {inserted} posts into {args.database}.")


if __name__ == "__main__":
    main()
