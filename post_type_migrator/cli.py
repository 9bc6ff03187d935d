"""
Command line front end for the post type migration.

Usage::

    python main.py --from=event --to=article \\
        [--taxonomy=category --term="Events"] \\
        [--per-page=150] [--offset=0] [--dry-run=false]

Dry run is on unless ``--dry-run=false`` is passed exactly.  Exit codes:
``0`` success, ``1`` configuration or pre-flight error, ``2`` usage
error, ``3`` no matching posts, ``4`` some posts failed to migrate.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .migration_tool import PostTypeMigrationTool
from .models.config import DEFAULT_PAGE_SIZE, MigrationConfig, parse_dry_run
from .models.record import RunReport, RunStatus
from .settings import CONFIG_FILE, load_settings
from .stores.base import StoreError
from .stores.duckdb_store import DuckDBContentStore
from .utils.errors import ConfigurationError
from .utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks
from .utils.reporter import ConsoleReporter

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_NO_RECORDS = 3
EXIT_PARTIAL_FAILURE = 4


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="migrate-post-type",
        description="Migrate posts from one post type to another, optionally assigning a taxonomy term.",
    )
    p.add_argument("--from", dest="source", required=True, help="The post type to migrate from")
    p.add_argument("--to", dest="target", required=True, help="The post type to migrate to")
    p.add_argument("--taxonomy", default=None, help="Taxonomy of the term to assign (requires --term)")
    p.add_argument("--term", default=None, help="Term to assign migrated posts to (requires --taxonomy)")
    p.add_argument(
        "--per-page",
        dest="per_page",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help=f"How many posts to process this run (default: {DEFAULT_PAGE_SIZE})",
    )
    p.add_argument("--offset", type=int, default=0, help="How many posts to skip from the beginning (default: 0)")
    p.add_argument(
        "--dry-run",
        dest="dry_run",
        nargs="?",
        const="true",
        default=None,
        help='Pass "false" to write changes; any other value keeps the dry run',
    )
    p.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON settings file")
    p.add_argument("--database", default=None, help="DuckDB content store (overrides the settings file)")
    p.add_argument("--summary-file", dest="summary_file", default=None, help="Write the run report as JSON here")
    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> MigrationConfig:
    """Build the run configuration, turning validation errors into one message."""
    try:
        return MigrationConfig(
            source_category=args.source,
            target_category=args.target,
            taxonomy=args.taxonomy,
            term=args.term,
            page_size=args.per_page,
            offset=args.offset,
            dry_run=parse_dry_run(args.dry_run),
        )
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(details) from e


def exit_code_for(report: RunReport) -> int:
    if report.status is RunStatus.NO_MATCHING_RECORDS:
        return EXIT_NO_RECORDS
    if report.status is RunStatus.PARTIAL_FAILURE:
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


def write_summary(path: str, report: RunReport) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
        config = config_from_args(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    database = args.database or settings["store"]["database"]
    if database != ":memory:" and not os.path.exists(database):
        print(f"Error: content store not found: {database}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    report_dir = settings["reports"]["directory"]
    reporter = ConsoleReporter(report_dir)
    try:
        with DuckDBContentStore(
            database,
            table_prefix=settings["store"]["table_prefix"],
            taxonomies=settings["store"]["taxonomies"],
        ) as store:
            run_pre_flight_checks(store, config)
            tool = PostTypeMigrationTool(
                store,
                reporter,
                report_dir=report_dir,
                reset_every=settings["migration"]["reset_every"],
            )
            context = tool.new_context(pause_seconds=settings["migration"]["pause_seconds"])
            report = tool.run(config, context)
    except (PreFlightCheckError, StoreError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.summary_file:
        write_summary(args.summary_file, report)
    return exit_code_for(report)
