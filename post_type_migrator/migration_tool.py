"""
High-level orchestration of a post type migration.

This module defines :class:`PostTypeMigrationTool`, which fetches one
page of posts of the source post type, reassigns each to the target
post type and hands it to :func:`migrate_record`.  Per-record failures
are counted and reported; they never stop the page.  Every fifty posts
the tool pauses briefly and asks the store to drop its caches so that
very large migrations do not grow without bound.

Only a single page (``page_size`` posts starting at ``offset``) is
processed per run.  Running the next page is the caller's job.

Timing and the cache reset hook live on an explicit :class:`RunContext`
rather than in module globals, so tests can inject a fake clock and a
no-op sleep.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .migrators.record_migrator import migrate_record
from .models.config import MigrationConfig
from .models.record import RunReport, RunStatus
from .stores.base import STATUS_ANY, ContentStore
from .utils.errors import DEFAULT_REPORT_DIR, MigrationError, ensure_report_dir, report_error, report_ok
from .utils.reporter import Reporter

RESET_EVERY = 50
PAUSE_SECONDS = 1.0


@dataclass
class RunContext:
    """Per-run timing plus the store's cache reset hook."""

    reset_caches: Callable[[], None]
    time_fn: Callable[[], float] = time.perf_counter
    sleep_fn: Callable[[float], None] = time.sleep
    pause_seconds: float = PAUSE_SECONDS
    started_at: float = field(default=0.0)

    def __post_init__(self) -> None:
        if not self.started_at:
            self.started_at = self.time_fn()

    def elapsed(self) -> float:
        return self.time_fn() - self.started_at

    def pause(self) -> None:
        if self.pause_seconds > 0:
            self.sleep_fn(self.pause_seconds)


class PostTypeMigrationTool:
    """
    Migrates one page of posts from one post type to another.

    :param store: The content store to read from and write to.
    :param reporter: Receives progress ticks and summary lines.  Defaults
        to a plain in-memory :class:`Reporter`.
    :param report_dir: Directory for the JSON Lines outcome logs.
    :param reset_every: Cache reset cadence, in processed posts.
    """

    def __init__(
        self,
        store: ContentStore,
        reporter: Optional[Reporter] = None,
        *,
        report_dir: str = DEFAULT_REPORT_DIR,
        reset_every: int = RESET_EVERY,
    ) -> None:
        self.store = store
        self.reporter = reporter if reporter is not None else Reporter()
        self.report_dir = report_dir
        self.reset_every = max(1, reset_every)

    def new_context(self, **kwargs) -> RunContext:
        return RunContext(reset_caches=self.store.reset_caches, **kwargs)

    def _log_outcome(self, log_fn: Callable[..., Any], code: str, record: Any, detail: Any = None) -> None:
        # The record is already written at this point; a lost log line must not stop the page
        try:
            log_fn(code, record, detail, report_dir=self.report_dir)
        except OSError as e:
            self.reporter.warning(f"Could not write outcome log for item {record.id}: {e}")

    def run(self, config: MigrationConfig, context: Optional[RunContext] = None) -> RunReport:
        """
        Run the migration described by ``config``.

        :param config: Immutable run parameters.
        :param context: Timing and reset hook; a fresh one is created from
            the store when omitted.
        :return: A :class:`RunReport` with counters, status and elapsed time.
        :raises OSError: if the report directory cannot be created or written.
        """
        if context is None:
            context = self.new_context()
        reporter = self.reporter
        report = RunReport(config=config)
        # Fail before anything is written rather than halfway through the page
        ensure_report_dir(self.report_dir)

        records = self.store.query_by_category(
            config.source_category,
            limit=config.page_size,
            offset=config.offset,
            status=STATUS_ANY,
        )

        if not records:
            reporter.warning(f'No posts of post type "{config.source_category}" found')
            report.status = RunStatus.NO_MATCHING_RECORDS
            report.elapsed_seconds = context.elapsed()
            reporter.log(f"Total time elapsed: {report.elapsed_seconds:.3f}")
            return report

        counters = report.counters
        reporter.start_progress("Migrating...", len(records))
        for index, record in enumerate(records):
            record.category = config.target_category

            try:
                record_id = migrate_record(self.store, record, config, reporter)
            except MigrationError as e:
                counters.failed += 1
                reporter.warning(f'Error inserting item "{record.title}": {e.message}')
                report.record_failure(record, e.code, e.message)
                self._log_outcome(report_error, e.code, record, e)
            else:
                counters.migrated += 1
                self._log_outcome(
                    report_ok,
                    "DRY_RUN" if config.dry_run else "MIGRATED",
                    record,
                    {"id": record_id, "from": config.source_category},
                )

            reporter.tick()

            if index % self.reset_every == 0:
                reporter.log("Sleeping...")
                context.pause()
                context.reset_caches()
                report.resets += 1

        reporter.finish_progress()

        report.elapsed_seconds = context.elapsed()
        reporter.success(f"Successfully migrated {counters.migrated} posts")
        reporter.log(f"Total time elapsed: {report.elapsed_seconds:.3f}")
        if counters.failed > 0:
            reporter.warning(f"{counters.failed} failed to migrate")
            report.status = RunStatus.PARTIAL_FAILURE
        if config.dry_run:
            reporter.log("Dry run: no changes were written. Pass --dry-run=false to migrate.")
        return report
