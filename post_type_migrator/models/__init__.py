"""
Typed values passed between the CLI, the migration job and the stores.
"""

from .config import DEFAULT_PAGE_SIZE, MigrationConfig, parse_dry_run
from .record import Record, RunCounters, RunReport, RunStatus, Term

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MigrationConfig",
    "parse_dry_run",
    "Record",
    "RunCounters",
    "RunReport",
    "RunStatus",
    "Term",
]
