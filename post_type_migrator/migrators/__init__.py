"""
Record level migration steps used by the migration job.
"""

from .record_migrator import ensure_term_assigned, migrate_record

__all__ = ["ensure_term_assigned", "migrate_record"]
