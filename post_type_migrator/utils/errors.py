"""
Error types and structured outcome logging for the post type migration.

Per-record failures are raised as subclasses of :class:`MigrationError`
and caught by the migration job, which counts them and moves on to the
next record.  Every outcome is also appended to a JSON Lines file under
the report directory so that a run can be reviewed after the fact.

Two public logging functions are provided:

``report_error``
    Record a failure for a record.  The exception message (never its
    traceback) is serialized into the entry.

``report_ok``
    Record a successful migration for a record.  Additional key/value
    information can be attached via the ``extra`` parameter.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import errno
import json
import os
from typing import Any, Dict, Optional

# The keys include both error and success codes as the same lookup is used by
# :func:`report_error` and :func:`report_ok`.
ERRORS: Dict[str, str] = {
    "STORE_UPDATE_FAILED": "Failed to update post in the content store",
    "INVALID_RECORD": "Post was not reassigned to the target post type",
    "TERM_LOOKUP_FAILED": "Failed to look up taxonomy term",
    "TERM_CREATE_FAILED": "Failed to create taxonomy term",
    "TERM_ASSIGN_FAILED": "Failed to assign taxonomy term",
    "NO_MATCHING_RECORDS": "No posts of the source post type found",
    "MIGRATED": "Post migrated successfully",
    "DRY_RUN": "Post would be migrated (dry run)",
}

DEFAULT_REPORT_DIR = os.path.join("reports", "migration")
ERROR_LOG_NAME = "errors.jsonl"
OK_LOG_NAME = "success.jsonl"


class MigrationError(Exception):
    """Base class for failures that abort a single record's migration."""

    code = "MIGRATION_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreUpdateFailed(MigrationError):
    """The content store rejected the record update."""

    code = "STORE_UPDATE_FAILED"


class InvalidRecord(MigrationError):
    """The record's category does not match the target at persistence time."""

    code = "INVALID_RECORD"


class TermError(MigrationError):
    """Base class for taxonomy term failures.

    Term errors never fail the record they belong to; the record
    migrator downgrades them to warnings.
    """

    code = "TERM_ERROR"


class TermLookupFailed(TermError):
    code = "TERM_LOOKUP_FAILED"


class TermCreateFailed(TermError):
    code = "TERM_CREATE_FAILED"


class TermAssignFailed(TermError):
    code = "TERM_ASSIGN_FAILED"


class ConfigurationError(Exception):
    """Settings or command line input could not be turned into a run."""


def ensure_report_dir(report_dir: str) -> None:
    """Create ``report_dir`` and make sure outcome logs can be written to it.

    Raises :class:`OSError` when the path is a file or is not writable.
    """
    os.makedirs(report_dir, exist_ok=True)
    if not os.access(report_dir, os.W_OK | os.X_OK):
        raise PermissionError(errno.EACCES, "Report directory is not writable", report_dir)


def _write_jsonl(report_dir: str, name: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline."""
    os.makedirs(report_dir, exist_ok=True)
    with open(os.path.join(report_dir, name), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _entry(code: str, record: Any) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "id": getattr(record, "id", None),
        "title": getattr(record, "title", None),
        "post_type": getattr(record, "category", None),
    }


def report_error(
    code: str,
    record: Any,
    exc: Optional[BaseException] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> Dict[str, Any]:
    """Log an error event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    record:
        The record associated with the error.  Only ``id``, ``title`` and
        ``category`` are referenced.
    exc:
        Optional exception that triggered the error.  Its string form is
        stored under ``error``.
    report_dir:
        Directory holding the JSON Lines files.

    Returns
    -------
    dict
        The entry that was written.
    """
    entry = _entry(code, record)
    if exc is not None:
        entry["error"] = str(exc)
    _write_jsonl(report_dir, ERROR_LOG_NAME, entry)
    return entry


def report_ok(
    code: str,
    record: Any,
    extra: Optional[Dict[str, Any]] = None,
    *,
    report_dir: str = DEFAULT_REPORT_DIR,
) -> Dict[str, Any]:
    """Log a successful event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    record:
        The record associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the entry.
    report_dir:
        Directory holding the JSON Lines files.
    """
    entry = _entry(code, record)
    if extra:
        entry.update(extra)
    _write_jsonl(report_dir, OK_LOG_NAME, entry)
    return entry
