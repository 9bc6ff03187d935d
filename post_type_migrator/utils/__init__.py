"""
Utility helpers used by the migration tool.

This subpackage exposes the error catalogue with its JSON Lines outcome
logs, the reporters and the term name helpers.
"""

from .errors import ERRORS, report_error, report_ok
from .reporter import ConsoleReporter, Reporter

__all__ = ["ERRORS", "report_error", "report_ok", "ConsoleReporter", "Reporter"]
