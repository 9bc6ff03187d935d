"""
Progress and summary output for migration runs.

The migration job talks to a :class:`Reporter` only, so the console
rendering can be swapped out (for example by a collecting reporter in
tests).  :class:`ConsoleReporter` draws a ``tqdm`` progress bar and
prints every message as ``[LEVEL] message``, appending the same line to
``migration.log`` inside the report directory.
"""

from __future__ import annotations

import os
from typing import List, Optional, Tuple

from tqdm import tqdm

from .errors import DEFAULT_REPORT_DIR


class Reporter:
    """Interface used by the migration job.

    The base implementation only keeps the messages in memory, which is
    enough for embedding the job in other tools.
    """

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []
        self.ticks = 0
        self.total: Optional[int] = None

    def start_progress(self, label: str, total: int) -> None:
        self.total = total
        self.ticks = 0

    def tick(self) -> None:
        self.ticks += 1

    def finish_progress(self) -> None:
        pass

    def log_message(self, message: str, level: str = "INFO") -> None:
        self.messages.append((level, message))

    def log(self, message: str) -> None:
        self.log_message(message, "INFO")

    def success(self, message: str) -> None:
        self.log_message(message, "SUCCESS")

    def warning(self, message: str) -> None:
        self.log_message(message, "WARNING")

    def lines(self, level: Optional[str] = None) -> List[str]:
        return [m for lvl, m in self.messages if level is None or lvl == level]


class ConsoleReporter(Reporter):
    """Terminal reporter with a progress bar and a plain-text log file."""

    def __init__(self, report_dir: str = DEFAULT_REPORT_DIR, *, log_name: str = "migration.log") -> None:
        super().__init__()
        self.report_dir = report_dir
        self.log_path = os.path.join(report_dir, log_name)
        self._bar: Optional[tqdm] = None

    def start_progress(self, label: str, total: int) -> None:
        super().start_progress(label, total)
        self._bar = tqdm(total=total, desc=label, unit="post")

    def tick(self) -> None:
        super().tick()
        if self._bar is not None:
            self._bar.update(1)

    def finish_progress(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def log_message(self, message: str, level: str = "INFO") -> None:
        super().log_message(message, level)
        line = f"[{level}] {message}"
        # tqdm.write keeps an open bar intact
        tqdm.write(line)
        os.makedirs(self.report_dir, exist_ok=True)
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")
