from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .config import MigrationConfig


class Record(BaseModel):
    """A post as seen by the migration job.

    ``category`` is the post type; it is the only field the job changes.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    id: int = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    title: str = ""
    status: str = "publish"


class Term(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1)
    slug: str
    taxonomy: str = Field(..., min_length=1)


class RunStatus(str, Enum):
    COMPLETED = "completed"
    PARTIAL_FAILURE = "partial_failure"
    NO_MATCHING_RECORDS = "no_matching_records"


@dataclass
class RunCounters:
    migrated: int = 0
    failed: int = 0


@dataclass
class RunReport:
    """Outcome of one invocation of the migration job."""

    config: MigrationConfig
    status: RunStatus = RunStatus.COMPLETED
    counters: RunCounters = field(default_factory=RunCounters)
    elapsed_seconds: float = 0.0
    failures: List[Dict[str, Any]] = field(default_factory=list)
    resets: int = 0

    @property
    def migrated(self) -> int:
        return self.counters.migrated

    @property
    def failed(self) -> int:
        return self.counters.failed

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    def record_failure(self, record: Record, code: str, message: str) -> None:
        self.failures.append(
            {"id": record.id, "title": record.title, "code": code, "message": message}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "status": self.status.value,
            "migrated": self.migrated,
            "failed": self.failed,
            "dry_run": self.dry_run,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "resets": self.resets,
            "failures": list(self.failures),
        }
