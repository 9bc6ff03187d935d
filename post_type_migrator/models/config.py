from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.terms import normalize_term_name

DEFAULT_PAGE_SIZE = 150


def parse_dry_run(value: Optional[str]) -> bool:
    """Dry run stays on unless ``value`` is exactly the string ``"false"``.

    ``"FALSE"``, ``"0"``, ``"no"`` and a missing value all keep dry run
    enabled; only the literal lowercase word turns it off.
    """
    return not (isinstance(value, str) and value == "false")


class MigrationConfig(BaseModel):
    """Immutable parameters of one migration run."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    source_category: str = Field(..., min_length=1, alias="from")
    target_category: str = Field(..., min_length=1, alias="to")
    taxonomy: Optional[str] = None
    term: Optional[str] = None
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, alias="per_page")
    offset: int = Field(0, ge=0)
    dry_run: bool = True

    @field_validator("source_category", "target_category", "taxonomy", "term", mode="before")
    @classmethod
    def _sanitize_text(cls, v: Any):
        if v is None:
            return v
        if not isinstance(v, str):
            return v
        cleaned = normalize_term_name(v)
        return cleaned

    @field_validator("taxonomy", "term")
    @classmethod
    def _empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode="after")
    def _taxonomy_and_term_pair(self) -> "MigrationConfig":
        if bool(self.taxonomy) != bool(self.term):
            raise ValueError("--taxonomy and --term must be given together")
        return self

    @property
    def assigns_term(self) -> bool:
        return bool(self.taxonomy and self.term)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
