"""Resolution query and result models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from prof_resolver.models.directory import ScoredCandidate


MAX_RESULT_RECORDS = 5

# Label attached to matches found without school confinement
UNSCOPED_SCHOOL_LABEL = "Global Search"


class ErrorKind(str, Enum):
    """Why a resolution produced no records."""

    SCHOOL_UNRESOLVED = "SchoolUnresolved"
    PROFESSOR_NOT_FOUND = "ProfessorNotFound"
    DIRECTORY_UNAVAILABLE = "DirectoryUnavailable"
    SUPERSEDED = "Superseded"


class MatchConfidence(str, Enum):
    """How much the caller should trust the returned records.

    SCOPED: found inside the resolved school, filters applied normally
    DEPARTMENT_OVERRIDE: the only scoped candidate, kept despite a department mismatch
    UNSCOPED: found by a directory-wide search
    """

    SCOPED = "scoped"
    DEPARTMENT_OVERRIDE = "department_override"
    UNSCOPED = "unscoped"


class SearchContext(BaseModel):
    """One resolution query.

    Attributes:
        raw_name: Name as selected on the page (may carry an honorific)
        domain: Hostname of the originating page
        hinted_school_name: Best institution guess or manual override text
        department: Department hint (raw, normalized by the engine)
        course: Course code hint, e.g. "CSE 142"
        manual_override: True when hinted_school_name was typed by the user
    """

    raw_name: str
    domain: str = ""
    hinted_school_name: Optional[str] = None
    department: Optional[str] = None
    course: Optional[str] = None
    manual_override: bool = False


class ResolutionResult(BaseModel):
    """Structured outcome of one resolution; every engine path returns one.

    stale_school is set when the school binding the search was scoped to was
    replaced in the cache before the resolution finished.
    """

    success: bool
    records: list[ScoredCandidate] = Field(default_factory=list)
    resolved_school_label: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    confidence: Optional[MatchConfidence] = None
    stale_school: bool = False

    @field_validator("records")
    @classmethod
    def validate_record_count(cls, v: list[ScoredCandidate]) -> list[ScoredCandidate]:
        """Validate the result never carries more than MAX_RESULT_RECORDS."""
        if len(v) > MAX_RESULT_RECORDS:
            raise ValueError(
                f"A resolution returns at most {MAX_RESULT_RECORDS} records, got {len(v)}"
            )
        return v

    @property
    def is_unscoped(self) -> bool:
        return self.confidence == MatchConfidence.UNSCOPED

    @property
    def best_match(self) -> Optional[ScoredCandidate]:
        return self.records[0] if self.records else None
