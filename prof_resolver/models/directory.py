"""Directory entities: schools, instructor records and scored candidates."""

from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


PROFILE_URL_TEMPLATE = "https://www.ratemyprofessors.com/professor/{external_id}"


class School(BaseModel):
    """A school as returned by the directory's school search.

    Attributes:
        id: Opaque directory ID used to scope professor searches
        name: Display name of the school
        external_id: Numeric legacy ID used in public URLs (optional)
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    external_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("external_id", "legacyId")
    )


class SchoolRef(BaseModel):
    """School reference embedded in an instructor record."""

    id: str
    name: str


class DirectoryRecord(BaseModel):
    """Represents one instructor record from the ratings directory.

    Accepts both snake_case field names and the directory's camelCase wire
    names so GraphQL nodes can be validated directly.

    Attributes:
        id: Opaque directory ID
        first_name: Given name as listed in the directory
        last_name: Family name as listed in the directory
        department: Department label (free text, may be empty)
        school: School the record belongs to (optional)
        avg_rating: Average overall rating (0-5)
        avg_difficulty: Average difficulty (0-5)
        num_ratings: Number of ratings
        would_take_again_percent: Percent who would take again (-1 when unknown)
        external_id: Numeric legacy ID used in public URLs
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str = Field(
        default="", validation_alias=AliasChoices("first_name", "firstName")
    )
    last_name: str = Field(
        default="", validation_alias=AliasChoices("last_name", "lastName")
    )
    department: str = ""
    school: Optional[SchoolRef] = None
    avg_rating: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("avg_rating", "avgRating")
    )
    avg_difficulty: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("avg_difficulty", "avgDifficulty")
    )
    num_ratings: int = Field(
        default=0, validation_alias=AliasChoices("num_ratings", "numRatings")
    )
    would_take_again_percent: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices(
            "would_take_again_percent", "wouldTakeAgainPercent"
        ),
    )
    external_id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("external_id", "externalId", "legacyId"),
    )

    @field_validator("first_name", "last_name", "department", mode="before")
    @classmethod
    def coerce_missing_text(cls, v: Optional[str]) -> str:
        """Directory nodes sometimes carry null for text fields."""
        return v or ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def profile_url(self) -> Optional[str]:
        """Public profile link, or None when the record has no legacy ID."""
        if self.external_id is None:
            return None
        return PROFILE_URL_TEMPLATE.format(external_id=self.external_id)


class ScoredCandidate(DirectoryRecord):
    """DirectoryRecord annotated with a match score.

    The score is a raw sum of rule weights; it is only comparable with other
    candidates scored in the same search call.
    """

    match_score: float = 0.0

    @classmethod
    def from_record(cls, record: DirectoryRecord, match_score: float) -> "ScoredCandidate":
        return cls(**record.model_dump(), match_score=match_score)
