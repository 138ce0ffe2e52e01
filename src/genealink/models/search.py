"""Result types for person search.

Every search request produces a SearchContext and a list of CandidateMatch
objects. These are created per request and discarded once the response is
sent.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from genealink.models.person import PersonRecord


class ContextType(str, Enum):
    """Classification of a raw query string."""

    ACT_NUMBER = "act_number"
    PERSON_NAME = "person_name"
    UNKNOWN = "unknown"


@dataclass
class NamePattern:
    """Token structure of a query that looks like a person name."""

    word_count: int
    has_prefix: bool
    has_suffix: bool
    has_common_given_name: bool
    estimated_structure: str  # "firstname_lastname" or "single_name"


@dataclass
class ExtractedFields:
    """Structured hints pulled out of a query string."""

    act_number: str | None = None
    year: str | None = None
    day: str | None = None
    month: str | None = None
    city: str | None = None
    region: str | None = None
    name_pattern: NamePattern | None = None


@dataclass
class SearchContext:
    """Structured interpretation of a raw search string."""

    type: ContextType = ContextType.UNKNOWN
    confidence: int = 0
    extracted: ExtractedFields = field(default_factory=ExtractedFields)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


class AlternativeKind(str, Enum):
    """How an alternative query was derived from the original."""

    NAME_INVERSION = "name_inversion"
    INITIAL_VARIATION = "initial_variation"
    LASTNAME_ONLY = "lastname_only"
    WITH_YEAR = "with_year"
    WITH_LOCATION = "with_location"


@dataclass
class AlternativeQuery:
    """A reworded query proposed when a search comes back empty."""

    query: str
    kind: AlternativeKind
    confidence: int


@dataclass
class SmartSuggestion:
    """A query suggestion derived from history or spelling variation."""

    text: str
    kind: str  # "location_suggestion", "year_suggestion", "phonetic_suggestion"
    reason: str


@dataclass
class ScoreBreakdown:
    """Weighted contribution of each ranking dimension."""

    name_match: float = 0.0
    context_match: float = 0.0
    data_quality: float = 0.0
    family_completeness: float = 0.0
    recency: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.name_match
            + self.context_match
            + self.data_quality
            + self.family_completeness
            + self.recency
        )


@dataclass
class CandidateMatch:
    """A candidate record scored against a search term.

    Attributes:
        person: The ranked record
        total_score: Weighted total, 0-100
        breakdown: Weighted score per dimension
        highlights: Human-readable reasons the candidate scored well
    """

    person: PersonRecord
    total_score: int
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    highlights: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.person} (score: {self.total_score})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "person": self.person.model_dump(mode="json"),
            "full_name": self.person.full_name,
            "total_score": self.total_score,
            "breakdown": asdict(self.breakdown),
            "highlights": list(self.highlights),
        }


@dataclass
class SearchResponse:
    """Context, ranked results and recovery alternatives for one query."""

    query: str
    context: SearchContext
    results: list[CandidateMatch] = field(default_factory=list)
    alternatives: list[AlternativeQuery] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "context": self.context.to_dict(),
            "results": [r.to_dict() for r in self.results],
            "alternatives": [
                {"query": a.query, "type": a.kind.value, "confidence": a.confidence}
                for a in self.alternatives
            ],
        }
