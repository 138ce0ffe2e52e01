"""Multi-criteria result ranking.

Each candidate returned by storage is scored on five weighted dimensions:

1. **Name match** (40%): name similarity between the query and the
   candidate's full name.
2. **Context match** (25%): birth year equal to the extracted year, birth
   place containing the extracted city.
3. **Data quality** (20%): which of birth date, birth place, parent names and
   act number are recorded.
4. **Family completeness** (10%): 10 with both parent names, 5 with one.
5. **Recency** (5%): linear decay over the window since the record was last
   updated.
"""

from datetime import datetime

from genealink import SIMILARITY_STRONG
from genealink.matching.similarity import name_similarity, round_half_up
from genealink.models.person import PersonRecord
from genealink.models.search import CandidateMatch, ScoreBreakdown, SearchContext

RANKING_WEIGHTS = {
    "name": 0.40,
    "context": 0.25,
    "quality": 0.20,
    "family": 0.10,
    "recency": 0.05,
}

assert abs(sum(RANKING_WEIGHTS.values()) - 1.0) < 0.001, "Ranking weights must sum to 1.0"

CONTEXT_YEAR_POINTS = 25
CONTEXT_CITY_POINTS = 25

QUALITY_BIRTH_DATE_POINTS = 25
QUALITY_BIRTH_PLACE_POINTS = 20
QUALITY_FATHER_POINTS = 25
QUALITY_MOTHER_POINTS = 25
QUALITY_ACT_NUMBER_POINTS = 5

FAMILY_BOTH_PARENTS_POINTS = 10
FAMILY_ONE_PARENT_POINTS = 5

RECENCY_POINTS = 5
DEFAULT_RECENCY_WINDOW_DAYS = 365


def context_points(person: PersonRecord, context: SearchContext) -> int:
    points = 0
    year = context.extracted.year
    if year and person.birth_year is not None and str(person.birth_year) == year:
        points += CONTEXT_YEAR_POINTS

    city = context.extracted.city
    if city and person.birth_place and city.lower() in person.birth_place.lower():
        points += CONTEXT_CITY_POINTS
    return points


def quality_points(person: PersonRecord) -> int:
    points = 0
    if person.birth_date:
        points += QUALITY_BIRTH_DATE_POINTS
    if person.birth_place:
        points += QUALITY_BIRTH_PLACE_POINTS
    if person.father_name:
        points += QUALITY_FATHER_POINTS
    if person.mother_name:
        points += QUALITY_MOTHER_POINTS
    if person.act_number:
        points += QUALITY_ACT_NUMBER_POINTS
    return points


def family_points(person: PersonRecord) -> int:
    if person.father_name and person.mother_name:
        return FAMILY_BOTH_PARENTS_POINTS
    if person.father_name or person.mother_name:
        return FAMILY_ONE_PARENT_POINTS
    return 0


def recency_points(
    person: PersonRecord,
    now: datetime | None = None,
    window_days: int = DEFAULT_RECENCY_WINDOW_DAYS,
) -> float:
    """Points decaying linearly from 5 to 0 across the recency window."""
    updated = person.last_updated
    if updated is None:
        return 0.0

    if now is None:
        now = datetime.now(updated.tzinfo)
    elif (now.tzinfo is None) != (updated.tzinfo is None):
        now = now.replace(tzinfo=updated.tzinfo)

    days_since = (now - updated).total_seconds() / 86400
    return max(0.0, min(1.0, (window_days - days_since) / window_days)) * RECENCY_POINTS


def build_highlights(
    name: float, context: float, quality: float, family: float, recency: float
) -> list[str]:
    """Label the dimensions on which a candidate scored well (unweighted)."""
    highlights = []
    if name > SIMILARITY_STRONG:
        highlights.append("Strong name match")
    if context >= CONTEXT_YEAR_POINTS:
        highlights.append("Matching context")
    if quality > 75:
        highlights.append("Complete record")
    if family >= FAMILY_ONE_PARENT_POINTS:
        highlights.append("Parentage recorded")
    if recency >= RECENCY_POINTS / 2:
        highlights.append("Recently updated")
    return highlights


def score_candidate(
    person: PersonRecord,
    search_term: str | None,
    context: SearchContext,
    now: datetime | None = None,
    recency_window_days: int = DEFAULT_RECENCY_WINDOW_DAYS,
) -> CandidateMatch:
    """Score one candidate record against the search term and its context.

    Args:
        person: Candidate record from storage
        search_term: Query as typed by the user
        context: Context produced for that query
        now: Reference time for the recency dimension (default: current time)
        recency_window_days: Length of the recency decay window

    Returns:
        CandidateMatch with a 0-100 total, weighted breakdown and highlights
    """
    name = name_similarity(search_term, person.full_name)
    ctx = context_points(person, context)
    quality = quality_points(person)
    family = family_points(person)
    recency = recency_points(person, now, recency_window_days)

    breakdown = ScoreBreakdown(
        name_match=name * RANKING_WEIGHTS["name"],
        context_match=ctx * RANKING_WEIGHTS["context"],
        data_quality=quality * RANKING_WEIGHTS["quality"],
        family_completeness=family * RANKING_WEIGHTS["family"],
        recency=recency * RANKING_WEIGHTS["recency"],
    )

    return CandidateMatch(
        person=person,
        total_score=max(0, min(100, round_half_up(breakdown.total))),
        breakdown=breakdown,
        highlights=build_highlights(name, ctx, quality, family, recency),
    )


def rank_candidates(
    persons: list[PersonRecord],
    search_term: str | None,
    context: SearchContext,
    now: datetime | None = None,
    recency_window_days: int = DEFAULT_RECENCY_WINDOW_DAYS,
) -> list[CandidateMatch]:
    """Score every candidate and sort by descending total.

    Ties keep the order storage returned them in.
    """
    matches = [
        score_candidate(person, search_term, context, now, recency_window_days)
        for person in persons
    ]
    matches.sort(key=lambda match: match.total_score, reverse=True)
    return matches
