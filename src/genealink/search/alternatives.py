"""Alternative query generation.

When a search returns nothing, reworded queries are proposed in descending
order of confidence: swapped name order, initial abbreviation, surname only,
and the original query completed with an extracted year or city.
"""

import re

from genealink.config.constants import HISTORY_CITIES
from genealink.models.search import (
    AlternativeKind,
    AlternativeQuery,
    ContextType,
    SearchContext,
    SmartSuggestion,
)

INVERSION_CONFIDENCE = 80
WITH_CONTEXT_CONFIDENCE = 75
INITIAL_CONFIDENCE = 70
LASTNAME_CONFIDENCE = 60

MAX_SMART_SUGGESTIONS = 8
MAX_PHONETIC_VARIATIONS = 3

# Spelling swaps common in transcribed French and English registers
PHONETIC_REPLACEMENTS = [
    ("ch", "tch"),
    ("tch", "ch"),
    ("c", "k"),
    ("k", "c"),
    ("ph", "f"),
    ("f", "ph"),
    ("ou", "u"),
    ("u", "ou"),
    ("ai", "è"),
    ("è", "ai"),
]

_YEAR_IN_HISTORY = re.compile(r"\b(?:19|20)\d{2}\b")


def generate_alternative_queries(
    original_query: str | None, context: SearchContext
) -> list[AlternativeQuery]:
    """Propose reworded queries for an empty result set.

    Args:
        original_query: Query as typed by the user
        context: Context produced for that query

    Returns:
        Alternatives sorted by descending confidence, without blanks,
        duplicates or repeats of the original query
    """
    query = (original_query or "").strip()
    if not query:
        return []

    words = query.lower().split()
    candidates: list[AlternativeQuery] = []

    if context.type is ContextType.PERSON_NAME and len(words) == 2:
        candidates.append(
            AlternativeQuery(
                f"{words[1]} {words[0]}", AlternativeKind.NAME_INVERSION, INVERSION_CONFIDENCE
            )
        )
        candidates.append(
            AlternativeQuery(
                f"{words[0]} {words[1][0]}",
                AlternativeKind.INITIAL_VARIATION,
                INITIAL_CONFIDENCE,
            )
        )
        candidates.append(
            AlternativeQuery(words[1], AlternativeKind.LASTNAME_ONLY, LASTNAME_CONFIDENCE)
        )

    if context.extracted.year:
        candidates.append(
            AlternativeQuery(
                f"{query} {context.extracted.year}",
                AlternativeKind.WITH_YEAR,
                WITH_CONTEXT_CONFIDENCE,
            )
        )

    if context.extracted.city:
        candidates.append(
            AlternativeQuery(
                f"{query} {context.extracted.city}",
                AlternativeKind.WITH_LOCATION,
                WITH_CONTEXT_CONFIDENCE,
            )
        )

    seen = {" ".join(words)}
    alternatives = []
    for candidate in candidates:
        key = " ".join(candidate.query.lower().split())
        if not key or key in seen:
            continue
        seen.add(key)
        alternatives.append(candidate)

    # sort is stable: equal confidences keep generation order
    return sorted(alternatives, key=lambda alt: alt.confidence, reverse=True)


def phonetic_respellings(text: str) -> list[str]:
    """Every respelling of ``text`` produced by one phonetic swap."""
    variations: list[str] = []
    for source, target in PHONETIC_REPLACEMENTS:
        if source in text.lower():
            variation = re.sub(re.escape(source), target, text, flags=re.IGNORECASE)
            if variation != text and variation not in variations:
                variations.append(variation)
    return variations


def generate_phonetic_variations(query: str) -> list[str]:
    """Respell a query with common phonetic swaps (at most three)."""
    return phonetic_respellings(query)[:MAX_PHONETIC_VARIATIONS]


def analyze_query_history(history: list[str]) -> tuple[list[str], list[str]]:
    """Distinct cities and years found in previous queries, three of each."""
    locations: list[str] = []
    years: list[str] = []

    for previous in history:
        for year in _YEAR_IN_HISTORY.findall(previous):
            if year not in years:
                years.append(year)
        lowered = previous.lower()
        for city in HISTORY_CITIES:
            if city in lowered and city not in locations:
                locations.append(city)

    return locations[:3], years[:3]


def generate_smart_suggestions(
    history: list[str] | None, current_query: str | None
) -> list[SmartSuggestion]:
    """Suggest completions from search history and spelling variants."""
    query = (current_query or "").strip()
    if not query:
        return []

    locations, years = analyze_query_history(history or [])
    suggestions: list[SmartSuggestion] = []

    if locations:
        suggestions.append(
            SmartSuggestion(
                f"{query} {locations[0]}", "location_suggestion", "Based on your previous searches"
            )
        )
    if years:
        suggestions.append(
            SmartSuggestion(f"{query} {years[0]}", "year_suggestion", "Frequently searched year")
        )

    if len(query) >= 3:
        for variation in generate_phonetic_variations(query):
            suggestions.append(
                SmartSuggestion(variation, "phonetic_suggestion", "Phonetic variation")
            )

    return suggestions[:MAX_SMART_SUGGESTIONS]
