"""Query context analysis.

Classifies a raw search string before it reaches storage. Classification
runs in a fixed order:

1. Act number (``ACT-12345``, ``acte b42``): confidence 95, stops here.
2. Date: a ``dd/mm/yyyy`` date or a bare 4-digit year.
3. Place: the first gazetteer city contained in the query, with its region.
4. Name structure: at least two tokens longer than one character, or a
   recognised leading name pattern, makes the query a person name.
"""

import re

from loguru import logger

from genealink.config.constants import (
    CITY_REGIONS,
    COMMON_GIVEN_NAMES,
    NAME_LIKE_PREFIXES,
    NAME_PREFIXES,
    NAME_SUFFIXES,
    UNIDENTIFIED_REGION,
)
from genealink.models.search import ContextType, ExtractedFields, NamePattern, SearchContext

ACT_NUMBER_PATTERN = re.compile(r"^(act|acte)[-\s]*(\d+|[a-z]\d+)$", re.IGNORECASE)
DATE_PATTERN = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})|(\d{4})")

ACT_NUMBER_CONFIDENCE = 95
NAME_BASE_CONFIDENCE = 50
NAME_TOKEN_BONUS = 10
NAME_TOKEN_BONUS_CAP = 30
NAME_PREFIX_CONFIDENCE = 20
NAME_SUFFIX_CONFIDENCE = 15
NAME_GIVEN_CONFIDENCE = 10
NAME_MAX_CONFIDENCE = 95
UNKNOWN_WITH_HINTS_CONFIDENCE = 25


def name_tokens(term: str) -> list[str]:
    """Whitespace-separated tokens longer than one character."""
    return [word for word in term.split() if len(word) > 1]


def get_city_region(city: str) -> str:
    """Administrative region of a gazetteer city."""
    return CITY_REGIONS.get(city.lower(), UNIDENTIFIED_REGION)


def is_likely_person_name(term: str) -> bool:
    """Two or more real tokens, or a leading regional name pattern."""
    if len(name_tokens(term)) >= 2:
        return True
    return term.lower().startswith(NAME_LIKE_PREFIXES)


def analyze_name_pattern(term: str) -> NamePattern:
    words = name_tokens(term)
    lowered = term.lower()
    return NamePattern(
        word_count=len(words),
        has_prefix=lowered.startswith(NAME_PREFIXES),
        has_suffix=lowered.endswith(NAME_SUFFIXES),
        has_common_given_name=any(given in lowered for given in COMMON_GIVEN_NAMES),
        estimated_structure="firstname_lastname" if len(words) >= 2 else "single_name",
    )


def calculate_name_confidence(term: str) -> int:
    """Confidence that a query names a person, capped at 95."""
    pattern = analyze_name_pattern(term)

    confidence = NAME_BASE_CONFIDENCE
    confidence += min(NAME_TOKEN_BONUS_CAP, pattern.word_count * NAME_TOKEN_BONUS)
    if pattern.has_prefix:
        confidence += NAME_PREFIX_CONFIDENCE
    if pattern.has_suffix:
        confidence += NAME_SUFFIX_CONFIDENCE
    if pattern.has_common_given_name:
        confidence += NAME_GIVEN_CONFIDENCE

    return min(NAME_MAX_CONFIDENCE, confidence)


def generate_search_suggestions(context: SearchContext) -> list[str]:
    """Suggestions appropriate to the resolved context type."""
    if context.type is ContextType.PERSON_NAME:
        return [
            "Try a phonetic search",
            "Add birth place",
            "Add birth year",
        ]

    if context.type is ContextType.ACT_NUMBER:
        return [
            "Verify act number format",
            'Try without the "ACT" prefix',
        ]

    suggestions = []
    if context.extracted.city:
        suggestions.append(f"Search everyone born in {context.extracted.city}")
    if context.extracted.year:
        suggestions.append(f"Search births registered in {context.extracted.year}")
    suggestions.append("Use smart search")
    return suggestions


def analyze_search_context(search_term: str | None) -> SearchContext:
    """Classify a raw search string and extract structured hints.

    Args:
        search_term: Query as typed by the user

    Returns:
        SearchContext with type, confidence, extracted fields and suggestions.
        Blank input yields an ``unknown`` context with confidence 0.
    """
    context = SearchContext()
    term = (search_term or "").lower().strip()

    if not term:
        context.suggestions = generate_search_suggestions(context)
        return context

    act_match = ACT_NUMBER_PATTERN.match(term)
    if act_match:
        context.type = ContextType.ACT_NUMBER
        context.confidence = ACT_NUMBER_CONFIDENCE
        context.extracted.act_number = act_match.group(2)
        context.suggestions = generate_search_suggestions(context)
        logger.debug(f"Query '{term}' classified as act number {act_match.group(2)}")
        return context

    extracted: ExtractedFields = context.extracted

    date_match = DATE_PATTERN.search(term)
    if date_match:
        extracted.year = date_match.group(4) or date_match.group(3)
        if date_match.group(1) and date_match.group(2):
            extracted.day = date_match.group(1)
            extracted.month = date_match.group(2)

    for city in CITY_REGIONS:
        if city in term:
            extracted.city = city
            extracted.region = get_city_region(city)
            break

    if is_likely_person_name(term):
        context.type = ContextType.PERSON_NAME
        context.confidence = calculate_name_confidence(term)
        extracted.name_pattern = analyze_name_pattern(term)
    elif extracted.year or extracted.city:
        context.confidence = UNKNOWN_WITH_HINTS_CONFIDENCE

    context.suggestions = generate_search_suggestions(context)

    logger.debug(
        f"Query '{term}' classified as {context.type.value} "
        f"(confidence={context.confidence}, year={extracted.year}, city={extracted.city})"
    )
    return context
