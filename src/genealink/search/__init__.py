"""Query classification, candidate ranking and search recovery."""

from genealink.search.alternatives import (
    generate_alternative_queries,
    generate_phonetic_variations,
    generate_smart_suggestions,
)
from genealink.search.context_analyzer import analyze_search_context
from genealink.search.ranker import rank_candidates, score_candidate
from genealink.search.service import SearchService

__all__ = [
    "SearchService",
    "analyze_search_context",
    "generate_alternative_queries",
    "generate_phonetic_variations",
    "generate_smart_suggestions",
    "rank_candidates",
    "score_candidate",
]
