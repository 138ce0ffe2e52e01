"""Person search service.

Glues query classification, staged storage lookup (every term, any term,
phonetic respellings), ranking and recovery alternatives into a single
request/response call.
"""

import re
from datetime import datetime

from loguru import logger

from genealink.config import Config, get_config
from genealink.config.constants import CITY_REGIONS
from genealink.models.person import PersonRecord, SearchFilters
from genealink.models.search import (
    AlternativeQuery,
    ContextType,
    SearchContext,
    SearchResponse,
    SmartSuggestion,
)
from genealink.repositories.base import PersonRepository
from genealink.search.alternatives import (
    generate_alternative_queries,
    generate_smart_suggestions,
    phonetic_respellings,
)
from genealink.search.context_analyzer import analyze_search_context, name_tokens
from genealink.search.ranker import rank_candidates

_NON_NAME_TOKEN = re.compile(r"^[\d/\-]+$")


def search_terms(query: str) -> list[str]:
    """Name words of a query, without dates and known city names.

    Falls back to every word when nothing name-like remains, so a query
    such as ``"douala"`` still reaches storage.
    """
    words = name_tokens(query.lower())
    terms = [
        word
        for word in words
        if not _NON_NAME_TOKEN.match(word) and word not in CITY_REGIONS
    ]
    if not terms:
        terms = [word for word in words if not _NON_NAME_TOKEN.match(word)] or words
    return terms


def _merge(candidates: list[PersonRecord], found: list[PersonRecord]) -> int:
    """Append records not already in ``candidates``; return how many were new."""
    seen = {person.id for person in candidates}
    added = 0
    for person in found:
        if person.id not in seen:
            seen.add(person.id)
            candidates.append(person)
            added += 1
    return added


class SearchService:
    """Fuzzy person search over a PersonRepository.

    Usage:
        service = SearchService(repository)
        response = await service.search("ngo marie 1985")

        for match in response.results:
            print(match)
    """

    def __init__(self, repository: PersonRepository, config: Config | None = None):
        """Initialize the service.

        Args:
            repository: Storage collaborator for birth records
            config: Settings (uses the global configuration if not provided)
        """
        self.repository = repository
        self.config = config or get_config()

    async def search(
        self,
        query: str | None,
        filters: SearchFilters | None = None,
        now: datetime | None = None,
    ) -> SearchResponse:
        """Classify, fetch, rank and (when empty) suggest alternatives.

        Args:
            query: Query as typed by the user
            filters: Optional structured filters applied in storage
            now: Reference time for the recency dimension

        Returns:
            SearchResponse; ``alternatives`` is only filled when no
            candidate was found
        """
        query = (query or "").strip()
        context = analyze_search_context(query)
        response = SearchResponse(query=query, context=context)

        if not query:
            return response

        if filters is None:
            filters = SearchFilters(limit=self.config.search_result_limit)

        if context.type is ContextType.ACT_NUMBER:
            record = await self.repository.find_by_act_number(context.extracted.act_number)
            candidates = [record] if record and filters.accepts(record) else []
        else:
            candidates = await self.collect_candidates(search_terms(query), filters)

        response.results = rank_candidates(
            candidates,
            query,
            context,
            now=now,
            recency_window_days=self.config.recency_window_days,
        )[: self.config.max_search_results]

        if not response.results:
            response.alternatives = generate_alternative_queries(query, context)

        logger.info(
            f"Search '{query}' ({context.type.value}): "
            f"{len(candidates)} candidates, {len(response.results)} returned, "
            f"{len(response.alternatives)} alternatives"
        )
        return response

    async def collect_candidates(
        self, terms: list[str], filters: SearchFilters
    ) -> list[PersonRecord]:
        """Fetch candidates in widening stages, earlier stages first.

        1. records matching every term
        2. records matching any term, when stage 1 filled less than half
           of ``filters.limit`` and the query has several terms
        3. records matching a phonetic respelling of a term, when fewer
           than ``phonetic_search_threshold`` candidates were found so far

        Each stage is capped by storage; stages are merged by id in order.
        """
        candidates = await self.repository.search_candidates(terms, filters, match_all=True)
        stages = [f"all terms: {len(candidates)}"]

        if len(terms) > 1 and len(candidates) < filters.limit // 2:
            found = await self.repository.search_candidates(terms, filters)
            added = _merge(candidates, found)
            stages.append(f"any term: +{added}")

        if len(candidates) < self.config.phonetic_search_threshold:
            spellings = [
                spelling
                for term in terms
                if len(term) >= 3
                for spelling in phonetic_respellings(term)
                if spelling not in terms
            ]
            if spellings:
                found = await self.repository.search_candidates(spellings, filters)
                added = _merge(candidates, found)
                stages.append(f"phonetic ({', '.join(spellings)}): +{added}")

        logger.debug(f"Candidates for {terms}: {'; '.join(stages)}")
        return candidates

    def suggest_alternatives(
        self, query: str | None, context: SearchContext | None = None
    ) -> list[AlternativeQuery]:
        """Alternative queries for ``query`` (classifying it if needed)."""
        if context is None:
            context = analyze_search_context(query)
        return generate_alternative_queries(query, context)

    def smart_suggestions(
        self, history: list[str] | None, query: str | None
    ) -> list[SmartSuggestion]:
        """Completions for ``query`` drawn from previous searches."""
        return generate_smart_suggestions(history, query)
