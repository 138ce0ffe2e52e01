"""Data models for GeneaLink."""

from genealink.models.person import (
    MarriageRecord,
    PersonRecord,
    SearchFilters,
    Sex,
    normalize_name,
)
from genealink.models.search import (
    AlternativeKind,
    AlternativeQuery,
    CandidateMatch,
    ContextType,
    ExtractedFields,
    NamePattern,
    ScoreBreakdown,
    SearchContext,
    SearchResponse,
    SmartSuggestion,
)
from genealink.models.tree import (
    BranchFailure,
    Direction,
    ExpansionResult,
    ExpansionState,
    ExpansionStatus,
    FamilyTree,
    FamilyTreeNode,
    SpouseInfo,
    TreeStats,
    compute_tree_stats,
)

__all__ = [
    "AlternativeKind",
    "AlternativeQuery",
    "BranchFailure",
    "CandidateMatch",
    "ContextType",
    "Direction",
    "ExpansionResult",
    "ExpansionState",
    "ExpansionStatus",
    "ExtractedFields",
    "FamilyTree",
    "FamilyTreeNode",
    "MarriageRecord",
    "NamePattern",
    "PersonRecord",
    "ScoreBreakdown",
    "SearchContext",
    "SearchFilters",
    "SearchResponse",
    "Sex",
    "SmartSuggestion",
    "SpouseInfo",
    "TreeStats",
    "compute_tree_stats",
    "normalize_name",
]
