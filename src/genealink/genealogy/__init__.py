"""Relationship resolution and family tree assembly."""

from genealink.genealogy.resolver import RelationshipResolver, TraversalState
from genealink.genealogy.strategies import (
    ChildMatchStrategy,
    EarlierBornNamesakeStrategy,
    LaterBornChildStrategy,
    ParentMatchStrategy,
)
from genealink.genealogy.tree_builder import FamilyTreeBuilder, FamilyTreeSession

__all__ = [
    "ChildMatchStrategy",
    "EarlierBornNamesakeStrategy",
    "FamilyTreeBuilder",
    "FamilyTreeSession",
    "LaterBornChildStrategy",
    "ParentMatchStrategy",
    "RelationshipResolver",
    "TraversalState",
]
