"""Family tree structures.

A FamilyTree is created when a tree is first built for a root person and is
mutated in place as the caller expands further branches. It is owned by the
FamilyTreeSession that built it and has no persistence.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from genealink.models.person import PersonRecord


class Direction(str, Enum):
    """Branch of a node that an expansion fetches."""

    PARENTS = "parents"
    CHILDREN = "children"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept a Direction or its string value.

        Raises:
            ValueError: If ``value`` names no direction
        """
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown direction {value!r}, expected 'parents' or 'children'"
            ) from None


@dataclass
class ExpansionState:
    """Which branches of a node have already been fetched."""

    parents_expanded: bool = False
    children_expanded: bool = False

    def is_expanded(self, direction: Direction) -> bool:
        if direction is Direction.PARENTS:
            return self.parents_expanded
        return self.children_expanded

    def mark(self, direction: Direction) -> None:
        if direction is Direction.PARENTS:
            self.parents_expanded = True
        else:
            self.children_expanded = True


@dataclass
class BranchFailure:
    """Marker left on a node whose branch lookup failed in storage."""

    branch: str  # "ancestors", "descendants", "siblings" or "spouse"
    person_id: str
    message: str


@dataclass
class SpouseInfo:
    """Spouse reference resolved from a marriage record."""

    name: str
    marriage_date: date | None = None
    marriage_place: str | None = None
    property_regime: str | None = None


@dataclass
class FamilyTreeNode:
    """A person plus the relatives resolved around them.

    Attributes:
        person: The record this node stands for
        ancestors: Parent nodes (at most two), each with its own ancestors
        descendants: Child nodes, each with its own descendants
        siblings: Records sharing both parent names (root only)
        spouse: Spouse reference from the marriage register (root only)
        expansion: Whether parents and children have been fetched
        failures: Branches that could not be resolved
    """

    person: PersonRecord
    ancestors: list["FamilyTreeNode"] = field(default_factory=list)
    descendants: list["FamilyTreeNode"] = field(default_factory=list)
    siblings: list[PersonRecord] = field(default_factory=list)
    spouse: SpouseInfo | None = None
    expansion: ExpansionState = field(default_factory=ExpansionState)
    failures: list[BranchFailure] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.person.id

    def branch(self, direction: Direction) -> list["FamilyTreeNode"]:
        """Return the node list that ``direction`` expands."""
        return self.ancestors if direction is Direction.PARENTS else self.descendants

    def failure_for(self, branch: str) -> BranchFailure | None:
        return next((f for f in self.failures if f.branch == branch), None)

    def clear_failures(self, branch: str) -> None:
        """Drop the failure markers left on ``branch``."""
        self.failures = [f for f in self.failures if f.branch != branch]

    def iter_nodes(self) -> Iterator["FamilyTreeNode"]:
        """Yield this node and every node below it, breadth first."""
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.ancestors)
            queue.extend(node.descendants)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "full_name": self.person.full_name,
            "person": self.person.model_dump(mode="json"),
            "ancestors": [n.to_dict() for n in self.ancestors],
            "descendants": [n.to_dict() for n in self.descendants],
            "siblings": [s.model_dump(mode="json") for s in self.siblings],
            "spouse": (
                {
                    "name": self.spouse.name,
                    "marriage_date": (
                        self.spouse.marriage_date.isoformat()
                        if self.spouse.marriage_date
                        else None
                    ),
                    "marriage_place": self.spouse.marriage_place,
                    "property_regime": self.spouse.property_regime,
                }
                if self.spouse
                else None
            ),
            "can_expand_parents": not self.expansion.parents_expanded,
            "can_expand_children": not self.expansion.children_expanded,
            "failures": [
                {"branch": f.branch, "person_id": f.person_id, "message": f.message}
                for f in self.failures
            ],
        }


@dataclass
class TreeStats:
    """Aggregate counts over a tree."""

    total_nodes: int = 0
    ancestor_generations: int = 0
    descendant_generations: int = 0
    siblings_found: int = 0
    failed_branches: int = 0


def _depth(node: FamilyTreeNode, direction: Direction) -> int:
    children = node.branch(direction)
    if not children:
        return 0
    return 1 + max(_depth(child, direction) for child in children)


def compute_tree_stats(root: FamilyTreeNode) -> TreeStats:
    """Count nodes, generation depth in both directions and siblings."""
    nodes = list(root.iter_nodes())
    return TreeStats(
        total_nodes=len(nodes) + len(root.siblings),
        ancestor_generations=_depth(root, Direction.PARENTS),
        descendant_generations=_depth(root, Direction.CHILDREN),
        siblings_found=len(root.siblings),
        failed_branches=sum(len(node.failures) for node in nodes),
    )


@dataclass
class FamilyTree:
    """A built tree: exactly one root plus its statistics.

    ``complete`` is False when the build stopped early because the node
    budget ran out, the deadline passed or the caller cancelled; whatever was
    resolved before that point is kept.
    """

    root: FamilyTreeNode
    generations: int
    stats: TreeStats = field(default_factory=TreeStats)
    complete: bool = True
    stop_reason: str | None = None

    def refresh_stats(self) -> TreeStats:
        self.stats = compute_tree_stats(self.root)
        return self.stats

    def find(self, person_id: str) -> FamilyTreeNode | None:
        """Return the first node (breadth first) for ``person_id``."""
        for node in self.root.iter_nodes():
            if node.id == person_id:
                return node
        return None

    def path_to(self, person_id: str) -> list[FamilyTreeNode]:
        """Return the nodes from the root down to ``person_id``, inclusive.

        Returns an empty list when the id is not in the tree.
        """
        stack: list[tuple[FamilyTreeNode, list[FamilyTreeNode]]] = [(self.root, [self.root])]
        while stack:
            node, path = stack.pop()
            if node.id == person_id:
                return path
            for child in reversed(node.ancestors + node.descendants):
                stack.append((child, path + [child]))
        return []

    def to_dict(self) -> dict[str, Any]:
        root = self.root.to_dict()
        branches = ("ancestors", "descendants", "siblings", "spouse")
        return {
            "root": {k: v for k, v in root.items() if k not in branches},
            "ancestors": root["ancestors"],
            "descendants": root["descendants"],
            "siblings": root["siblings"],
            "spouse": root["spouse"],
            "stats": {
                "total_nodes": self.stats.total_nodes,
                "ancestor_generations": self.stats.ancestor_generations,
                "descendant_generations": self.stats.descendant_generations,
                "siblings_found": self.stats.siblings_found,
                "failed_branches": self.stats.failed_branches,
            },
            "generations": self.generations,
            "complete": self.complete,
            "stop_reason": self.stop_reason,
        }


class ExpansionStatus(str, Enum):
    """Outcome of a single expansion request."""

    EXPANDED = "expanded"
    ALREADY_EXPANDED = "already_expanded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ExpansionResult:
    """Nodes merged into the tree by one expansion request."""

    node_id: str
    direction: Direction
    status: ExpansionStatus
    added: list[FamilyTreeNode] = field(default_factory=list)
    stats: TreeStats | None = None
    failure: BranchFailure | None = None
