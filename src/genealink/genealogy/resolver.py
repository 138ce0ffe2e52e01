"""Relationship resolution over the birth and marriage registers.

RelationshipResolver turns a person into FamilyTreeNode branches by asking a
PersonRepository for plausible parents, children, siblings and a spouse.
Parent and child candidates come from pluggable strategies (see
strategies.py); the resolver owns the traversal:

- recursion depth is bounded by the requested number of generations
- a person already on the current root-to-node path is never re-entered,
  so a cyclic register cannot loop forever
- a TraversalState caps the number of nodes and, optionally, wall-clock time
  and reacts to a cancel event; when any of these trips the traversal stops
  and the partial result is kept
- a StorageError in one branch is recorded on that node as a BranchFailure
  and sibling branches carry on
"""

import asyncio
from dataclasses import dataclass

from loguru import logger

from genealink.config import Config, get_config
from genealink.genealogy.strategies import (
    ChildMatchStrategy,
    EarlierBornNamesakeStrategy,
    LaterBornChildStrategy,
    ParentMatchStrategy,
)
from genealink.models.person import PersonRecord
from genealink.models.tree import BranchFailure, Direction, FamilyTreeNode, SpouseInfo
from genealink.repositories.base import PersonRepository, StorageError

BRANCH_NAMES = {Direction.PARENTS: "ancestors", Direction.CHILDREN: "descendants"}


@dataclass
class TraversalState:
    """Shared limits for one build or expansion request.

    Attributes:
        node_budget: Maximum number of nodes this request may create
        deadline: Event-loop time after which no new lookup starts
        cancel_event: Set by the caller to stop the traversal early
        nodes_created: Nodes created so far
        stop_reason: Why the traversal stopped early, None while running
    """

    node_budget: int
    deadline: float | None = None
    cancel_event: asyncio.Event | None = None
    nodes_created: int = 0
    stop_reason: str | None = None

    @classmethod
    def from_config(
        cls, config: Config, cancel_event: asyncio.Event | None = None
    ) -> "TraversalState":
        deadline = None
        if config.traversal_timeout_seconds is not None:
            deadline = asyncio.get_running_loop().time() + config.traversal_timeout_seconds
        return cls(
            node_budget=config.max_tree_nodes,
            deadline=deadline,
            cancel_event=cancel_event,
        )

    def remaining_time(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - asyncio.get_running_loop().time()

    def should_stop(self) -> bool:
        """Check the cancel event and deadline, recording the first reason hit."""
        if self.stop_reason is not None:
            return True
        if self.cancel_event is not None and self.cancel_event.is_set():
            self.stop_reason = "cancelled"
        elif self.deadline is not None and self.remaining_time() <= 0:
            self.stop_reason = "deadline"
        return self.stop_reason is not None

    def claim_node(self) -> bool:
        """Reserve one node from the budget; False once it is spent."""
        if self.nodes_created >= self.node_budget:
            self.stop_reason = self.stop_reason or "node_budget"
            return False
        self.nodes_created += 1
        return True


class RelationshipResolver:
    """Resolves ancestors, descendants, siblings and spouse for a person.

    Usage:
        resolver = RelationshipResolver(repository)
        parents = await resolver.resolve_ancestors("42", generations=2)
    """

    def __init__(
        self,
        repository: PersonRepository,
        config: Config | None = None,
        parent_strategy: ParentMatchStrategy | None = None,
        child_strategy: ChildMatchStrategy | None = None,
    ):
        self.repository = repository
        self.config = config or get_config()
        self.parent_strategy = parent_strategy or EarlierBornNamesakeStrategy()
        self.child_strategy = child_strategy or LaterBornChildStrategy()

    # =========================================================================
    # PUBLIC LOOKUPS
    # =========================================================================

    async def resolve_ancestors(
        self,
        person_id: str,
        generations: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[FamilyTreeNode]:
        """Parent nodes of ``person_id`` down to ``generations`` levels.

        Returns an empty list for an unknown id or ``generations <= 0``.
        """
        return await self._resolve_from_id(
            person_id, Direction.PARENTS, generations, cancel_event
        )

    async def resolve_descendants(
        self,
        person_id: str,
        generations: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[FamilyTreeNode]:
        """Child nodes of ``person_id`` down to ``generations`` levels.

        Returns an empty list for an unknown id or ``generations <= 0``.
        """
        return await self._resolve_from_id(
            person_id, Direction.CHILDREN, generations, cancel_event
        )

    async def resolve_siblings(self, person_id: str) -> list[PersonRecord]:
        person = await self.repository.get_by_id(person_id)
        if person is None:
            return []
        return await self.find_siblings(person)

    async def resolve_spouse(self, person_id: str) -> SpouseInfo | None:
        person = await self.repository.get_by_id(person_id)
        if person is None:
            return None
        return await self.find_spouse(person)

    async def find_siblings(self, person: PersonRecord) -> list[PersonRecord]:
        """Records with exactly the same two parent names, excluding ``person``.

        A person missing either parent name has no siblings.
        """
        if not person.has_both_parents:
            return []
        records = await self.repository.find_exact_parents(
            person.father_name, person.mother_name, exclude_id=person.id
        )
        return [record for record in records if record.id != person.id]

    async def find_spouse(self, person: PersonRecord) -> SpouseInfo | None:
        """Spouse named on the first marriage record mentioning ``person``."""
        if not person.full_name:
            return None
        marriage = await self.repository.find_spouse(person.full_name)
        if marriage is None:
            return None
        name = marriage.other_spouse(person.full_name)
        if not name:
            return None
        return SpouseInfo(
            name=name,
            marriage_date=marriage.marriage_date,
            marriage_place=marriage.marriage_place,
            property_regime=marriage.property_regime,
        )

    # =========================================================================
    # TRAVERSAL
    # =========================================================================

    async def resolve_branch(
        self,
        node: FamilyTreeNode,
        direction: Direction,
        generations: int,
        state: TraversalState,
        path: frozenset[str],
    ) -> None:
        """Fill ``node``'s branch in ``direction`` recursively, in place.

        Args:
            node: Node whose ancestors or descendants are resolved
            direction: Which branch to resolve
            generations: Levels still allowed below ``node``
            state: Shared budget, deadline and cancel event
            path: Ids from the root down to ``node``, inclusive

        Relatives already on ``path`` or already in the branch are skipped.
        The node is marked expanded in ``direction`` only when its lookup
        succeeded and every relative found was merged.
        """
        if generations <= 0 or state.should_stop():
            return

        branch = BRANCH_NAMES[direction]
        try:
            relatives = await self._lookup(node.person, direction, state)
        except StorageError as e:
            logger.warning(f"Could not resolve {branch} of {node.id}: {e}")
            node.clear_failures(branch)
            node.failures.append(BranchFailure(branch, node.id, str(e)))
            return
        except TimeoutError:
            state.stop_reason = state.stop_reason or "deadline"
            logger.warning(f"Deadline reached while resolving {direction.value} of {node.id}")
            return

        # A successful lookup supersedes an earlier failed attempt
        node.clear_failures(branch)

        existing = {child.id for child in node.branch(direction)}
        new_nodes: list[FamilyTreeNode] = []
        truncated = False

        for relative in relatives:
            if relative.id in path or relative.id == node.id:
                logger.debug(f"Skipping {relative.id}: already on the path to {node.id}")
                continue
            if relative.id in existing:
                continue
            if not state.claim_node():
                truncated = True
                break
            child = FamilyTreeNode(person=relative)
            node.branch(direction).append(child)
            existing.add(relative.id)
            new_nodes.append(child)

        if not truncated:
            node.expansion.mark(direction)

        # Results are appended before recursing, so sibling order is fixed
        # regardless of which sub-branch finishes first
        await asyncio.gather(
            *(
                self.resolve_branch(
                    child, direction, generations - 1, state, path | {child.id}
                )
                for child in new_nodes
            )
        )

    async def _lookup(
        self, person: PersonRecord, direction: Direction, state: TraversalState
    ) -> list[PersonRecord]:
        if direction is Direction.PARENTS:
            lookup = self.parent_strategy.find_parents(
                self.repository, person, self.config.max_ancestors_per_generation
            )
        else:
            lookup = self.child_strategy.find_children(
                self.repository, person, self.config.max_descendants_per_generation
            )

        remaining = state.remaining_time()
        if remaining is None:
            return await lookup
        return await asyncio.wait_for(lookup, timeout=max(remaining, 0))

    async def _resolve_from_id(
        self,
        person_id: str,
        direction: Direction,
        generations: int,
        cancel_event: asyncio.Event | None,
    ) -> list[FamilyTreeNode]:
        if generations <= 0:
            return []
        person = await self.repository.get_by_id(person_id)
        if person is None:
            logger.debug(f"No record for {person_id}")
            return []

        anchor = FamilyTreeNode(person=person)
        state = TraversalState.from_config(self.config, cancel_event)
        await self.resolve_branch(
            anchor, direction, generations, state, frozenset({person.id})
        )
        if anchor.failures:
            # Nothing was resolved at all; surface the storage error
            raise StorageError(anchor.failures[0].message)
        return anchor.branch(direction)
