"""Family tree assembly and on-demand expansion.

FamilyTreeBuilder.build_tree resolves the four branches around a root person
concurrently and assembles them in a fixed order. The returned
FamilyTreeSession owns the tree and serializes expansion requests per
(node, direction), so two concurrent requests for the same branch fetch it
once and the second sees it as already expanded.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from loguru import logger

from genealink.config import Config, get_config
from genealink.genealogy.resolver import BRANCH_NAMES, RelationshipResolver, TraversalState
from genealink.models.tree import (
    BranchFailure,
    Direction,
    ExpansionResult,
    ExpansionStatus,
    FamilyTree,
    FamilyTreeNode,
)
from genealink.repositories.base import PersonRepository, StorageError

T = TypeVar("T")

# Order in which failure markers are reported on the root
BRANCH_ORDER = ("ancestors", "descendants", "siblings", "spouse")


class FamilyTreeSession:
    """A built tree plus the expansion operations that mutate it."""

    def __init__(
        self,
        tree: FamilyTree,
        resolver: RelationshipResolver,
        config: Config | None = None,
    ):
        self.tree = tree
        self.resolver = resolver
        self.config = config or resolver.config
        self._locks: dict[tuple[Direction, str], asyncio.Lock] = {}

    def to_dict(self) -> dict:
        return self.tree.to_dict()

    async def expand(
        self,
        node_id: str,
        direction: str | Direction,
        cancel_event: asyncio.Event | None = None,
    ) -> ExpansionResult:
        """Fetch one more generation above or below a node.

        Args:
            node_id: Id of a node already in the tree
            direction: ``"parents"`` or ``"children"``
            cancel_event: Optional event that stops the fetch early

        Returns:
            ExpansionResult; a node already expanded in ``direction`` is
            left untouched and reported as ALREADY_EXPANDED

        Raises:
            ValueError: If ``direction`` is not parents or children
        """
        direction = Direction.parse(direction)
        key = (direction, node_id)
        lock = self._locks.setdefault(key, asyncio.Lock())

        async with lock:
            result = await self._expand(node_id, direction, cancel_event)
            node = self.tree.find(node_id)
            if node is None or node.expansion.is_expanded(direction):
                # Settled: later requests are answered without a fetch
                self._locks.pop(key, None)
        return result

    async def _expand(
        self,
        node_id: str,
        direction: Direction,
        cancel_event: asyncio.Event | None,
    ) -> ExpansionResult:
        node = self.tree.find(node_id)
        if node is None:
            logger.warning(f"Cannot expand {node_id}: not in tree")
            return ExpansionResult(node_id, direction, ExpansionStatus.NOT_FOUND)

        if node.expansion.is_expanded(direction):
            logger.debug(f"{node_id} already expanded ({direction.value})")
            return ExpansionResult(
                node_id, direction, ExpansionStatus.ALREADY_EXPANDED, stats=self.tree.stats
            )

        path = frozenset(n.id for n in self.tree.path_to(node_id))
        branch = node.branch(direction)
        known = len(branch)

        state = TraversalState.from_config(self.config, cancel_event)
        await self.resolver.resolve_branch(node, direction, 1, state, path)

        added = branch[known:]
        stats = self.tree.refresh_stats()

        failure = node.failure_for(BRANCH_NAMES[direction])
        if failure is not None:
            return ExpansionResult(
                node_id, direction, ExpansionStatus.FAILED, stats=stats, failure=failure
            )

        logger.info(
            f"Expanded {node_id} ({direction.value}): {len(added)} added, "
            f"{stats.total_nodes} nodes in tree"
        )
        return ExpansionResult(
            node_id, direction, ExpansionStatus.EXPANDED, added=list(added), stats=stats
        )


class FamilyTreeBuilder:
    """Builds a FamilyTree around a root person.

    Usage:
        builder = FamilyTreeBuilder(repository)
        session = await builder.build_tree("42", generations=3)
        if session:
            await session.expand("17", "parents")
    """

    def __init__(
        self,
        repository: PersonRepository,
        config: Config | None = None,
        resolver: RelationshipResolver | None = None,
    ):
        self.repository = repository
        self.config = config or get_config()
        self.resolver = resolver or RelationshipResolver(repository, self.config)

    async def build_tree(
        self,
        person_id: str,
        generations: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> FamilyTreeSession | None:
        """Build the tree around ``person_id``.

        The root's parents sit at depth 1 and the ancestor branch recurses
        ``generations - 1`` more levels; the same holds for descendants.
        Siblings and spouse are resolved for the root only.

        Args:
            person_id: Identifier of the root record
            generations: Depth in each direction (default from config,
                clamped to ``max_generations``)
            cancel_event: Optional event that stops the build early

        Returns:
            FamilyTreeSession, or None when no record has this id

        Raises:
            ValueError: If ``generations`` is negative
            StorageError: If the root record itself cannot be fetched
        """
        if generations is None:
            generations = self.config.default_generations
        if generations < 0:
            raise ValueError(f"generations must be >= 0, got {generations}")
        if generations > self.config.max_generations:
            logger.debug(
                f"Clamping generations {generations} to {self.config.max_generations}"
            )
            generations = self.config.max_generations

        person = await self.repository.get_by_id(person_id)
        if person is None:
            logger.info(f"No record for {person_id}, no tree built")
            return None

        root = FamilyTreeNode(person=person)
        state = TraversalState.from_config(self.config, cancel_event)
        state.claim_node()
        path = frozenset({root.id})

        _, _, siblings, spouse = await asyncio.gather(
            self.resolver.resolve_branch(root, Direction.PARENTS, generations, state, path),
            self.resolver.resolve_branch(root, Direction.CHILDREN, generations, state, path),
            self._guarded(self.resolver.find_siblings(person), root, "siblings", []),
            self._guarded(self.resolver.find_spouse(person), root, "spouse", None),
        )
        root.siblings = siblings
        root.spouse = spouse
        root.failures.sort(key=lambda f: BRANCH_ORDER.index(f.branch))

        tree = FamilyTree(
            root=root,
            generations=generations,
            complete=state.stop_reason is None,
            stop_reason=state.stop_reason,
        )
        stats = tree.refresh_stats()

        logger.info(
            f"Built tree for {person_id}: {stats.total_nodes} nodes, "
            f"{stats.ancestor_generations} ancestor / "
            f"{stats.descendant_generations} descendant generations, "
            f"{stats.siblings_found} siblings"
            + ("" if tree.complete else f" (stopped: {tree.stop_reason})")
        )
        return FamilyTreeSession(tree, self.resolver, self.config)

    async def _guarded(
        self, lookup: Awaitable[T], node: FamilyTreeNode, branch: str, default: T
    ) -> T:
        try:
            return await lookup
        except StorageError as e:
            logger.warning(f"Could not resolve {branch} of {node.id}: {e}")
            node.failures.append(BranchFailure(branch, node.id, str(e)))
            return default
