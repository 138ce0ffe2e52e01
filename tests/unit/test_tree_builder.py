"""Unit tests for FamilyTreeBuilder and FamilyTreeSession.

Covers tree assembly, the generation bound, idempotent and concurrent
expansion, cycle protection, partial failures and traversal limits.

Run with: pytest tests/unit/test_tree_builder.py -v
"""

import asyncio
import json

import pytest

from genealink.genealogy import FamilyTreeBuilder, RelationshipResolver
from genealink.models.person import PersonRecord, normalize_name
from genealink.models.tree import Direction, ExpansionStatus
from genealink.repositories import InMemoryPersonRepository, StorageError


def ids(nodes):
    return [node.id for node in nodes]


class BrokenRepository(InMemoryPersonRepository):
    """In-memory register whose selected lookups fail."""

    def __init__(self, persons, marriages, failing_name=None, fail_siblings=False,
                 fail_root=False, slow_name_lookups=False):
        super().__init__(persons, marriages)
        self.failing_name = normalize_name(failing_name)
        self.fail_siblings = fail_siblings
        self.fail_root = fail_root
        self.slow_name_lookups = slow_name_lookups

    async def get_by_id(self, person_id):
        if self.fail_root:
            raise StorageError("database is locked")
        return await super().get_by_id(person_id)

    async def find_by_name(self, name, **kwargs):
        if self.slow_name_lookups:
            await asyncio.sleep(1)
        if self.failing_name and normalize_name(name) == self.failing_name:
            raise StorageError("connection lost")
        return await super().find_by_name(name, **kwargs)

    async def find_exact_parents(self, father_name, mother_name, exclude_id):
        if self.fail_siblings:
            raise StorageError("connection lost")
        return await super().find_exact_parents(father_name, mother_name, exclude_id)


class MappedParentStrategy:
    name = "mapped"

    def __init__(self, parents_by_id):
        self.parents_by_id = parents_by_id

    async def find_parents(self, repository, person, limit):
        return [
            await repository.get_by_id(parent_id)
            for parent_id in self.parents_by_id.get(person.id, [])
        ]


@pytest.fixture
def builder(repository, config) -> FamilyTreeBuilder:
    return FamilyTreeBuilder(repository, config)


# =============================================================================
# BUILD
# =============================================================================


class TestBuildTree:
    """Test tree assembly around a root person."""

    @pytest.mark.asyncio
    async def test_full_tree(self, builder):
        session = await builder.build_tree("100", 2)
        tree = session.tree
        root = tree.root

        assert root.id == "100"
        assert ids(root.ancestors) == ["10", "11"]
        assert ids(root.ancestors[0].ancestors) == ["1", "2"]
        assert ids(root.descendants) == ["200"]
        assert [s.id for s in root.siblings] == ["101"]
        assert root.spouse.name == "Mballa Rose"
        assert tree.complete
        assert tree.stop_reason is None

    @pytest.mark.asyncio
    async def test_stats(self, builder):
        stats = (await builder.build_tree("100", 2)).tree.stats

        assert stats.total_nodes == 7
        assert stats.ancestor_generations == 2
        assert stats.descendant_generations == 1
        assert stats.siblings_found == 1
        assert stats.failed_branches == 0

    @pytest.mark.asyncio
    async def test_one_generation_has_no_grandparents(self, builder):
        tree = (await builder.build_tree("100", 1)).tree

        assert ids(tree.root.ancestors) == ["10", "11"]
        assert all(parent.ancestors == [] for parent in tree.root.ancestors)
        assert tree.stats.ancestor_generations == 1

    @pytest.mark.asyncio
    async def test_one_generation_has_no_grandchildren(self, builder):
        tree = (await builder.build_tree("10", 1)).tree

        assert ids(tree.root.descendants) == ["100", "101"]
        assert all(child.descendants == [] for child in tree.root.descendants)

    @pytest.mark.asyncio
    async def test_zero_generations(self, builder):
        tree = (await builder.build_tree("100", 0)).tree

        assert tree.root.ancestors == []
        assert tree.root.descendants == []
        assert [s.id for s in tree.root.siblings] == ["101"]
        assert not tree.root.expansion.parents_expanded

    @pytest.mark.asyncio
    async def test_default_generations_from_config(self, builder, config):
        tree = (await builder.build_tree("100")).tree
        assert tree.generations == config.default_generations

    @pytest.mark.asyncio
    async def test_generations_clamped(self, builder, config):
        tree = (await builder.build_tree("100", 50)).tree
        assert tree.generations == config.max_generations

    @pytest.mark.asyncio
    async def test_negative_generations_rejected(self, builder):
        with pytest.raises(ValueError):
            await builder.build_tree("100", -1)

    @pytest.mark.asyncio
    async def test_unknown_root(self, builder):
        assert await builder.build_tree("999", 2) is None

    @pytest.mark.asyncio
    async def test_root_without_parents(self, builder):
        tree = (await builder.build_tree("11", 2)).tree

        assert tree.root.ancestors == []
        assert tree.root.siblings == []
        assert tree.root.spouse is None

    @pytest.mark.asyncio
    async def test_deterministic(self, builder):
        first = (await builder.build_tree("100", 3)).to_dict()
        second = (await builder.build_tree("100", 3)).to_dict()

        assert first == second

    @pytest.mark.asyncio
    async def test_serializes_to_json(self, builder):
        data = (await builder.build_tree("100", 2)).to_dict()
        decoded = json.loads(json.dumps(data))

        assert decoded["root"]["id"] == "100"
        assert decoded["ancestors"][0]["full_name"] == "Eto Paul"
        assert decoded["spouse"]["marriage_date"] == "2012-07-14"
        assert decoded["stats"]["total_nodes"] == 7
        assert decoded["root"]["can_expand_parents"] is False


class TestBuildFailures:
    @pytest.mark.asyncio
    async def test_nested_branch_failure_keeps_the_rest(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, failing_name="Eto Jean")
        tree = (await FamilyTreeBuilder(repository, config).build_tree("100", 2)).tree

        paul = tree.root.ancestors[0]
        assert paul.ancestors == []
        assert paul.failures[0].branch == "ancestors"
        assert ids(tree.root.descendants) == ["200"]
        assert tree.stats.failed_branches == 1

    @pytest.mark.asyncio
    async def test_root_branch_failure(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, failing_name="Ngo Marie")
        tree = (await FamilyTreeBuilder(repository, config).build_tree("100", 2)).tree

        assert tree.root.ancestors == []
        assert [f.branch for f in tree.root.failures] == ["ancestors"]
        assert ids(tree.root.descendants) == ["200"]

    @pytest.mark.asyncio
    async def test_siblings_failure(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, fail_siblings=True)
        tree = (await FamilyTreeBuilder(repository, config).build_tree("100", 1)).tree

        assert tree.root.siblings == []
        assert [f.branch for f in tree.root.failures] == ["siblings"]
        assert tree.root.spouse.name == "Mballa Rose"

    @pytest.mark.asyncio
    async def test_root_fetch_failure_propagates(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, fail_root=True)

        with pytest.raises(StorageError):
            await FamilyTreeBuilder(repository, config).build_tree("100", 1)


class TestTraversalLimits:
    @pytest.mark.asyncio
    async def test_node_budget(self, repository, config):
        config.max_tree_nodes = 3
        tree = (await FamilyTreeBuilder(repository, config).build_tree("100", 3)).tree

        assert len(list(tree.root.iter_nodes())) == 3
        assert not tree.complete
        assert tree.stop_reason == "node_budget"

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, builder):
        event = asyncio.Event()
        event.set()

        tree = (await builder.build_tree("100", 3, cancel_event=event)).tree

        assert tree.root.ancestors == []
        assert tree.root.descendants == []
        assert tree.stop_reason == "cancelled"
        assert [s.id for s in tree.root.siblings] == ["101"]

    @pytest.mark.asyncio
    async def test_deadline(self, persons, marriages, config):
        config.traversal_timeout_seconds = 0.05
        repository = BrokenRepository(persons, marriages, slow_name_lookups=True)

        tree = (await FamilyTreeBuilder(repository, config).build_tree("100", 2)).tree

        assert tree.root.ancestors == []
        assert not tree.complete
        assert tree.stop_reason == "deadline"

    @pytest.mark.asyncio
    async def test_cycle_guard(self, config):
        repository = InMemoryPersonRepository(
            [PersonRecord(id="a", surname="Loop"), PersonRecord(id="b", surname="Back")]
        )
        resolver = RelationshipResolver(
            repository, config, parent_strategy=MappedParentStrategy({"a": ["b"], "b": ["a"]})
        )
        builder = FamilyTreeBuilder(repository, config, resolver=resolver)

        session = await builder.build_tree("a", 6)

        assert ids(session.tree.root.ancestors) == ["b"]
        assert session.tree.root.ancestors[0].ancestors == []
        assert session.tree.complete


# =============================================================================
# EXPAND
# =============================================================================


class TestExpand:
    """Test on-demand expansion of a held tree."""

    @pytest.mark.asyncio
    async def test_expand_parents(self, builder):
        session = await builder.build_tree("100", 1)

        result = await session.expand("10", "parents")

        assert result.status is ExpansionStatus.EXPANDED
        assert ids(result.added) == ["1", "2"]
        assert result.stats.ancestor_generations == 2
        assert session.tree.stats.total_nodes == 7

    @pytest.mark.asyncio
    async def test_expand_twice_is_idempotent(self, builder):
        session = await builder.build_tree("100", 1)

        await session.expand("10", Direction.PARENTS)
        result = await session.expand("10", Direction.PARENTS)

        assert result.status is ExpansionStatus.ALREADY_EXPANDED
        assert ids(session.tree.find("10").ancestors) == ["1", "2"]

    @pytest.mark.asyncio
    async def test_concurrent_expansions_fetch_once(self, builder):
        session = await builder.build_tree("100", 1)

        results = await asyncio.gather(
            session.expand("10", "parents"), session.expand("10", "parents")
        )

        assert sorted(r.status.value for r in results) == ["already_expanded", "expanded"]
        assert ids(session.tree.find("10").ancestors) == ["1", "2"]
        assert session._locks == {}

    @pytest.mark.asyncio
    async def test_lock_kept_while_branch_unsettled(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, failing_name="Eto Jean")
        session = await FamilyTreeBuilder(repository, config).build_tree("100", 1)

        await session.expand("10", "parents")

        assert list(session._locks) == [(Direction.PARENTS, "10")]

    @pytest.mark.asyncio
    async def test_expand_children(self, builder):
        session = await builder.build_tree("10", 0)

        result = await session.expand("10", "children")

        assert ids(result.added) == ["100", "101"]
        assert session.tree.root.expansion.children_expanded

    @pytest.mark.asyncio
    async def test_expand_leaf_with_no_relatives(self, builder):
        session = await builder.build_tree("100", 1)

        result = await session.expand("200", "children")

        assert result.status is ExpansionStatus.EXPANDED
        assert result.added == []
        assert session.tree.find("200").expansion.children_expanded

    @pytest.mark.asyncio
    async def test_expand_already_resolved_branch(self, builder):
        session = await builder.build_tree("100", 1)

        result = await session.expand("100", "parents")

        assert result.status is ExpansionStatus.ALREADY_EXPANDED

    @pytest.mark.asyncio
    async def test_expand_unknown_node(self, builder):
        session = await builder.build_tree("100", 1)

        result = await session.expand("999", "parents")

        assert result.status is ExpansionStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_expand_bad_direction(self, builder):
        session = await builder.build_tree("100", 1)

        with pytest.raises(ValueError):
            await session.expand("10", "cousins")

    @pytest.mark.asyncio
    async def test_expand_does_not_reenter_path(self, config):
        repository = InMemoryPersonRepository(
            [PersonRecord(id="a", surname="Loop"), PersonRecord(id="b", surname="Back")]
        )
        resolver = RelationshipResolver(
            repository, config, parent_strategy=MappedParentStrategy({"a": ["b"], "b": ["a"]})
        )
        session = await FamilyTreeBuilder(repository, config, resolver=resolver).build_tree("a", 1)

        result = await session.expand("b", "parents")

        assert result.added == []
        assert session.tree.find("b").ancestors == []

    @pytest.mark.asyncio
    async def test_failed_expansion_can_be_retried(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, failing_name="Eto Jean")
        session = await FamilyTreeBuilder(repository, config).build_tree("100", 1)

        result = await session.expand("10", "parents")

        assert result.status is ExpansionStatus.FAILED
        assert result.failure.message == "connection lost"
        assert not session.tree.find("10").expansion.parents_expanded

        repository.failing_name = ""
        retry = await session.expand("10", "parents")

        assert retry.status is ExpansionStatus.EXPANDED
        assert ids(retry.added) == ["1", "2"]
        assert session.tree.find("10").failures == []
        assert retry.stats.failed_branches == 0
        assert session.to_dict()["ancestors"][0]["failures"] == []

    @pytest.mark.asyncio
    async def test_repeated_failure_keeps_one_marker(self, persons, marriages, config):
        repository = BrokenRepository(persons, marriages, failing_name="Eto Jean")
        session = await FamilyTreeBuilder(repository, config).build_tree("100", 1)

        await session.expand("10", "parents")
        second = await session.expand("10", "parents")

        assert second.status is ExpansionStatus.FAILED
        assert len(session.tree.find("10").failures) == 1
        assert second.stats.failed_branches == 1
