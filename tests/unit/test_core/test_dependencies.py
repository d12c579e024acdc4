"""
Unit tests for htaguard.core.dependencies module.
"""

from htaguard.core.dependencies import (
    dependency_edges,
    find_cyclic_nodes,
    has_circular_dependency,
)
from htaguard.core.tree import build_node_index, coerce_tree


def _index(*nodes):
    forest = coerce_tree(list(nodes))
    return forest, build_node_index(forest)


class TestFindCyclicNodes:
    """Tests for the global cycle scan."""

    def test_acyclic_chain(self, make_node):
        """A straight chain has no cyclic nodes."""
        _, index = _index(
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["c"]),
            make_node("c"),
        )
        assert find_cyclic_nodes(index) == set()

    def test_diamond_is_not_a_cycle(self, make_node):
        """Two paths to the same node are not a cycle."""
        _, index = _index(
            make_node("a", dependencies=["b", "c"]),
            make_node("b", dependencies=["d"]),
            make_node("c", dependencies=["d"]),
            make_node("d"),
        )
        assert find_cyclic_nodes(index) == set()

    def test_two_node_cycle(self, make_node):
        _, index = _index(
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["a"]),
        )
        assert find_cyclic_nodes(index) == {"a", "b"}

    def test_self_dependency(self, make_node):
        _, index = _index(make_node("a", dependencies=["a"]), make_node("b"))
        assert find_cyclic_nodes(index) == {"a"}

    def test_nodes_reaching_a_cycle_are_marked(self, make_node):
        """Upstream nodes that walk into a cycle are marked; downstream ones are not."""
        _, index = _index(
            make_node("entry", dependencies=["a"]),
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["a", "leaf"]),
            make_node("leaf"),
        )
        assert find_cyclic_nodes(index) == {"entry", "a", "b"}

    def test_visit_order_does_not_matter(self, make_node):
        """A node whose dependency was finished earlier still picks up the taint."""
        _, index = _index(
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["a"]),
            make_node("late", dependencies=["b"]),
        )
        assert find_cyclic_nodes(index) == {"a", "b", "late"}

    def test_dangling_dependencies_ignored(self, make_node):
        _, index = _index(make_node("a", dependencies=["ghost"]))
        assert find_cyclic_nodes(index) == set()

    def test_long_chain_does_not_recurse(self, make_node):
        """Chains far longer than the recursion limit are handled."""
        count = 5000
        nodes = [
            make_node(f"n{i}", dependencies=[f"n{i + 1}"] if i + 1 < count else [])
            for i in range(count)
        ]
        _, index = _index(*nodes)
        assert find_cyclic_nodes(index) == set()


class TestHasCircularDependency:
    """Tests for the per-node cycle query."""

    def test_canonical_node(self, make_node):
        forest, index = _index(
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["a"]),
            make_node("c"),
        )
        assert has_circular_dependency(forest[0], index)
        assert has_circular_dependency(forest[1], index)
        assert not has_circular_dependency(forest[2], index)

    def test_duplicate_id_walks_its_own_dependencies(self, make_node):
        """A shadowed duplicate is flagged when its dependencies lead back to its id."""
        forest, index = _index(
            make_node("x"),
            make_node("y", dependencies=["x"]),
            make_node("x", dependencies=["y"]),
        )
        cyclic = find_cyclic_nodes(index)

        assert cyclic == set()
        assert not has_circular_dependency(forest[0], index, cyclic)
        assert has_circular_dependency(forest[2], index, cyclic)

    def test_duplicate_id_self_reference(self, make_node):
        forest, index = _index(make_node("x"), make_node("x", dependencies=["x"]))
        assert has_circular_dependency(forest[1], index)

    def test_missing_id_reaching_cycle(self, make_node):
        """A node without an id is flagged only when it walks into a cycle."""
        forest, index = _index(
            make_node("a", dependencies=["b"]),
            make_node("b", dependencies=["a"]),
            make_node(None, dependencies=["a"]),
            make_node("", dependencies=["ghost"]),
        )
        assert has_circular_dependency(forest[2], index)
        assert not has_circular_dependency(forest[3], index)


class TestDependencyEdges:
    def test_lists_resolved_edges(self, make_node):
        """Dangling dependency ids are not edges."""
        _, index = _index(
            make_node("a", dependencies=["b", "ghost"]),
            make_node("b", dependencies=["c"]),
            make_node("c"),
        )
        assert dependency_edges(index) == [("a", "b"), ("b", "c")]
