"""
Unit tests for htaguard.core.security module.
"""

from htaguard.core.security import (
    MAX_INPUT_SIZE,
    MAX_NODE_COUNT,
    MAX_TREE_DEPTH,
    TreeShape,
    check_tree_limits,
    measure_tree,
)


class TestConstants:
    def test_limits_are_sane(self):
        assert MAX_INPUT_SIZE == 1_000_000
        assert MAX_NODE_COUNT > 0
        # Far above the depth warning threshold
        assert MAX_TREE_DEPTH > 6


class TestMeasureTree:
    """Tests for measure_tree."""

    def test_counts_nodes_and_depth(self, valid_tree):
        shape = measure_tree(valid_tree)
        assert shape == TreeShape(node_count=5, max_depth=3)

    def test_empty(self):
        assert measure_tree([]) == TreeShape(node_count=0, max_depth=0)

    def test_non_objects_counted_not_descended(self):
        shape = measure_tree([1, "two", {"children": [None, {"children": "nope"}]}])
        assert shape.node_count == 5
        assert shape.max_depth == 1

    def test_deep_chain_without_recursion(self):
        """Depth far past the recursion limit is measured iteratively."""
        node = {"id": "leaf"}
        for _ in range(5000):
            node = {"children": [node]}
        shape = measure_tree([node])
        assert shape.node_count == 5001
        assert shape.max_depth == 5000


class TestCheckTreeLimits:
    """Tests for check_tree_limits."""

    def test_within_limits(self):
        assert check_tree_limits(TreeShape(10, 3), max_nodes=10, max_depth=3) == (True, "")

    def test_too_large(self):
        assert check_tree_limits(TreeShape(11, 3), max_nodes=10, max_depth=3) == (
            False,
            "TREE_TOO_LARGE",
        )

    def test_too_deep(self):
        assert check_tree_limits(TreeShape(10, 4), max_nodes=10, max_depth=3) == (
            False,
            "TREE_TOO_DEEP",
        )

    def test_defaults(self):
        ok, code = check_tree_limits(TreeShape(MAX_NODE_COUNT, MAX_TREE_DEPTH))
        assert ok is True
        assert code == ""
