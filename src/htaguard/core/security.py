"""
Input limits for htaguard.

Validation is a pure recursive computation whose cost grows with node count
(cycle checks) and whose recursion depth equals tree depth. These limits let
the input gate reject pathological payloads before the engine runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Final, List, Tuple

logger = logging.getLogger(__name__)

# =============================================================================
# Input Size Limits
# =============================================================================

MAX_INPUT_SIZE: Final[int] = 1_000_000
"""Maximum raw JSON payload size in bytes (1MB)."""

MAX_NODE_COUNT: Final[int] = 5_000
"""Maximum number of nodes in one forest.

Trees of a few thousand nodes validate comfortably; larger forests should be
split before validation.
"""

MAX_TREE_DEPTH: Final[int] = 64
"""Maximum root-to-leaf depth.

Far beyond the depth warning threshold, low enough to keep the recursive
passes well inside the interpreter's recursion limit.
"""


@dataclass
class TreeShape:
    """Node count and depth of a raw JSON forest."""

    node_count: int = 0
    max_depth: int = 0


def measure_tree(raw_tree: List[Any]) -> TreeShape:
    """Count nodes and depth of a raw JSON forest without recursion.

    Items that are not objects are counted as nodes but not descended into;
    ``children`` values that are not lists are ignored. Structural problems
    are left for deserialization to report.
    """
    shape = TreeShape()
    stack: List[Tuple[Any, int]] = [(node, 0) for node in raw_tree]

    while stack:
        node, depth = stack.pop()
        shape.node_count += 1
        if depth > shape.max_depth:
            shape.max_depth = depth
        if not isinstance(node, dict):
            continue
        children = node.get("children")
        if isinstance(children, list):
            stack.extend((child, depth + 1) for child in children)

    return shape


def check_tree_limits(
    shape: TreeShape,
    *,
    max_nodes: int = MAX_NODE_COUNT,
    max_depth: int = MAX_TREE_DEPTH,
) -> Tuple[bool, str]:
    """Check a measured forest against node-count and depth limits.

    Returns:
        Tuple of (ok, code) where code is "", "TREE_TOO_LARGE" or "TREE_TOO_DEEP"
    """
    if shape.node_count > max_nodes:
        logger.warning(
            "Tree rejected: node count over limit",
            extra={"node_count": shape.node_count, "max_nodes": max_nodes},
        )
        return False, "TREE_TOO_LARGE"
    if shape.max_depth > max_depth:
        logger.warning(
            "Tree rejected: depth over limit",
            extra={"depth": shape.max_depth, "max_depth": max_depth},
        )
        return False, "TREE_TOO_DEEP"
    return True, ""
