"""
Dependency-graph analysis for analysis trees.

The dependency graph has one vertex per indexed node id and one edge per
entry in a node's ``dependencies`` list. Parent/child edges are not part of
it. Dependency ids resolve through the NodeIndex, so a duplicated id always
resolves to its first occurrence and dangling ids are ignored here (they are
reported separately as INVALID_DEPENDENCY).
"""

from collections import deque
from typing import Dict, List, Optional, Set

from htaguard.core.tree import AnalysisNode, NodeIndex, has_text

_WHITE, _GRAY, _BLACK = 0, 1, 2


def find_cyclic_nodes(index: NodeIndex) -> Set[str]:
    """Return the ids from which a dependency cycle is reachable.

    Single three-color depth-first search over the whole graph, O(V+E).
    A node is marked when it sits on a cycle or when any of its resolved
    dependencies is marked. The walk keeps an explicit stack so long
    dependency chains do not hit the interpreter's recursion limit.
    """
    color: Dict[str, int] = {}
    tainted: Set[str] = set()

    for start in index.by_id:
        if color.get(start, _WHITE) != _WHITE:
            continue

        color[start] = _GRAY
        stack = [(start, iter(index.by_id[start].dependencies))]

        while stack:
            node_id, deps = stack[-1]
            descended = False

            for dep_id in deps:
                if dep_id not in index:
                    continue
                state = color.get(dep_id, _WHITE)
                if state == _WHITE:
                    color[dep_id] = _GRAY
                    stack.append((dep_id, iter(index.by_id[dep_id].dependencies)))
                    descended = True
                    break
                if state == _GRAY or dep_id in tainted:
                    # Back edge onto the current path, or a finished node that reaches a cycle
                    tainted.add(node_id)

            if descended:
                continue

            stack.pop()
            color[node_id] = _BLACK
            if node_id in tainted and stack:
                tainted.add(stack[-1][0])

    return tainted


def _reaches(index: NodeIndex, start_id: str, target_id: str) -> bool:
    """Breadth-first reachability over resolved dependency edges."""
    seen = {start_id}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        if current == target_id:
            return True
        for dep_id in index.by_id[current].dependencies:
            if dep_id in index and dep_id not in seen:
                seen.add(dep_id)
                queue.append(dep_id)
    return False


def has_circular_dependency(
    node: AnalysisNode,
    index: NodeIndex,
    cyclic: Optional[Set[str]] = None,
) -> bool:
    """Check whether a walk from ``node`` along dependencies revisits its path.

    Equivalent to a depth-first walk that starts with ``node.id`` on the path
    and reports a cycle as soon as an id already on the current path comes
    round again. Pass a precomputed ``cyclic`` set (from find_cyclic_nodes)
    when querying many nodes of the same forest.
    """
    if cyclic is None:
        cyclic = find_cyclic_nodes(index)

    if index.is_canonical(node):
        return node.id in cyclic

    # Node's own id is missing or shadowed by an earlier duplicate: its own
    # dependency list is walked first, then the graph takes over.
    own_id = node.id if has_text(node.id) else None
    for dep_id in node.dependencies:
        if dep_id not in index:
            continue
        if dep_id == own_id or dep_id in cyclic:
            return True
        if own_id is not None and own_id in index and _reaches(index, dep_id, own_id):
            return True
    return False


def dependency_edges(index: NodeIndex) -> List[tuple]:
    """List resolved ``(node_id, dependency_id)`` edges in index order."""
    return [
        (node_id, dep_id)
        for node_id, node in index.by_id.items()
        for dep_id in node.dependencies
        if dep_id in index
    ]
