"""
Analysis tree model for htaguard.

Provides the AnalysisNode dataclass, conversion from and to the JSON wire
shape, and the traversal helpers every validation pass builds on.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import math


# Ordered rank sequence; a child's index must be strictly greater than its parent's
NODE_TYPES: Tuple[str, ...] = ("objective", "strategy", "initiative", "task", "subtask")
LEAF_TYPES = frozenset({"task", "subtask"})
VALID_PRIORITIES = frozenset({"low", "medium", "high", "critical"})


class TreeFormatError(ValueError):
    """Raised when input cannot be interpreted as an analysis tree."""


@dataclass
class AnalysisNode:
    """One node of an analysis tree."""

    id: Optional[str]
    type: Optional[str]
    title: Optional[str]
    priority: Optional[str] = None
    description: Optional[str] = None
    estimated_hours: Optional[float] = None
    dependencies: List[str] = field(default_factory=list)
    children: List["AnalysisNode"] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def rank(self) -> Optional[int]:
        """Index of this node's type in NODE_TYPES, or None for unknown types."""
        return rank_of(self.type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisNode":
        """Build a node (and its subtree) from the JSON wire shape.

        Accepts both ``estimatedHours`` and ``estimated_hours``.

        Raises:
            TreeFormatError: If a field has a type the engine cannot traverse.
        """
        if not isinstance(data, Mapping):
            raise TreeFormatError(
                f"Node must be an object, got {type(data).__name__}"
            )

        node_id = data.get("id")
        if node_id is not None and not isinstance(node_id, str):
            raise TreeFormatError(f"Node id must be a string, got {node_id!r}")

        for key in ("type", "title", "priority"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise TreeFormatError(f"Node '{node_id}' {key} must be a string")
        title = data.get("title")

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise TreeFormatError(f"Node '{node_id}' description must be a string")

        hours = data.get("estimatedHours", data.get("estimated_hours"))
        if hours is not None and (
            isinstance(hours, bool) or not isinstance(hours, (int, float))
        ):
            raise TreeFormatError(
                f"Node '{node_id}' estimatedHours must be a number, got {hours!r}"
            )
        if hours is not None and not _is_finite_number(hours):
            raise TreeFormatError(
                f"Node '{node_id}' estimatedHours must be a finite number"
            )

        dependencies = data.get("dependencies") or []
        if not isinstance(dependencies, list) or not all(
            isinstance(dep, str) for dep in dependencies
        ):
            raise TreeFormatError(
                f"Node '{node_id}' dependencies must be a list of node ids"
            )

        children = data.get("children") or []
        if not isinstance(children, list):
            raise TreeFormatError(f"Node '{node_id}' children must be a list")

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise TreeFormatError(f"Node '{node_id}' metadata must be an object")

        return cls(
            id=node_id,
            type=data.get("type"),
            title=title,
            priority=data.get("priority"),
            description=description,
            estimated_hours=hours,
            dependencies=list(dependencies),
            children=[cls.from_dict(child) for child in children],
            metadata=dict(metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the JSON wire shape."""
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "priority": self.priority,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.estimated_hours is not None:
            data["estimatedHours"] = self.estimated_hours
        data["dependencies"] = list(self.dependencies)
        data["children"] = [child.to_dict() for child in self.children]
        data["metadata"] = dict(self.metadata)
        return data


Forest = List[AnalysisNode]


def _is_finite_number(value: float) -> bool:
    """True when value is finite and fits in a float."""
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def rank_of(node_type: Any) -> Optional[int]:
    """Return the rank index of a node type, or None when it is not a known rank."""
    try:
        return NODE_TYPES.index(node_type)
    except ValueError:
        return None


def coerce_tree(tree: Sequence[Any]) -> Forest:
    """Convert a forest of mappings and/or AnalysisNode objects into nodes.

    Raises:
        TreeFormatError: If the forest is not a list or a node is malformed.
    """
    if isinstance(tree, (str, bytes, Mapping)) or not isinstance(tree, Sequence):
        raise TreeFormatError(
            f"Tree must be a list of root nodes, got {type(tree).__name__}"
        )
    return [
        node if isinstance(node, AnalysisNode) else AnalysisNode.from_dict(node)
        for node in tree
    ]


def tree_to_dicts(tree: Sequence[AnalysisNode]) -> List[Dict[str, Any]]:
    return [node.to_dict() for node in tree]


def child_path(parent_path: str, index: int) -> str:
    """Ordinal path of a child: ``"0"`` for the first root, ``"0.2"`` below it."""
    return f"{parent_path}.{index}" if parent_path else str(index)


def iter_nodes(
    nodes: Sequence[AnalysisNode], path: str = ""
) -> Iterator[Tuple[str, AnalysisNode]]:
    """Yield ``(path, node)`` pairs in pre-order, following sibling order."""
    for index, node in enumerate(nodes):
        current = child_path(path, index)
        yield current, node
        if node.children:
            yield from iter_nodes(node.children, current)


def node_at_path(nodes: Sequence[AnalysisNode], path: str) -> Optional[AnalysisNode]:
    """Resolve an ordinal path produced by iter_nodes back to its node."""
    if not path:
        return None
    current: Optional[AnalysisNode] = None
    siblings: Sequence[AnalysisNode] = nodes
    for part in path.split("."):
        try:
            index = int(part)
        except ValueError:
            return None
        if index < 0 or index >= len(siblings):
            return None
        current = siblings[index]
        siblings = current.children
    return current


def parent_path_of(path: str) -> Optional[str]:
    """Return the path of a node's parent, or None for roots."""
    if "." not in path:
        return None
    return path.rsplit(".", 1)[0]


def count_nodes(nodes: Sequence[AnalysisNode]) -> int:
    count = len(nodes)
    for node in nodes:
        if node.children:
            count += count_nodes(node.children)
    return count


def has_text(value: Optional[str]) -> bool:
    """True when a string field holds something other than whitespace."""
    return bool(value) and bool(value.strip())


@dataclass
class NodeIndex:
    """One-time id -> node index over a forest.

    ``by_id`` maps each id to its first occurrence in pre-order.
    ``duplicates`` lists ``(path, node)`` for every later occurrence.
    Nodes without an id are never indexed.
    """

    by_id: Dict[str, AnalysisNode] = field(default_factory=dict)
    paths: Dict[str, str] = field(default_factory=dict)
    duplicates: List[Tuple[str, AnalysisNode]] = field(default_factory=list)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.by_id

    def get(self, node_id: str) -> Optional[AnalysisNode]:
        return self.by_id.get(node_id)

    def is_canonical(self, node: AnalysisNode) -> bool:
        """True when ``node`` is the node its id resolves to."""
        return has_text(node.id) and self.by_id.get(node.id) is node


def build_node_index(nodes: Sequence[AnalysisNode]) -> NodeIndex:
    index = NodeIndex()
    for path, node in iter_nodes(nodes):
        if not has_text(node.id):
            continue
        if node.id in index.by_id:
            index.duplicates.append((path, node))
            continue
        index.by_id[node.id] = node
        index.paths[node.id] = path
    return index
