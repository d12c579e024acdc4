"""
Auto-fix actions for analysis trees.

Turns auto-fixable issues from a ValidationResult into FixAction objects and
applies them to a copy of the tree or to a tree file on disk. Fixes never
add, remove or reorder nodes, so issue paths stay valid while a batch of
actions is applied.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set
import copy
import json
import logging

from htaguard.core.tree import (
    NODE_TYPES,
    VALID_PRIORITIES,
    AnalysisNode,
    Forest,
    build_node_index,
    coerce_tree,
    has_text,
    iter_nodes,
    node_at_path,
    parent_path_of,
    tree_to_dicts,
)
from htaguard.core.validation import Issue, ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "medium"

# Node attributes a fix action may change, with their wire keys
FIXABLE_FIELDS = (
    ("id", "id"),
    ("type", "type"),
    ("priority", "priority"),
    ("dependencies", "dependencies"),
    ("estimated_hours", "estimatedHours"),
)

# Common spellings that map onto a known rank
TYPE_ALIASES = {
    "objectives": "objective",
    "goal": "objective",
    "strategies": "strategy",
    "initiatives": "initiative",
    "tasks": "task",
    "sub_task": "subtask",
    "subtasks": "subtask",
    "sub_tasks": "subtask",
}


@dataclass
class FixAction:
    """
    Represents a candidate auto-fix operation.
    """

    id: str
    description: str
    code: str
    severity: str
    auto_apply: bool
    preview: str
    apply: Callable[[Forest], None]


@dataclass
class FixReport:
    """
    Outcome of applying a set of fix actions.
    """

    tree_path: Optional[str] = None
    backup_path: Optional[str] = None
    applied_actions: List[FixAction] = field(default_factory=list)
    skipped_actions: List[FixAction] = field(default_factory=list)
    tree: Forest = field(default_factory=list)
    before_state: Optional[List[Dict[str, Any]]] = None
    after_state: Optional[List[Dict[str, Any]]] = None


def get_fix_actions(
    result: ValidationResult, tree: Sequence[Any]
) -> List[FixAction]:
    """
    Generate fix actions from validation issues.

    Args:
        result: ValidationResult produced for ``tree``
        tree: The validated forest (AnalysisNode objects or mappings)

    Returns:
        List of FixAction objects that can be applied, one per fixable node
    """
    nodes = coerce_tree(tree)
    taken_ids = {node.id for _, node in iter_nodes(nodes) if has_text(node.id)}
    actions: List[FixAction] = []
    seen_ids = set()

    for issue in result.issues:
        if not issue.auto_fixable or not issue.path:
            continue

        action = _build_fix_action(issue, nodes, taken_ids)
        if action and action.id not in seen_ids:
            actions.append(action)
            seen_ids.add(action.id)

    return actions


def _build_fix_action(
    issue: Issue, nodes: Forest, taken_ids: Set[str]
) -> Optional[FixAction]:
    """Build a fix action for an issue."""
    code = issue.code

    if code == "INVALID_NODE_TYPE":
        return _build_type_normalize_fix(issue, nodes)

    if code == "INVALID_HIERARCHY":
        return _build_rank_align_fix(issue, nodes)

    if code in ("MISSING_ID", "DUPLICATE_ID"):
        return _build_mint_id_fix(issue, nodes, taken_ids)

    if code == "INVALID_PRIORITY":
        return _build_priority_fix(issue, nodes)

    if code == "INVALID_DEPENDENCY":
        return _build_drop_dependency_fix(issue, nodes)

    if code == "NEGATIVE_ESTIMATE":
        return _build_estimate_clamp_fix(issue, nodes)

    return None


def _set_field(path: str, attr: str, value: Any) -> Callable[[Forest], None]:
    def apply(forest: Forest) -> None:
        target = node_at_path(forest, path)
        if target is None:
            raise LookupError(f"No node at path {path}")
        setattr(target, attr, value)

    return apply


def _label(node: AnalysisNode, path: str) -> str:
    return f"'{node.id}'" if has_text(node.id) else f"node at {path}"


def _normalize_node_type(value: Any, parent: Optional[AnalysisNode]) -> str:
    """Snap a node type to a known rank.

    Recognizable spellings are normalized; anything else becomes the rank
    directly below the parent (``objective`` for roots).
    """
    text = str(value or "").strip().lower().replace(" ", "_").replace("-", "_")
    text = TYPE_ALIASES.get(text, text)
    if text in NODE_TYPES:
        return text

    if parent is None:
        return NODE_TYPES[0]
    parent_rank = parent.rank
    if parent_rank is None:
        return "task"
    return NODE_TYPES[min(parent_rank + 1, len(NODE_TYPES) - 1)]


def _build_type_normalize_fix(issue: Issue, nodes: Forest) -> Optional[FixAction]:
    """Build fix for an unknown node type."""
    path = issue.path
    node = node_at_path(nodes, path)
    if node is None:
        return None

    parent_path = parent_path_of(path)
    parent = node_at_path(nodes, parent_path) if parent_path else None
    new_type = _normalize_node_type(node.type, parent)

    return FixAction(
        id=f"node.normalize_type:{path}",
        description=f"Normalize type for {_label(node, path)}",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Set type of {_label(node, path)} from '{node.type}' to '{new_type}'",
        apply=_set_field(path, "type", new_type),
    )


def _build_rank_align_fix(issue: Issue, nodes: Forest) -> Optional[FixAction]:
    """Build fix moving a child one rank below its parent."""
    path = issue.path
    node = node_at_path(nodes, path)
    parent_path = parent_path_of(path)
    if node is None or parent_path is None:
        return None

    parent = node_at_path(nodes, parent_path)
    if parent is None or parent.rank is None:
        return None
    if parent.rank >= len(NODE_TYPES) - 1:
        # Nothing ranks below a subtask
        return None

    new_type = NODE_TYPES[parent.rank + 1]
    return FixAction(
        id=f"node.align_rank:{path}",
        description=f"Align rank of {_label(node, path)} with its parent",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Set type of {_label(node, path)} from '{node.type}' to '{new_type}'",
        apply=_set_field(path, "type", new_type),
    )


def _mint_id(path: str, taken_ids: Set[str]) -> str:
    base = "node-" + path.replace(".", "-")
    candidate = base
    suffix = 2
    while candidate in taken_ids:
        candidate = f"{base}-{suffix}"
        suffix += 1
    taken_ids.add(candidate)
    return candidate


def _build_mint_id_fix(
    issue: Issue, nodes: Forest, taken_ids: Set[str]
) -> Optional[FixAction]:
    """Build fix assigning a fresh synthetic id."""
    path = issue.path
    node = node_at_path(nodes, path)
    if node is None:
        return None

    new_id = _mint_id(path, taken_ids)
    return FixAction(
        id=f"node.mint_id:{path}",
        description=f"Assign a new ID to {_label(node, path)}",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Set ID of node at {path} to '{new_id}'",
        apply=_set_field(path, "id", new_id),
    )


def _build_priority_fix(issue: Issue, nodes: Forest) -> Optional[FixAction]:
    """Build fix clamping priority to a known value."""
    path = issue.path
    node = node_at_path(nodes, path)
    if node is None:
        return None

    text = str(node.priority or "").strip().lower()
    new_priority = text if text in VALID_PRIORITIES else DEFAULT_PRIORITY

    return FixAction(
        id=f"node.normalize_priority:{path}",
        description=f"Normalize priority for {_label(node, path)}",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Set priority of {_label(node, path)} to '{new_priority}'",
        apply=_set_field(path, "priority", new_priority),
    )


def _build_drop_dependency_fix(issue: Issue, nodes: Forest) -> Optional[FixAction]:
    """Build fix dropping dangling dependency ids from a node."""
    path = issue.path
    node = node_at_path(nodes, path)
    if node is None:
        return None

    index = build_node_index(nodes)
    dangling = [dep_id for dep_id in node.dependencies if dep_id not in index]
    if not dangling:
        return None

    def apply(forest: Forest) -> None:
        target = node_at_path(forest, path)
        if target is None:
            raise LookupError(f"No node at path {path}")
        target.dependencies = [
            dep_id for dep_id in target.dependencies if dep_id not in dangling
        ]

    return FixAction(
        id=f"dependency.drop_dangling:{path}",
        description=f"Drop dangling dependencies from {_label(node, path)}",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Remove {', '.join(repr(d) for d in dangling)} from dependencies of {_label(node, path)}",
        apply=apply,
    )


def _build_estimate_clamp_fix(issue: Issue, nodes: Forest) -> Optional[FixAction]:
    """Build fix clamping a negative estimate to zero."""
    path = issue.path
    node = node_at_path(nodes, path)
    if node is None:
        return None

    return FixAction(
        id=f"estimate.clamp:{path}",
        description=f"Clamp negative estimate of {_label(node, path)} to 0",
        code=issue.code,
        severity=issue.severity,
        auto_apply=True,
        preview=f"Set estimatedHours of {_label(node, path)} from {node.estimated_hours} to 0",
        apply=_set_field(path, "estimated_hours", 0),
    )


def apply_fixes(
    actions: List[FixAction],
    tree: Sequence[Any],
    *,
    capture_diff: bool = False,
) -> FixReport:
    """
    Apply fix actions to a copy of a tree.

    The input tree is never mutated; the fixed forest is in ``report.tree``.

    Args:
        actions: FixAction objects from get_fix_actions()
        tree: Forest the actions were built for
        capture_diff: If True, capture before/after state as wire dicts

    Returns:
        FixReport with results
    """
    report = FixReport()
    fixed = copy.deepcopy(coerce_tree(tree))

    if capture_diff:
        report.before_state = tree_to_dicts(fixed)

    for action in actions:
        try:
            action.apply(fixed)
            report.applied_actions.append(action)
        except Exception as e:
            logger.warning(f"Fix action {action.id} skipped: {e}")
            report.skipped_actions.append(action)

    if capture_diff:
        report.after_state = tree_to_dicts(fixed)

    report.tree = fixed
    return report


def _merge_fixes(raw_nodes: List[Any], before: Forest, after: Forest) -> None:
    """Write changed fields back onto the raw node dicts, keeping every other key."""
    for raw, old, new in zip(raw_nodes, before, after):
        for attr, key in FIXABLE_FIELDS:
            value = getattr(new, attr)
            if value == getattr(old, attr):
                continue
            if attr == "estimated_hours" and key not in raw and "estimated_hours" in raw:
                key = "estimated_hours"
            raw[key] = copy.deepcopy(value)
        if old.children:
            _merge_fixes(raw["children"], old.children, new.children)


def apply_fixes_to_file(
    actions: List[FixAction],
    tree_path: str,
    *,
    dry_run: bool = False,
    create_backup: bool = True,
    capture_diff: bool = False,
) -> FixReport:
    """
    Apply fix actions to a tree file.

    The file may hold a list of root nodes or an object with a ``structure``
    list; the wrapper object is preserved. Fixed fields are written back onto
    the loaded node objects, so keys outside the node model survive the
    rewrite.

    Args:
        actions: List of FixAction objects to apply
        tree_path: Path to the JSON tree file
        dry_run: If True, don't actually save changes
        create_backup: If True, write ``<file>.backup`` before modifying
        capture_diff: If True, capture before/after state

    Returns:
        FixReport with results
    """
    report = FixReport(tree_path=tree_path)

    if dry_run:
        report.skipped_actions.extend(actions)
        return report

    try:
        with open(tree_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read tree file {tree_path}: {e}")
        report.skipped_actions.extend(actions)
        return report

    wrapper = data if isinstance(data, dict) else None
    raw_tree = wrapper.get("structure", []) if wrapper is not None else data

    if create_backup:
        backup_path = Path(f"{tree_path}.backup")
        try:
            with open(backup_path, "w") as f:
                json.dump(data, f, indent=2)
            report.backup_path = str(backup_path)
        except OSError as e:
            logger.warning(f"Could not write backup {backup_path}: {e}")

    applied = apply_fixes(actions, raw_tree, capture_diff=capture_diff)
    report.applied_actions = applied.applied_actions
    report.skipped_actions = applied.skipped_actions
    report.before_state = applied.before_state
    report.after_state = applied.after_state
    report.tree = applied.tree

    _merge_fixes(raw_tree, coerce_tree(raw_tree), applied.tree)

    try:
        with open(tree_path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error(f"Could not write fixed tree to {tree_path}: {e}")

    return report
