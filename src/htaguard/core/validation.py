"""
Structural validation for analysis trees.

Runs six rule passes over a forest of AnalysisNode (hierarchy shape, node
fields, dependency integrity, time estimates, completeness, feasibility),
derives shape metrics, fuses both into a 0-100 score and synthesizes
improvement suggestions.

Structural findings are returned as Issue data and never raised. If the
engine itself cannot run over the input, validate_tree returns a degraded
result carrying a single VALIDATION_ERROR issue instead of raising.

Security Note:
    Raw JSON input should go through validate_tree_input() first, which
    applies the size, node-count and depth limits from
    htaguard.core.security before anything recursive touches the data.
"""

from dataclasses import asdict, dataclass, field
from difflib import get_close_matches
from typing import Any, Dict, List, Optional, Sequence, Tuple
import json
import logging
import math

from htaguard.config import ValidationThresholds
from htaguard.core.dependencies import (
    dependency_edges,
    find_cyclic_nodes,
    has_circular_dependency,
)
from htaguard.core.security import (
    MAX_INPUT_SIZE,
    MAX_NODE_COUNT,
    MAX_TREE_DEPTH,
    check_tree_limits,
    measure_tree,
)
from htaguard.core.tree import (
    LEAF_TYPES,
    NODE_TYPES,
    VALID_PRIORITIES,
    AnalysisNode,
    Forest,
    NodeIndex,
    TreeFormatError,
    build_node_index,
    child_path,
    coerce_tree,
    count_nodes,
    has_text,
    iter_nodes,
)

logger = logging.getLogger(__name__)


# Validation result data structures


@dataclass
class Issue:
    """
    A single structural finding.

    Issues are recomputed on every call and never stored.
    """

    kind: str  # "error", "warning", "suggestion"
    code: str  # Issue code (e.g., "INVALID_HIERARCHY", "LONG_TASK")
    message: str  # Human-readable description
    severity: str  # "low", "medium", "high"
    node_id: Optional[str] = None  # Id of the node the issue is about
    path: Optional[str] = None  # Ordinal path such as "0.2.1"
    auto_fixable: bool = False  # Whether a fix action can repair this

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Metrics:
    """Shape metrics derived from a forest."""

    depth: int = 0
    breadth: int = 0
    complexity: int = 0
    completeness: int = 0
    feasibility: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ValidationResult:
    """
    Complete validation result for an analysis tree.
    """

    is_valid: bool
    issues: List[Issue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    score: int = 0
    metrics: Metrics = field(default_factory=Metrics)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.kind == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.kind == "warning")

    def errors(self) -> List[Issue]:
        """Issues that make the tree invalid."""
        return [issue for issue in self.issues if issue.kind == "error"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "metrics": self.metrics.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": list(self.suggestions),
        }


@dataclass
class TreeStats:
    """
    Statistics for an analysis tree.
    """

    node_count: int = 0
    leaf_count: int = 0
    max_depth: int = 0
    type_counts: Dict[str, int] = field(default_factory=dict)
    total_hours: float = 0.0
    person_years: float = 0.0
    nodes_with_estimates: int = 0
    nodes_with_descriptions: int = 0
    dependency_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Constants

ISSUE_KINDS = {"error", "warning", "suggestion"}
SEVERITIES = {"low", "medium", "high"}

# Score deduction per (kind, severity); suggestions cost nothing
SEVERITY_PENALTIES: Dict[Tuple[str, str], int] = {
    ("error", "high"): 15,
    ("warning", "high"): 8,
    ("error", "medium"): 10,
    ("warning", "medium"): 5,
    ("error", "low"): 5,
    ("warning", "low"): 2,
}

HOURS_PER_PERSON_YEAR = 2000
FEASIBILITY_HOURS_PER_POINT = 50
FEASIBILITY_DEFAULT = 50

# Suggestion triggers
SUGGEST_WARNING_COUNT = 5
SUGGEST_MAX_DEPTH = 5
SUGGEST_MAX_BREADTH = 8
SUGGEST_MIN_COMPLETENESS = 70
SUGGEST_MIN_FEASIBILITY = 60

FALLBACK_SUGGESTION = "Please review the structure and try again"


def _round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _fmt_number(value: float) -> str:
    """Render a number without a trailing '.0' for integral values."""
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _suggest_value(value: Any, valid_values: Sequence[str]) -> Optional[str]:
    """
    Suggest a close match for an invalid value.

    Returns:
        Suggestion string like "did you mean 'X'?" or None if no close match
    """
    if not value or not isinstance(value, str):
        return None
    matches = get_close_matches(value.lower(), list(valid_values), n=1, cutoff=0.6)
    if matches:
        return f"did you mean '{matches[0]}'?"
    return None


# Validation entry points


def validate_tree(
    tree: Sequence[Any],
    thresholds: Optional[ValidationThresholds] = None,
) -> ValidationResult:
    """
    Validate an analysis tree and return issues, metrics, score and suggestions.

    Args:
        tree: Ordered forest of root nodes, as AnalysisNode objects or as
            mappings in the JSON wire shape
        thresholds: Rule thresholds (defaults to ValidationThresholds())

    Returns:
        ValidationResult; is_valid is True iff no issue has kind "error".
        Never raises: if the tree cannot be traversed, a degraded result with
        one VALIDATION_ERROR issue is returned.

    Note:
        For raw JSON input, use validate_tree_input() first to perform
        size validation before parsing.
    """
    limits = thresholds or ValidationThresholds()

    try:
        nodes = coerce_tree(tree)
        index = build_node_index(nodes)
        issues: List[Issue] = []

        # Run all validation checks
        _validate_hierarchy(nodes, issues, limits)
        _validate_node_fields(nodes, issues, limits)
        _validate_dependencies(nodes, issues, index)
        _validate_estimates(nodes, issues, limits)
        _validate_completeness(nodes, issues, limits)
        _validate_feasibility(nodes, issues, limits)

        metrics = calculate_metrics(nodes, limits)
        score = calculate_score(issues, metrics)
        suggestions = generate_suggestions(issues, metrics)

        result = ValidationResult(
            is_valid=not any(issue.kind == "error" for issue in issues),
            issues=issues,
            suggestions=suggestions,
            score=score,
            metrics=metrics,
        )
    except Exception as e:
        logger.error(
            f"Tree validation failed: {e}",
            extra={"error_type": type(e).__name__},
        )
        return _failed_result()

    logger.debug(
        "Tree validation completed",
        extra={
            "is_valid": result.is_valid,
            "error_count": result.error_count,
            "warning_count": result.warning_count,
            "score": result.score,
        },
    )
    return result


def _failed_result() -> ValidationResult:
    """Degraded result returned when the engine itself could not run."""
    return ValidationResult(
        is_valid=False,
        issues=[
            Issue(
                kind="error",
                code="VALIDATION_ERROR",
                message="Validation process failed",
                severity="high",
                auto_fixable=False,
            )
        ],
        suggestions=[FALLBACK_SUGGESTION],
        score=0,
        metrics=Metrics(),
    )


def _rejected_input(code: str, message: str, remediation: str) -> ValidationResult:
    """Result for input refused by the input gate before validation ran."""
    return ValidationResult(
        is_valid=False,
        issues=[Issue(kind="error", code=code, message=message, severity="high")],
        suggestions=[remediation],
        score=0,
        metrics=Metrics(),
    )


def validate_tree_input(
    raw_input: str | bytes,
    *,
    max_size: Optional[int] = None,
    max_nodes: Optional[int] = None,
    max_depth: Optional[int] = None,
) -> tuple[Optional[Forest], Optional[ValidationResult]]:
    """
    Parse raw tree JSON with size, shape and limit checks.

    The top level must be a list of root nodes, or an object whose
    ``structure`` key holds that list.

    Args:
        raw_input: Raw JSON string or bytes
        max_size: Maximum allowed size in bytes (default: MAX_INPUT_SIZE)
        max_nodes: Maximum node count (default: MAX_NODE_COUNT)
        max_depth: Maximum tree depth (default: MAX_TREE_DEPTH)

    Returns:
        Tuple of (forest, error_result):
        - On success: (list of AnalysisNode, None)
        - On failure: (None, ValidationResult with one error issue)

    Example:
        >>> forest, error = validate_tree_input(json_string)
        >>> if error:
        ...     return error
        >>> result = validate_tree(forest)
    """
    effective_max_size = max_size if max_size is not None else MAX_INPUT_SIZE

    # Convert to bytes if string for consistent size checking
    if isinstance(raw_input, str):
        input_bytes = raw_input.encode("utf-8")
    else:
        input_bytes = raw_input

    if len(input_bytes) > effective_max_size:
        return None, _rejected_input(
            "INPUT_TOO_LARGE",
            f"Input size ({len(input_bytes):,} bytes) exceeds maximum allowed ({effective_max_size:,} bytes)",
            f"Reduce input size to under {effective_max_size:,} bytes",
        )

    try:
        data = json.loads(input_bytes.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        return None, _rejected_input(
            "INVALID_JSON",
            f"Failed to parse JSON: {e}",
            "Provide the tree as valid UTF-8 JSON",
        )

    if isinstance(data, dict) and isinstance(data.get("structure"), list):
        data = data["structure"]
    if not isinstance(data, list):
        return None, _rejected_input(
            "INVALID_TREE_TYPE",
            f"Tree must be a JSON array of root nodes, got {type(data).__name__}",
            "Provide a list of root nodes or an object with a 'structure' list",
        )

    shape = measure_tree(data)
    ok, code = check_tree_limits(
        shape,
        max_nodes=max_nodes if max_nodes is not None else MAX_NODE_COUNT,
        max_depth=max_depth if max_depth is not None else MAX_TREE_DEPTH,
    )
    if not ok:
        if code == "TREE_TOO_LARGE":
            message = f"Tree has {shape.node_count:,} nodes, over the limit"
            remediation = "Split the tree into smaller forests before validating"
        else:
            message = f"Tree is {shape.max_depth} levels deep, over the limit"
            remediation = "Flatten the hierarchy before validating"
        return None, _rejected_input(code, message, remediation)

    try:
        forest = coerce_tree(data)
    except TreeFormatError as e:
        return None, _rejected_input(
            "INVALID_NODE_STRUCTURE",
            str(e),
            "Ensure every node is an object with the documented field types",
        )

    return forest, None


# Rule passes


def _validate_hierarchy(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    limits: ValidationThresholds,
    depth: int = 0,
    path: str = "",
) -> None:
    """Validate rank ordering, depth and fan-out, in pre-order."""
    if depth > limits.max_depth:
        issues.append(
            Issue(
                kind="warning",
                code="EXCESSIVE_DEPTH",
                message=f"Hierarchy depth exceeds recommended maximum ({limits.max_depth} levels) at path: {path}",
                severity="medium",
                path=path or None,
            )
        )

    for position, node in enumerate(nodes):
        current = child_path(path, position)

        _validate_rank_order(node, issues, current)

        if len(node.children) > limits.max_children:
            issues.append(
                Issue(
                    kind="warning",
                    code="TOO_MANY_CHILDREN",
                    message=f'Node "{node.title}" has {len(node.children)} children. Consider grouping some tasks.',
                    severity="medium",
                    node_id=node.id,
                    path=current,
                )
            )

        if node.children:
            _validate_hierarchy(node.children, issues, limits, depth + 1, current)


def _validate_rank_order(
    node: AnalysisNode, issues: List[Issue], path: str
) -> None:
    """Check the node's own rank and that every child ranks strictly below it."""
    rank = node.rank
    if rank is None:
        msg = f'Invalid node type "{node.type}" for node "{node.title}"'
        hint = _suggest_value(node.type, NODE_TYPES)
        if hint:
            msg += f"; {hint}"
        issues.append(
            Issue(
                kind="error",
                code="INVALID_NODE_TYPE",
                message=msg,
                severity="high",
                node_id=node.id,
                path=path,
                auto_fixable=True,
            )
        )
        return

    for position, child in enumerate(node.children):
        child_rank = child.rank
        # Children with unknown types are reported by their own visit
        if child_rank is not None and child_rank <= rank:
            issues.append(
                Issue(
                    kind="error",
                    code="INVALID_HIERARCHY",
                    message=f'Child node "{child.title}" has type "{child.type}" which should not be under "{node.type}"',
                    severity="high",
                    node_id=child.id,
                    path=child_path(path, position),
                    auto_fixable=True,
                )
            )


def _validate_node_fields(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    limits: ValidationThresholds,
) -> None:
    """Validate id, title, priority and description of every node."""
    seen_ids = set()

    for path, node in iter_nodes(nodes):
        if not has_text(node.id):
            issues.append(
                Issue(
                    kind="error",
                    code="MISSING_ID",
                    message=f'Node "{node.title}" is missing a valid ID',
                    severity="high",
                    node_id=node.id or None,
                    path=path,
                    auto_fixable=True,
                )
            )
        elif node.id in seen_ids:
            issues.append(
                Issue(
                    kind="error",
                    code="DUPLICATE_ID",
                    message=f'Node "{node.title}" reuses ID "{node.id}" of an earlier node',
                    severity="high",
                    node_id=node.id,
                    path=path,
                    auto_fixable=True,
                )
            )
        else:
            seen_ids.add(node.id)

        if not has_text(node.title):
            issues.append(
                Issue(
                    kind="error",
                    code="MISSING_TITLE",
                    message=f'Node with ID "{node.id}" is missing a title',
                    severity="high",
                    node_id=node.id,
                    path=path,
                )
            )

        title = node.title
        if title and len(title) > limits.max_title_length:
            issues.append(
                Issue(
                    kind="warning",
                    code="LONG_TITLE",
                    message=f'Title for "{title[:50]}..." is too long ({len(title)} chars). Consider shortening.',
                    severity="low",
                    node_id=node.id,
                    path=path,
                )
            )

        if title and len(title) < limits.min_title_length:
            issues.append(
                Issue(
                    kind="warning",
                    code="SHORT_TITLE",
                    message=f'Title "{title}" is very short. Consider being more descriptive.',
                    severity="low",
                    node_id=node.id,
                    path=path,
                )
            )

        if node.priority not in VALID_PRIORITIES:
            msg = f'Node "{node.title}" has invalid priority "{node.priority}"'
            hint = _suggest_value(node.priority, sorted(VALID_PRIORITIES))
            if hint:
                msg += f"; {hint}"
            issues.append(
                Issue(
                    kind="error",
                    code="INVALID_PRIORITY",
                    message=msg,
                    severity="medium",
                    node_id=node.id,
                    path=path,
                    auto_fixable=True,
                )
            )

        # Descriptions are optional at higher ranks, expected at leaf ranks
        if not has_text(node.description) and node.type in LEAF_TYPES:
            issues.append(
                Issue(
                    kind="warning",
                    code="MISSING_DESCRIPTION",
                    message=f'{node.type} "{node.title}" should have a description for clarity',
                    severity="medium",
                    node_id=node.id,
                    path=path,
                )
            )


def _validate_dependencies(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    index: NodeIndex,
) -> None:
    """Validate dependency targets exist and no dependency cycle is reachable."""
    cyclic = None

    for path, node in iter_nodes(nodes):
        if not node.dependencies:
            continue

        for dep_id in node.dependencies:
            if dep_id not in index:
                issues.append(
                    Issue(
                        kind="error",
                        code="INVALID_DEPENDENCY",
                        message=f'Node "{node.title}" has dependency on non-existent node "{dep_id}"',
                        severity="high",
                        node_id=node.id,
                        path=path,
                        auto_fixable=True,
                    )
                )

        if cyclic is None:
            cyclic = find_cyclic_nodes(index)

        if has_circular_dependency(node, index, cyclic):
            issues.append(
                Issue(
                    kind="error",
                    code="CIRCULAR_DEPENDENCY",
                    message=f'Node "{node.title}" has circular dependency',
                    severity="high",
                    node_id=node.id,
                    path=path,
                    auto_fixable=False,
                )
            )


def _validate_estimates(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    limits: ValidationThresholds,
) -> None:
    """Validate time estimates on every node."""
    for path, node in iter_nodes(nodes):
        hours = node.estimated_hours

        if hours is None:
            if node.type in LEAF_TYPES:
                issues.append(
                    Issue(
                        kind="warning",
                        code="MISSING_ESTIMATE",
                        message=f'{node.type} "{node.title}" is missing time estimate',
                        severity="medium",
                        node_id=node.id,
                        path=path,
                    )
                )
            continue

        if hours < 0:
            issues.append(
                Issue(
                    kind="error",
                    code="NEGATIVE_ESTIMATE",
                    message=f'Node "{node.title}" has negative time estimate',
                    severity="medium",
                    node_id=node.id,
                    path=path,
                    auto_fixable=True,
                )
            )

        if hours > limits.large_estimate_hours:
            issues.append(
                Issue(
                    kind="warning",
                    code="LARGE_ESTIMATE",
                    message=f'Node "{node.title}" has very large time estimate ({_fmt_number(hours)} hours). Consider breaking down.',
                    severity="medium",
                    node_id=node.id,
                    path=path,
                )
            )

        if node.type in LEAF_TYPES and node.is_leaf:
            if hours == 0:
                issues.append(
                    Issue(
                        kind="warning",
                        code="ZERO_ESTIMATE",
                        message=f'{node.type} "{node.title}" has zero time estimate',
                        severity="medium",
                        node_id=node.id,
                        path=path,
                    )
                )

            if hours > limits.long_task_hours:
                issues.append(
                    Issue(
                        kind="warning",
                        code="LONG_TASK",
                        message=f'{node.type} "{node.title}" has estimate > {_fmt_number(limits.long_task_hours)} hours. Consider breaking down.',
                        severity="medium",
                        node_id=node.id,
                        path=path,
                    )
                )


def _validate_completeness(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    limits: ValidationThresholds,
) -> None:
    """Check what share of nodes carry estimates and descriptions."""
    total = 0
    with_estimates = 0
    with_descriptions = 0

    for _, node in iter_nodes(nodes):
        total += 1
        if node.estimated_hours is not None and node.estimated_hours > 0:
            with_estimates += 1
        if has_text(node.description):
            with_descriptions += 1

    if total == 0:
        return

    estimate_ratio = with_estimates / total
    description_ratio = with_descriptions / total

    if estimate_ratio < limits.min_estimate_completeness:
        issues.append(
            Issue(
                kind="warning",
                code="INCOMPLETE_ESTIMATES",
                message=f"Only {_round_half_up(estimate_ratio * 100)}% of nodes have time estimates",
                severity="medium",
            )
        )

    if description_ratio < limits.min_description_completeness:
        issues.append(
            Issue(
                kind="warning",
                code="INCOMPLETE_DESCRIPTIONS",
                message=f"Only {_round_half_up(description_ratio * 100)}% of nodes have descriptions",
                severity="low",
            )
        )


def _validate_feasibility(
    nodes: Sequence[AnalysisNode],
    issues: List[Issue],
    limits: ValidationThresholds,
) -> None:
    """Check total project size and parent/children estimate consistency."""
    total = _total_leaf_hours(nodes)

    if total > limits.large_project_hours:
        person_years = _person_years(total)
        issues.append(
            Issue(
                kind="warning",
                code="LARGE_PROJECT",
                message=f"Total project estimate is {_fmt_number(total)} hours ({_fmt_number(person_years)} person-years). Consider phase approach.",
                severity="medium",
            )
        )

    for path, node in iter_nodes(nodes):
        if node.is_leaf:
            continue

        children_total = sum(
            child.estimated_hours for child in node.children if child.estimated_hours
        )
        own = node.estimated_hours or 0

        if own > 0 and children_total > own * limits.breakdown_ratio:
            issues.append(
                Issue(
                    kind="warning",
                    code="UNREALISTIC_BREAKDOWN",
                    message=f'Node "{node.title}" estimate ({_fmt_number(own)}h) is much less than sum of children ({_fmt_number(children_total)}h)',
                    severity="medium",
                    node_id=node.id,
                    path=path,
                )
            )


# Metrics, scoring and suggestions


def _person_years(total_hours: float) -> float:
    """Person-years for a number of hours, rounded half-up to two decimals."""
    years = total_hours / HOURS_PER_PERSON_YEAR
    if not math.isfinite(years * 100):
        return years
    return _round_half_up(years * 100) / 100


def _total_leaf_hours(nodes: Sequence[AnalysisNode]) -> float:
    """Sum of non-zero estimates over leaf nodes; overflow saturates to inf."""
    return sum(
        float(node.estimated_hours)
        for _, node in iter_nodes(nodes)
        if node.is_leaf and node.estimated_hours
    )


def _max_depth(nodes: Sequence[AnalysisNode], current: int = 0) -> int:
    deepest = current
    for node in nodes:
        if node.children:
            deepest = max(deepest, _max_depth(node.children, current + 1))
    return deepest


def _max_breadth(nodes: Sequence[AnalysisNode]) -> int:
    widest = len(nodes)
    for node in nodes:
        if node.children:
            widest = max(widest, _max_breadth(node.children))
    return widest


def calculate_metrics(
    nodes: Sequence[AnalysisNode],
    limits: Optional[ValidationThresholds] = None,
) -> Metrics:
    """
    Derive shape metrics for a forest.

    completeness counts nodes where an estimate is present at all and nodes
    whose description is a non-empty string; feasibility scales down with
    total leaf hours and falls back to a flat 50 when there are no hours or
    the project is over the large-project threshold.
    """
    limits = limits or ValidationThresholds()

    depth = _max_depth(nodes)
    breadth = _max_breadth(nodes)
    complexity = min(100, depth * 10 + breadth * 5)

    total_nodes = count_nodes(nodes)
    with_estimates = 0
    with_descriptions = 0
    for _, node in iter_nodes(nodes):
        if node.estimated_hours is not None:
            with_estimates += 1
        if node.description:
            with_descriptions += 1

    completeness = 0
    if total_nodes:
        completeness = _round_half_up(
            (with_estimates + with_descriptions) / (total_nodes * 2) * 100
        )

    total_hours = _total_leaf_hours(nodes)
    if 0 < total_hours < limits.large_project_hours:
        feasibility = min(100, 100 - total_hours / FEASIBILITY_HOURS_PER_POINT)
    else:
        feasibility = FEASIBILITY_DEFAULT

    return Metrics(
        depth=depth,
        breadth=breadth,
        complexity=complexity,
        completeness=completeness,
        feasibility=_round_half_up(feasibility),
    )


def calculate_score(issues: Sequence[Issue], metrics: Metrics) -> int:
    """Fuse issue penalties with completeness and feasibility into 0-100."""
    score = 100
    for issue in issues:
        score -= SEVERITY_PENALTIES.get((issue.kind, issue.severity), 0)

    score = _round_half_up((score + metrics.completeness + metrics.feasibility) / 3)
    return max(0, min(100, score))


def generate_suggestions(issues: Sequence[Issue], metrics: Metrics) -> List[str]:
    """Threshold-driven advice; independent of issue order."""
    suggestions: List[str] = []

    error_count = sum(1 for issue in issues if issue.kind == "error")
    warning_count = sum(1 for issue in issues if issue.kind == "warning")

    if error_count > 0:
        plural = "s" if error_count > 1 else ""
        suggestions.append(f"Fix {error_count} critical error{plural} before proceeding")

    if warning_count > SUGGEST_WARNING_COUNT:
        suggestions.append(
            "Consider addressing multiple warnings to improve structure quality"
        )

    if metrics.depth > SUGGEST_MAX_DEPTH:
        suggestions.append("Consider flattening the hierarchy to improve manageability")

    if metrics.breadth > SUGGEST_MAX_BREADTH:
        suggestions.append("Group related tasks to reduce cognitive load")

    if metrics.completeness < SUGGEST_MIN_COMPLETENESS:
        suggestions.append("Add more time estimates and descriptions for better planning")

    if metrics.feasibility < SUGGEST_MIN_FEASIBILITY:
        suggestions.append("Consider breaking the project into phases or reducing scope")

    if not suggestions:
        suggestions.append(
            "Structure looks good! Consider reviewing estimates and dependencies."
        )

    return suggestions


# Statistics functions


def calculate_stats(tree: Sequence[Any]) -> TreeStats:
    """
    Calculate statistics for an analysis tree.

    Args:
        tree: Forest of AnalysisNode objects or mappings

    Returns:
        TreeStats with calculated totals

    Raises:
        TreeFormatError: If the tree cannot be deserialized
    """
    nodes = coerce_tree(tree)
    index = build_node_index(nodes)

    type_counts = {node_type: 0 for node_type in NODE_TYPES}
    type_counts["other"] = 0
    stats = TreeStats(type_counts=type_counts)

    for _, node in iter_nodes(nodes):
        stats.node_count += 1
        if node.is_leaf:
            stats.leaf_count += 1
        if node.type in NODE_TYPES:
            type_counts[node.type] += 1
        else:
            type_counts["other"] += 1
        if node.estimated_hours is not None and node.estimated_hours > 0:
            stats.nodes_with_estimates += 1
        if has_text(node.description):
            stats.nodes_with_descriptions += 1

    stats.max_depth = _max_depth(nodes)
    stats.total_hours = float(_total_leaf_hours(nodes))
    stats.person_years = round(stats.total_hours / HOURS_PER_PERSON_YEAR, 2)
    stats.dependency_count = len(dependency_edges(index))
    return stats
