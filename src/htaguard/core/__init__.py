"""Core tree model, validation engine and auto-fix operations for htaguard."""

from htaguard.core.tree import (
    NODE_TYPES,
    VALID_PRIORITIES,
    AnalysisNode,
    TreeFormatError,
    build_node_index,
    coerce_tree,
    iter_nodes,
)

from htaguard.core.validation import (
    Issue,
    Metrics,
    TreeStats,
    ValidationResult,
    calculate_stats,
    validate_tree,
    validate_tree_input,
)

from htaguard.core.fixes import (
    FixAction,
    FixReport,
    apply_fixes,
    apply_fixes_to_file,
    get_fix_actions,
)

__all__ = [
    "NODE_TYPES",
    "VALID_PRIORITIES",
    "AnalysisNode",
    "TreeFormatError",
    "build_node_index",
    "coerce_tree",
    "iter_nodes",
    "Issue",
    "Metrics",
    "TreeStats",
    "ValidationResult",
    "calculate_stats",
    "validate_tree",
    "validate_tree_input",
    "FixAction",
    "FixReport",
    "apply_fixes",
    "apply_fixes_to_file",
    "get_fix_actions",
]
