"""Validation commands for the htaguard CLI.

Provides commands for tree validation, auto-fix and statistics.
"""

from pathlib import Path
from typing import Any, Dict, List

import click

from htaguard.cli.config import CLIContext
from htaguard.cli.logging import cli_command, get_cli_logger
from htaguard.cli.output import emit_error, emit_success
from htaguard.cli.registry import get_context
from htaguard.cli.resilience import handle_keyboard_interrupt
from htaguard.core.fixes import (
    FixAction,
    apply_fixes,
    apply_fixes_to_file,
    get_fix_actions,
)
from htaguard.core.responses import ErrorCode, ErrorType
from htaguard.core.tree import Forest
from htaguard.core.validation import (
    calculate_stats,
    validate_tree,
    validate_tree_input,
)

logger = get_cli_logger()


def _load_forest(cli_ctx: CLIContext, tree_file: str) -> Forest:
    """Read a tree file through the input gate, emitting an error on failure."""
    path = Path(tree_file)
    try:
        raw = path.read_bytes()
    except OSError as e:
        emit_error(
            f"Tree file not found: {tree_file}",
            code=ErrorCode.TREE_NOT_FOUND,
            error_type=ErrorType.NOT_FOUND,
            remediation="Check the path to the tree JSON file",
            details={"tree_path": tree_file, "reason": str(e)},
        )

    limits = cli_ctx.limits
    forest, rejected = validate_tree_input(
        raw,
        max_size=limits.max_input_bytes,
        max_nodes=limits.max_nodes,
        max_depth=limits.max_depth,
    )
    if rejected is not None:
        issue = rejected.issues[0]
        logger.warning(
            f"Tree input rejected: {issue.code}", tree_path=tree_file, code=issue.code
        )
        emit_error(
            issue.message,
            code=ErrorCode(issue.code),
            error_type=ErrorType.VALIDATION,
            remediation=rejected.suggestions[0] if rejected.suggestions else None,
            details={"tree_path": tree_file},
        )
    return forest


def _describe_actions(actions: List[FixAction]) -> List[Dict[str, Any]]:
    return [
        {
            "id": a.id,
            "code": a.code,
            "description": a.description,
            "preview": a.preview,
        }
        for a in actions
    ]


@click.group("validate")
def validate_group() -> None:
    """Tree validation and fix commands."""
    pass


@validate_group.command("check")
@click.argument("tree_file", type=click.Path())
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 when the tree has errors.",
)
@click.pass_context
@cli_command("check")
@handle_keyboard_interrupt()
def validate_check_cmd(ctx: click.Context, tree_file: str, strict: bool) -> None:
    """Validate an analysis tree and report issues, metrics and score.

    TREE_FILE is a JSON file holding a list of root nodes.
    """
    cli_ctx = get_context(ctx)
    forest = _load_forest(cli_ctx, tree_file)

    result = validate_tree(forest, cli_ctx.thresholds)

    emit_success({"tree_path": tree_file, **result.to_dict()})

    if strict and not result.is_valid:
        ctx.exit(1)


@validate_group.command("fix")
@click.argument("tree_file", type=click.Path())
@click.option("--dry-run", is_flag=True, help="Preview fixes without applying.")
@click.option("--no-backup", is_flag=True, help="Skip creating backup file.")
@click.pass_context
@cli_command("fix")
@handle_keyboard_interrupt()
def validate_fix_cmd(
    ctx: click.Context,
    tree_file: str,
    dry_run: bool,
    no_backup: bool,
) -> None:
    """Apply auto-fixes to an analysis tree file.

    TREE_FILE is a JSON file holding a list of root nodes.
    """
    cli_ctx = get_context(ctx)
    forest = _load_forest(cli_ctx, tree_file)

    # Validate to get fixable issues
    result = validate_tree(forest, cli_ctx.thresholds)
    actions = get_fix_actions(result, forest)

    if not actions:
        emit_success(
            {
                "tree_path": tree_file,
                "dry_run": dry_run,
                "applied_count": 0,
                "skipped_count": 0,
                "score_before": result.score,
                "score_after": result.score,
                "is_valid_after": result.is_valid,
                "message": "No auto-fixable issues found",
            }
        )
        return

    if dry_run:
        # Preview on an in-memory copy; the file is left untouched
        report = apply_fixes(actions, forest)
        applied: List[FixAction] = []
        planned = report.applied_actions
        skipped = report.skipped_actions
        backup_path = None
    else:
        report = apply_fixes_to_file(
            actions,
            tree_file,
            create_backup=not no_backup,
        )
        applied = report.applied_actions
        planned = []
        skipped = report.skipped_actions
        backup_path = report.backup_path

    after = validate_tree(report.tree, cli_ctx.thresholds)

    emit_success(
        {
            "tree_path": tree_file,
            "dry_run": dry_run,
            "applied_count": len(applied),
            "skipped_count": len(skipped),
            "applied_actions": _describe_actions(applied),
            "planned_actions": _describe_actions(planned),
            "skipped_actions": _describe_actions(skipped),
            "backup_path": backup_path,
            "score_before": result.score,
            "score_after": after.score,
            "is_valid_after": after.is_valid,
        }
    )


@validate_group.command("stats")
@click.argument("tree_file", type=click.Path())
@click.pass_context
@cli_command("stats")
@handle_keyboard_interrupt()
def validate_stats_cmd(ctx: click.Context, tree_file: str) -> None:
    """Get size, shape and estimate statistics for an analysis tree.

    TREE_FILE is a JSON file holding a list of root nodes.
    """
    cli_ctx = get_context(ctx)
    forest = _load_forest(cli_ctx, tree_file)

    stats = calculate_stats(forest)

    emit_success({"tree_path": tree_file, **stats.to_dict()})
