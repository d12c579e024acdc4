"""Command registry for the htaguard CLI.

Centralized registration of all command groups.
"""

from typing import Optional

import click

from htaguard.cli.config import CLIContext

# Module-level storage for CLI context (for testing)
_cli_context: Optional[CLIContext] = None


def set_context(ctx: CLIContext) -> None:
    """Set the CLI context at module level.

    Primarily used for testing when not using Click's context.
    """
    global _cli_context
    _cli_context = ctx


def get_context(ctx: Optional[click.Context] = None) -> CLIContext:
    """Get CLI context from Click context or module-level storage.

    Raises:
        RuntimeError: If no context is available.
    """
    if ctx is not None and ctx.obj and "cli_context" in ctx.obj:
        return ctx.obj["cli_context"]

    if _cli_context is not None:
        return _cli_context

    raise RuntimeError("No CLI context available. Call set_context() first.")


def register_all_commands(cli: click.Group) -> None:
    """Register all command groups with the CLI.

    Command groups are lazily imported to avoid circular dependencies.
    """
    from htaguard.cli.commands import validate_group

    cli.add_command(validate_group)

    @cli.command("version")
    @click.pass_context
    def version(ctx: click.Context) -> None:
        """Show CLI version information."""
        from htaguard.cli.output import emit_success

        cli_ctx = get_context(ctx)
        emit_success(
            {
                "name": cli_ctx.config.name,
                "version": cli_ctx.config.version,
                "json_only": True,
            }
        )
