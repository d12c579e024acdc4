"""htaguard CLI entry point.

JSON-only output for tree generators, editors and CI gates.
"""

import click

from htaguard.cli.config import create_context
from htaguard.cli.registry import register_all_commands


@click.group()
@click.option(
    "--config",
    "config_file",
    envvar="HTAGUARD_CONFIG_FILE",
    type=click.Path(exists=False),
    help="Path to an htaguard.toml config file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Write logs to stderr at this level",
)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """htaguard - validate and score hierarchical task analysis trees.

    All commands output JSON for reliable parsing.
    """
    ctx.ensure_object(dict)
    cli_ctx = create_context(config_file=config_file)
    if log_level:
        cli_ctx.config.log_level = log_level.upper()
        cli_ctx.config.setup_logging()
    ctx.obj["cli_context"] = cli_ctx


# Register all command groups
register_all_commands(cli)


if __name__ == "__main__":
    cli()
