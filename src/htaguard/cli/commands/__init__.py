"""CLI command groups."""

from htaguard.cli.commands.validate import validate_group

__all__ = [
    "validate_group",
]
