"""htaguard CLI - command-line interface for analysis tree validation.

All commands emit structured JSON to stdout for reliable parsing.
"""

from htaguard.cli.config import CLIContext, create_context
from htaguard.cli.logging import (
    CLILogger,
    cli_command,
    get_cli_logger,
    get_request_id,
)
from htaguard.cli.main import cli
from htaguard.cli.output import emit, emit_error, emit_success
from htaguard.cli.registry import get_context, set_context
from htaguard.cli.resilience import handle_keyboard_interrupt

__all__ = [
    # Entry point
    "cli",
    # Context
    "CLIContext",
    "create_context",
    "get_context",
    "set_context",
    # Output
    "emit",
    "emit_error",
    "emit_success",
    # Logging
    "CLILogger",
    "cli_command",
    "get_cli_logger",
    "get_request_id",
    # Resilience
    "handle_keyboard_interrupt",
]
