"""Structured logging hooks for CLI commands.

Provides request ID propagation and start/completion logging for CLI
command execution, built on htaguard.core.context.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from htaguard.core.context import get_correlation_id, sync_request_context

__all__ = [
    "get_request_id",
    "cli_command",
    "get_cli_logger",
    "CLILogger",
]

T = TypeVar("T")


def get_request_id() -> str:
    """Get the request ID of the running command, or empty string."""
    return get_correlation_id()


class CLILogger:
    """Structured logger for CLI commands.

    Attaches the current request ID to every record's ``cli_context``.
    """

    def __init__(self, name: str = "htaguard.cli"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, **extra: Any) -> None:
        context = {"request_id": get_request_id(), **extra}
        self._logger.log(level, message, extra={"cli_context": context})

    def debug(self, message: str, **extra: Any) -> None:
        self._log(logging.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log(logging.INFO, message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log(logging.WARNING, message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log(logging.ERROR, message, **extra)


# Global CLI logger
_cli_logger = CLILogger()


def get_cli_logger() -> CLILogger:
    """Get the global CLI logger."""
    return _cli_logger


def cli_command(
    command_name: Optional[str] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for CLI commands with request correlation.

    Automatically:
    - Generates a request ID shared by log records and the response envelope
    - Logs command start/end with duration

    Example:
        >>> @cli_command("check")
        ... def check(path: str):
        ...     ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = command_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            with sync_request_context(prefix="cli"):
                start = time.perf_counter()
                success = True
                error_msg = None

                _cli_logger.debug(f"CLI command started: {name}", command=name)

                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    success = False
                    error_msg = str(e)
                    raise
                finally:
                    duration_ms = (time.perf_counter() - start) * 1000
                    _cli_logger.debug(
                        f"CLI command completed: {name}",
                        command=name,
                        success=success,
                        duration_ms=round(duration_ms, 2),
                        error=error_msg,
                    )

        return wrapper

    return decorator
