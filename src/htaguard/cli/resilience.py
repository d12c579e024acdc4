"""Interrupt handling for CLI commands."""

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


def handle_keyboard_interrupt(
    cleanup: Optional[Callable[[], None]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to gracefully handle Ctrl+C in CLI commands.

    Catches KeyboardInterrupt, optionally runs cleanup, and exits
    with code 130.

    Args:
        cleanup: Optional cleanup function to run on interrupt.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if cleanup:
                    cleanup()
                # 128 + SIGINT
                sys.exit(130)

        return wrapper

    return decorator
