"""Request context for log correlation.

Holds the correlation ID and start time of the current operation in context
variables so log records and response envelopes can pick them up without
threading them through every call.

Usage:
    from htaguard.core.context import sync_request_context, get_correlation_id

    with sync_request_context() as ctx:
        print(ctx.correlation_id)  # e.g., "req_a1b2c3d4e5f6"
"""

from __future__ import annotations

import secrets
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

__all__ = [
    "correlation_id_var",
    "start_time_var",
    "RequestContext",
    "generate_correlation_id",
    "sync_request_context",
    "get_correlation_id",
    "get_start_time",
]

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
"""Request correlation ID for tracing an operation across components."""

start_time_var: ContextVar[float] = ContextVar("start_time", default=0.0)
"""Operation start time as Unix timestamp."""


def generate_correlation_id(prefix: str = "req") -> str:
    """Generate a unique correlation ID with optional prefix.

    Format: {prefix}_{12_hex_chars}
    Example: "req_a1b2c3d4e5f6"
    """
    return f"{prefix}_{secrets.token_hex(6)}"


@dataclass
class RequestContext:
    """Snapshot of the current request context."""

    correlation_id: str = ""
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time <= 0:
            return 0.0
        return (time.time() - self.start_time) * 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "start_time": self.start_time,
            "elapsed_ms": round(self.elapsed_ms, 2),
        }


@contextmanager
def sync_request_context(
    *,
    correlation_id: Optional[str] = None,
    prefix: str = "req",
) -> Generator[RequestContext, None, None]:
    """Set correlation ID and start time for the duration of the block.

    Args:
        correlation_id: Request ID (auto-generated if None)
        prefix: Prefix for generated IDs

    Yields:
        RequestContext snapshot
    """
    corr_id = correlation_id or generate_correlation_id(prefix)
    start = time.time()

    token_corr = correlation_id_var.set(corr_id)
    token_start = start_time_var.set(start)

    try:
        yield RequestContext(correlation_id=corr_id, start_time=start)
    finally:
        correlation_id_var.reset(token_corr)
        start_time_var.reset(token_start)


def get_correlation_id() -> str:
    """Current correlation ID, or empty string if not set."""
    return correlation_id_var.get()


def get_start_time() -> float:
    """Start time of the current operation, or 0.0 if not set."""
    return start_time_var.get()
