"""JSON output helpers for the htaguard CLI.

This module provides the sole output mechanism for the CLI. Every command
emits a response-v2 envelope built by htaguard.core.responses, so callers
can parse results without scraping text.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, Sequence, NoReturn

from htaguard.core.responses import ErrorCode, ErrorType, error_response, success_response


def emit(data: Any) -> None:
    """Emit minified JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    print(json.dumps(data, separators=(",", ":"), default=str))


def emit_error(
    message: str,
    code: ErrorCode | str = ErrorCode.INTERNAL_ERROR,
    *,
    error_type: ErrorType | str = ErrorType.INTERNAL,
    remediation: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> NoReturn:
    """Emit error JSON to stderr and exit with code 1.

    Args:
        message: Human-readable error description.
        code: Error code in SCREAMING_SNAKE_CASE (e.g., TREE_NOT_FOUND).
        error_type: Error category for routing (validation, not_found, internal).
        remediation: Actionable guidance for resolving the error.
        details: Optional additional error context.

    Raises:
        SystemExit: Always exits with code 1.
    """
    response = error_response(
        message=message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
        details=details,
    )
    print(json.dumps(asdict(response), separators=(",", ":"), default=str), file=sys.stderr)
    sys.exit(1)


def emit_success(
    data: Any,
    *,
    warnings: Sequence[str] | None = None,
    telemetry: Mapping[str, Any] | None = None,
    meta: Mapping[str, Any] | None = None,
) -> None:
    """Emit success response envelope to stdout.

    Args:
        data: The operation-specific payload; non-dict data is wrapped
            under a ``result`` key.
        warnings: Non-fatal issues to surface in meta.warnings.
        telemetry: Timing/performance metadata.
        meta: Additional metadata to merge into meta object.
    """
    payload = data if isinstance(data, dict) else {"result": data}
    response = success_response(
        data=payload,
        warnings=warnings,
        telemetry=telemetry,
        meta=meta,
    )
    emit(asdict(response))
