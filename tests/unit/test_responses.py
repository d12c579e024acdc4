"""
Unit tests for htaguard.core.responses.

Tests the response-v2 envelope helpers used by every CLI command.
"""

from dataclasses import asdict

from htaguard.core.context import sync_request_context
from htaguard.core.responses import (
    ErrorCode,
    ErrorType,
    ToolResponse,
    error_response,
    success_response,
)


class TestSuccessResponse:
    def test_envelope(self):
        response = success_response({"is_valid": True}, score=100)

        assert isinstance(response, ToolResponse)
        assert response.success is True
        assert response.error is None
        assert response.data == {"is_valid": True, "score": 100}
        assert response.meta == {"version": "response-v2"}

    def test_meta_fields(self):
        response = success_response(
            {},
            warnings=["large tree"],
            telemetry={"duration_ms": 3.2},
            meta={"dry_run": True},
        )
        assert response.meta == {
            "version": "response-v2",
            "warnings": ["large tree"],
            "telemetry": {"duration_ms": 3.2},
            "dry_run": True,
        }

    def test_request_id_from_context(self):
        with sync_request_context(correlation_id="cli_123456abcdef"):
            response = success_response({})
        assert response.meta["request_id"] == "cli_123456abcdef"

    def test_explicit_request_id_wins(self):
        with sync_request_context(correlation_id="cli_ctx"):
            response = success_response({}, request_id="req_explicit")
        assert response.meta["request_id"] == "req_explicit"


class TestErrorResponse:
    def test_defaults(self):
        response = error_response("Something broke")

        assert response.success is False
        assert response.error == "Something broke"
        assert response.data == {
            "error_code": "INTERNAL_ERROR",
            "error_type": "internal",
        }

    def test_enum_codes_and_remediation(self):
        response = error_response(
            "Tree file not found: plan.json",
            error_code=ErrorCode.TREE_NOT_FOUND,
            error_type=ErrorType.NOT_FOUND,
            remediation="Check the path to the tree JSON file",
            details={"tree_path": "plan.json"},
        )

        assert asdict(response)["data"] == {
            "error_code": "TREE_NOT_FOUND",
            "error_type": "not_found",
            "remediation": "Check the path to the tree JSON file",
            "details": {"tree_path": "plan.json"},
        }

    def test_string_codes(self):
        response = error_response(
            "Tree too deep", error_code="TREE_TOO_DEEP", error_type="validation"
        )
        assert response.data["error_code"] == "TREE_TOO_DEEP"
        assert response.data["error_type"] == "validation"


class TestErrorCode:
    def test_members_match_emitted_codes(self):
        """The enum holds the file, input-gate and fallback codes the CLI emits."""
        assert {code.value for code in ErrorCode} == {
            "TREE_NOT_FOUND",
            "INPUT_TOO_LARGE",
            "INVALID_JSON",
            "INVALID_TREE_TYPE",
            "TREE_TOO_LARGE",
            "TREE_TOO_DEEP",
            "INVALID_NODE_STRUCTURE",
            "INTERNAL_ERROR",
        }

    def test_lookup_by_value(self):
        assert ErrorCode("TREE_TOO_DEEP") is ErrorCode.TREE_TOO_DEEP
