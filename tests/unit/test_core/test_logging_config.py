"""
Unit tests for htaguard.core.logging_config and htaguard.core.context.
"""

import io
import json
import logging

import pytest

from htaguard.core.context import (
    generate_correlation_id,
    get_correlation_id,
    get_start_time,
    sync_request_context,
)
from htaguard.core.logging_config import (
    ROOT_LOGGER,
    configure_logging,
    get_logger,
)
from htaguard.core.validation import validate_tree


@pytest.fixture
def restore_logger():
    """Restore the htaguard logger's handlers and level after a test."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestRequestContext:
    """Tests for correlation id handling."""

    def test_generated_ids_are_prefixed_and_unique(self):
        first = generate_correlation_id("cli")
        second = generate_correlation_id("cli")
        assert first.startswith("cli_")
        assert len(first) == len("cli_") + 12
        assert first != second

    def test_context_sets_and_resets(self):
        assert get_correlation_id() == ""
        with sync_request_context(correlation_id="req_fixed") as ctx:
            assert get_correlation_id() == "req_fixed"
            assert get_start_time() == ctx.start_time
            assert ctx.to_dict()["correlation_id"] == "req_fixed"
        assert get_correlation_id() == ""
        assert get_start_time() == 0.0


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_structured_output_carries_context(self, restore_logger):
        stream = io.StringIO()
        configure_logging(level="DEBUG", format="structured", stream=stream)

        with sync_request_context(correlation_id="req_abc"):
            validate_tree([])

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        completed = [line for line in lines if line["message"] == "Tree validation completed"]
        assert len(completed) == 1
        entry = completed[0]
        assert entry["level"] == "DEBUG"
        assert entry["logger"] == "htaguard.core.validation"
        assert entry["correlation_id"] == "req_abc"
        assert entry["extra"]["is_valid"] is True
        assert entry["extra"]["score"] == 50

    def test_human_output(self, restore_logger):
        stream = io.StringIO()
        configure_logging(level="INFO", format="human", stream=stream)

        get_logger("core.validation").info("hello")

        output = stream.getvalue()
        assert "[INFO]" in output
        assert "core.validation: hello" in output

    def test_handlers_replaced_not_stacked(self, restore_logger):
        configure_logging(stream=io.StringIO())
        logger = configure_logging(stream=io.StringIO())
        assert len(logger.handlers) == 1

    def test_get_logger_namespaces(self):
        assert get_logger("cli").name == "htaguard.cli"
        assert get_logger("htaguard.core").name == "htaguard.core"
