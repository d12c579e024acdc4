"""Unit tests for the htaguard CLI.

Tests cover:
- validate check (valid, invalid, --strict, input rejection)
- validate fix (apply, --dry-run, --no-backup)
- validate stats
- version and --config handling
"""

import json

import pytest
from click.testing import CliRunner

import htaguard.config as config_module
from htaguard.cli.main import cli


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Isolate each test from ambient htaguard config."""
    for name in (
        "HTAGUARD_CONFIG_FILE",
        "HTAGUARD_LOG_LEVEL",
        "HTAGUARD_MAX_INPUT_BYTES",
        "HTAGUARD_MAX_NODES",
        "HTAGUARD_MAX_DEPTH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def negative_tree(valid_tree):
    valid_tree[0]["children"][0]["children"][0]["children"][0]["estimatedHours"] = -5
    return valid_tree


class TestVersion:
    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["data"]["name"] == "htaguard"
        assert data["meta"]["version"] == "response-v2"


class TestValidateCheck:
    """Tests for validate check."""

    def test_valid_tree(self, cli_runner, valid_tree, write_tree):
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["data"]["is_valid"] is True
        assert data["data"]["score"] == 100
        assert data["data"]["issues"] == []
        assert data["data"]["tree_path"] == str(path)
        assert data["meta"]["request_id"].startswith("cli_")

    def test_invalid_tree_reports_issues(self, cli_runner, negative_tree, write_tree):
        """An invalid tree is still a successful check; validity is in the payload."""
        path = write_tree(negative_tree)
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["data"]["is_valid"] is False
        assert data["data"]["error_count"] == 1
        issue = data["data"]["issues"][0]
        assert issue["code"] == "NEGATIVE_ESTIMATE"
        assert issue["node_id"] == "t1"
        assert issue["path"] == "0.0.0.0"

    def test_strict_fails_invalid_tree(self, cli_runner, negative_tree, write_tree):
        path = write_tree(negative_tree)
        result = cli_runner.invoke(cli, ["validate", "check", "--strict", str(path)])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["data"]["is_valid"] is False

    def test_strict_passes_valid_tree(self, cli_runner, valid_tree, write_tree):
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "check", "--strict", str(path)])
        assert result.exit_code == 0

    def test_accepts_structure_wrapper(self, cli_runner, valid_tree, write_tree):
        path = write_tree({"title": "Regional plan", "structure": valid_tree})
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["is_valid"] is True

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["validate", "check", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["success"] is False
        assert data["data"]["error_code"] == "TREE_NOT_FOUND"
        assert data["data"]["error_type"] == "not_found"

    def test_rejects_non_list(self, cli_runner, write_tree):
        path = write_tree({"id": "o1"})
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["data"]["error_code"] == "INVALID_TREE_TYPE"
        assert data["data"]["error_type"] == "validation"
        assert "remediation" in data["data"]

    def test_rejects_invalid_json(self, cli_runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{")
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 1
        assert json.loads(result.output)["data"]["error_code"] == "INVALID_JSON"

    def test_rejects_non_finite_estimate(self, cli_runner, valid_tree, write_tree):
        valid_tree[0]["estimatedHours"] = float("inf")
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 1
        data = json.loads(result.output)["data"]
        assert data["error_code"] == "INVALID_NODE_STRUCTURE"
        assert data["error_type"] == "validation"

    def test_rejects_oversized_input(self, cli_runner, valid_tree, write_tree, monkeypatch):
        monkeypatch.setenv("HTAGUARD_MAX_INPUT_BYTES", "64")
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "check", str(path)])

        assert result.exit_code == 1
        assert json.loads(result.output)["data"]["error_code"] == "INPUT_TOO_LARGE"

    def test_config_limits_apply(self, cli_runner, valid_tree, write_tree, tmp_path):
        config = tmp_path / "strict.toml"
        config.write_text("[limits]\nmax_nodes = 2\n")
        path = write_tree(valid_tree)

        result = cli_runner.invoke(
            cli, ["--config", str(config), "validate", "check", str(path)]
        )

        assert result.exit_code == 1
        assert json.loads(result.output)["data"]["error_code"] == "TREE_TOO_LARGE"

    def test_config_thresholds_apply(self, cli_runner, valid_tree, write_tree, tmp_path):
        config = tmp_path / "shallow.toml"
        config.write_text("[thresholds]\nmax_depth = 1\n")
        path = write_tree(valid_tree)

        result = cli_runner.invoke(
            cli, ["--config", str(config), "validate", "check", str(path)]
        )

        assert result.exit_code == 0
        codes = [i["code"] for i in json.loads(result.output)["data"]["issues"]]
        assert "EXCESSIVE_DEPTH" in codes


class TestValidateFix:
    """Tests for validate fix."""

    def test_applies_fixes_with_backup(self, cli_runner, negative_tree, write_tree):
        path = write_tree(negative_tree)
        result = cli_runner.invoke(cli, ["validate", "fix", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["applied_count"] == 1
        assert data["applied_actions"][0]["id"] == "estimate.clamp:0.0.0.0"
        assert data["is_valid_after"] is True
        assert data["backup_path"] == f"{path}.backup"

        fixed = json.loads(path.read_text())
        assert fixed[0]["children"][0]["children"][0]["children"][0]["estimatedHours"] == 0
        backup = json.loads((path.parent / "tree.json.backup").read_text())
        assert backup == negative_tree

    def test_keeps_extra_node_keys(self, cli_runner, negative_tree, write_tree):
        task = negative_tree[0]["children"][0]["children"][0]["children"][0]
        task["status"] = "in_progress"
        task["assignee"] = "Dana"
        path = write_tree(negative_tree)

        result = cli_runner.invoke(cli, ["validate", "fix", "--no-backup", str(path)])

        assert result.exit_code == 0
        fixed = json.loads(path.read_text())[0]["children"][0]["children"][0]["children"][0]
        assert fixed["status"] == "in_progress"
        assert fixed["assignee"] == "Dana"
        assert fixed["estimatedHours"] == 0
        assert "metadata" not in fixed

    def test_dry_run(self, cli_runner, negative_tree, write_tree):
        path = write_tree(negative_tree)
        original = path.read_text()
        result = cli_runner.invoke(cli, ["validate", "fix", "--dry-run", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["dry_run"] is True
        assert data["applied_count"] == 0
        assert [a["id"] for a in data["planned_actions"]] == ["estimate.clamp:0.0.0.0"]
        assert data["is_valid_after"] is True
        assert data["backup_path"] is None
        assert path.read_text() == original
        assert not (path.parent / "tree.json.backup").exists()

    def test_no_backup(self, cli_runner, negative_tree, write_tree):
        path = write_tree(negative_tree)
        result = cli_runner.invoke(cli, ["validate", "fix", "--no-backup", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["backup_path"] is None
        assert not (path.parent / "tree.json.backup").exists()

    def test_nothing_to_fix(self, cli_runner, valid_tree, write_tree):
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "fix", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["applied_count"] == 0
        assert data["message"] == "No auto-fixable issues found"
        assert data["score_after"] == data["score_before"] == 100


class TestValidateStats:
    def test_stats(self, cli_runner, valid_tree, write_tree):
        path = write_tree(valid_tree)
        result = cli_runner.invoke(cli, ["validate", "stats", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["node_count"] == 5
        assert data["leaf_count"] == 2
        assert data["type_counts"]["task"] == 2
        assert data["total_hours"] == 24.0
        assert data["dependency_count"] == 1

    def test_stats_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["validate", "stats", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert json.loads(result.output)["data"]["error_code"] == "TREE_NOT_FOUND"
