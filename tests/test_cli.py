"""Tests for the CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from outlinesync.cli import main
from outlinesync.exceptions import (
    ChangeSetError,
    OutlineAPIError,
    OutlineInvalidResponseError,
)
from outlinesync.models import RemoteDocument, SyncOutcome
from outlinesync.sync import SyncAction, SyncDecision

# Keep the environment of the machine running the tests out of the CLI
CLEAN_ENV = {
    "OUTLINE_API_KEY": None,
    "OUTLINE_BASE_URL": None,
    "COLLECTION_ID": None,
    "SYNC_MODE": None,
    "DELETE_REMOVED": None,
    "FILE_PATTERN": None,
    "EXCLUDE_PATTERNS": None,
    "GITHUB_BASE_REF": None,
    "GITHUB_EVENT_NAME": None,
    "GITHUB_OUTPUT": None,
}


@pytest.fixture
def runner():
    return CliRunner()


def env(**values):
    return {**CLEAN_ENV, **values}


class TestMain:
    """Tests for the command group."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "sync" in result.output
        assert "ls" in result.output
        assert "find" in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    def test_missing_api_key(self, runner):
        with patch("outlinesync.cli.run_sync") as mock_run:
            result = runner.invoke(main, ["sync", "-c", "col"], env=env())

        assert result.exit_code == 1
        assert "OUTLINE_API_KEY is required" in result.output
        mock_run.assert_not_called()

    def test_missing_collection_id(self, runner):
        with patch("outlinesync.cli.run_sync") as mock_run:
            result = runner.invoke(main, ["sync"], env=env(OUTLINE_API_KEY="k"))

        assert result.exit_code == 1
        assert "COLLECTION_ID is required" in result.output
        mock_run.assert_not_called()

    def test_success(self, runner, tmp_path):
        with patch("outlinesync.cli.run_sync") as mock_run:
            mock_run.return_value = SyncOutcome(synced=2, deleted=1)
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 0, result.output
        assert "Outline Markdown Sync" in result.output
        assert "Running full sync" in result.output
        config = mock_run.call_args.args[0]
        assert config.api_key == "k"
        assert config.collection_id == "col"
        assert config.root == tmp_path
        assert config.delete_removed is True

    def test_env_options(self, runner, tmp_path):
        with patch("outlinesync.cli.run_sync") as mock_run:
            mock_run.return_value = SyncOutcome()
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(
                    OUTLINE_API_KEY="k",
                    COLLECTION_ID="col",
                    OUTLINE_BASE_URL="https://docs.example.com/",
                    SYNC_MODE="changed",
                    DELETE_REMOVED="false",
                    FILE_PATTERN="docs/**/*.md",
                    EXCLUDE_PATTERNS="docs/drafts/*",
                    GITHUB_BASE_REF="main",
                    GITHUB_EVENT_NAME="pull_request",
                ),
            )

        assert result.exit_code == 0, result.output
        assert "Detecting changes against origin/main" in result.output
        config = mock_run.call_args.args[0]
        assert config.base_url == "https://docs.example.com"
        assert config.delete_removed is False
        assert config.file_pattern == "docs/**/*.md"
        assert config.exclude_patterns == ("docs/drafts/*",)
        assert config.use_diff is True

    def test_failures_exit_nonzero(self, runner, tmp_path):
        outcome = SyncOutcome(synced=1)
        outcome.record_failure("b.md", "API error 400: invalid")
        with patch("outlinesync.cli.run_sync", return_value=outcome):
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 1
        assert "b.md: API error 400: invalid" in result.output

    def test_writes_outputs(self, runner, tmp_path):
        output_file = tmp_path / "github_output"
        with patch("outlinesync.cli.run_sync", return_value=SyncOutcome(synced=2)):
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(
                    OUTLINE_API_KEY="k",
                    COLLECTION_ID="col",
                    GITHUB_OUTPUT=str(output_file),
                ),
            )

        assert result.exit_code == 0, result.output
        assert output_file.read_text() == (
            "synced_count=2\ndeleted_count=0\nfailed_count=0\n"
        )

    def test_unwritable_outputs(self, runner, tmp_path):
        output_file = tmp_path / "missing" / "github_output"
        with patch("outlinesync.cli.run_sync", return_value=SyncOutcome(synced=2)):
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(
                    OUTLINE_API_KEY="k",
                    COLLECTION_ID="col",
                    GITHUB_OUTPUT=str(output_file),
                ),
            )

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Synced" in result.output
        assert "Cannot write outputs" in result.output

    def test_json_outcome(self, runner, tmp_path):
        with patch("outlinesync.cli.run_sync", return_value=SyncOutcome(synced=3)):
            result = runner.invoke(
                main,
                ["--json", "sync", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["synced"] == 3

    def test_change_set_error(self, runner, tmp_path):
        with patch(
            "outlinesync.cli.run_sync", side_effect=ChangeSetError("git diff failed")
        ):
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 1
        assert "git diff failed" in result.output

    def test_fatal_remote_error(self, runner, tmp_path):
        with patch(
            "outlinesync.cli.run_sync",
            side_effect=OutlineAPIError("API error 401: unauthorized", status_code=401),
        ):
            result = runner.invoke(
                main,
                ["sync", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 1
        assert "Fatal error" in result.output

    def test_dry_run(self, runner, tmp_path):
        decisions = [SyncDecision(SyncAction.CREATE, "a.md", None, "New file")]
        with patch("outlinesync.cli.plan_sync", return_value=decisions) as mock_plan, \
                patch("outlinesync.cli.run_sync") as mock_run:
            result = runner.invoke(
                main,
                ["sync", "--dry-run", "--root", str(tmp_path)],
                env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
            )

        assert result.exit_code == 0, result.output
        mock_plan.assert_called_once()
        mock_run.assert_not_called()
        assert "a.md" in result.output
        assert "create" in result.output


def mock_client_class(mock_class):
    """Make OutlineClient(...) usable as a context manager returning itself."""
    client = MagicMock()
    client.__enter__.return_value = client
    mock_class.return_value = client
    return client


class TestLsCommand:
    """Tests for the ls command."""

    @patch("outlinesync.cli.OutlineClient")
    def test_lists_documents(self, mock_class, runner):
        client = mock_client_class(mock_class)
        client.list_documents.return_value = [
            RemoteDocument(id="1", title="a.md", updated_at="2025-01-15")
        ]

        result = runner.invoke(
            main, ["ls"], env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col")
        )

        assert result.exit_code == 0, result.output
        client.list_documents.assert_called_once_with("col")
        assert "a.md" in result.output

    @patch("outlinesync.cli.OutlineClient")
    def test_empty_collection(self, mock_class, runner):
        client = mock_client_class(mock_class)
        client.list_documents.return_value = []

        result = runner.invoke(
            main, ["ls"], env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col")
        )

        assert result.exit_code == 0
        assert "No documents in collection" in result.output

    @patch("outlinesync.cli.OutlineClient")
    def test_invalid_response(self, mock_class, runner):
        client = mock_client_class(mock_class)
        client.list_documents.side_effect = OutlineInvalidResponseError(
            "Malformed document in response: {'title': 'a.md'}"
        )

        result = runner.invoke(
            main, ["ls"], env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col")
        )

        assert result.exit_code == 1
        assert "Malformed document" in result.output

    def test_requires_collection(self, runner):
        result = runner.invoke(main, ["ls"], env=env(OUTLINE_API_KEY="k"))
        assert result.exit_code == 1
        assert "COLLECTION_ID is required" in result.output


class TestFindCommand:
    """Tests for the find command."""

    @patch("outlinesync.cli.OutlineClient")
    def test_found(self, mock_class, runner):
        client = mock_client_class(mock_class)
        client.find_by_title.return_value = RemoteDocument(id="7", title="docs/a.md")

        result = runner.invoke(
            main,
            ["--json", "find", "docs/a.md"],
            env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
        )

        assert result.exit_code == 0, result.output
        client.find_by_title.assert_called_once_with("docs/a.md", "col")
        assert json.loads(result.output)[0]["id"] == "7"

    @patch("outlinesync.cli.OutlineClient")
    def test_not_found(self, mock_class, runner):
        client = mock_client_class(mock_class)
        client.find_by_title.return_value = None

        result = runner.invoke(
            main,
            ["find", "docs/a.md"],
            env=env(OUTLINE_API_KEY="k", COLLECTION_ID="col"),
        )

        assert result.exit_code == 1
        assert "No document titled" in result.output
