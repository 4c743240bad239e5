"""Tests for run configuration."""

from pathlib import Path

import pytest

from outlinesync.config import SyncConfig, SyncMode, parse_bool
from outlinesync.exceptions import OutlineConfigError

BASE_ENV = {"OUTLINE_API_KEY": "key", "COLLECTION_ID": "col"}


class TestSyncConfigFromEnv:
    """Tests for SyncConfig.from_env."""

    def test_defaults(self, tmp_path):
        config = SyncConfig.from_env(BASE_ENV, root=tmp_path)

        assert config.api_key == "key"
        assert config.collection_id == "col"
        assert config.base_url == "https://app.getoutline.com"
        assert config.sync_mode is SyncMode.FULL
        assert config.delete_removed is True
        assert config.file_pattern == "**/*.md"
        assert config.exclude_patterns == ()
        assert config.output_file is None
        assert config.root == tmp_path
        assert config.max_retries == 3

    def test_all_values(self):
        env = {
            **BASE_ENV,
            "OUTLINE_BASE_URL": "https://docs.example.com/",
            "SYNC_MODE": "changed",
            "DELETE_REMOVED": "false",
            "FILE_PATTERN": "docs/**/*.md",
            "EXCLUDE_PATTERNS": "docs/drafts/*,docs/tmp/*",
            "GITHUB_BASE_REF": "main",
            "GITHUB_EVENT_NAME": "pull_request",
            "GITHUB_OUTPUT": "/tmp/out",
        }

        config = SyncConfig.from_env(env)

        assert config.base_url == "https://docs.example.com"
        assert config.sync_mode is SyncMode.CHANGED
        assert config.delete_removed is False
        assert config.file_pattern == "docs/**/*.md"
        assert config.exclude_patterns == ("docs/drafts/*", "docs/tmp/*")
        assert config.base_ref == "main"
        assert config.output_file == Path("/tmp/out")
        assert config.use_diff is True
        assert config.diff_base == "origin/main"

    def test_missing_api_key(self):
        with pytest.raises(OutlineConfigError, match="OUTLINE_API_KEY is required"):
            SyncConfig.from_env({"COLLECTION_ID": "col"})

    def test_missing_collection_id(self):
        with pytest.raises(OutlineConfigError, match="COLLECTION_ID is required"):
            SyncConfig.from_env({"OUTLINE_API_KEY": "key"})

    def test_invalid_sync_mode(self):
        with pytest.raises(OutlineConfigError, match="Invalid SYNC_MODE"):
            SyncConfig.from_env({**BASE_ENV, "SYNC_MODE": "sometimes"})

    def test_immutable(self):
        config = SyncConfig.from_env(BASE_ENV)
        with pytest.raises(AttributeError):
            config.api_key = "other"  # type: ignore[misc]


class TestUseDiff:
    """Diffs are only used in changed mode for pull requests with a base ref."""

    @pytest.mark.parametrize(
        "mode,base_ref,event,expected",
        [
            (SyncMode.CHANGED, "main", "pull_request", True),
            (SyncMode.CHANGED, None, "pull_request", False),
            (SyncMode.CHANGED, "main", "push", False),
            (SyncMode.FULL, "main", "pull_request", False),
        ],
    )
    def test_use_diff(self, mode, base_ref, event, expected):
        config = SyncConfig(
            api_key="k",
            collection_id="c",
            sync_mode=mode,
            base_ref=base_ref,
            event_name=event,
        )
        assert config.use_diff is expected


class TestParseBool:
    """Tests for parse_bool."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, True),
            ("", True),
            ("true", True),
            ("yes", True),
            ("false", False),
            ("FALSE", False),
            (" false ", False),
        ],
    )
    def test_only_false_disables(self, value, expected):
        assert parse_bool(value) is expected
