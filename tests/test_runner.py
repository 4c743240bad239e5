"""Tests for complete sync runs."""

from unittest.mock import Mock

import pytest

from outlinesync.api import OutlineClient
from outlinesync.config import SyncConfig
from outlinesync.exceptions import OutlineNetworkError
from outlinesync.models import ChangeSet, RemoteDocument
from outlinesync.sync import SyncAction, plan_sync, run_sync


@pytest.fixture
def config(tmp_path):
    (tmp_path / "a.md").write_text("# A", encoding="utf-8")
    return SyncConfig(
        api_key="k",
        collection_id="c1",
        root=tmp_path,
        output_file=tmp_path / "outputs.txt",
    )


@pytest.fixture
def mock_client():
    client = Mock(spec=OutlineClient)
    client.list_documents.return_value = [
        RemoteDocument(id="42", title="b.md", collection_id="c1")
    ]
    return client


class TestRunSync:
    """Tests for run_sync."""

    def test_end_to_end(self, config, mock_client):
        change_set = ChangeSet(to_sync=("a.md",), to_delete=("b.md",))

        outcome = run_sync(config, client=mock_client, change_set=change_set)

        mock_client.list_documents.assert_called_once_with("c1")
        mock_client.create_document.assert_called_once_with("a.md", "# A", "c1")
        mock_client.delete_document.assert_called_once_with("42")
        assert (outcome.synced, outcome.deleted, outcome.failed) == (1, 1, 0)
        assert not config.output_file.exists()
        mock_client.close.assert_not_called()

    def test_full_scan(self, config, mock_client):
        outcome = run_sync(config, client=mock_client)

        mock_client.create_document.assert_called_once_with("a.md", "# A", "c1")
        mock_client.delete_document.assert_not_called()
        assert outcome.synced == 1

    def test_nothing_to_process(self, config, mock_client):
        outcome = run_sync(config, client=mock_client, change_set=ChangeSet())

        mock_client.list_documents.assert_not_called()
        assert outcome.ok
        assert (outcome.synced, outcome.deleted, outcome.failed) == (0, 0, 0)

    def test_index_failure_propagates(self, config, mock_client):
        mock_client.list_documents.side_effect = OutlineNetworkError("down")

        with pytest.raises(OutlineNetworkError):
            run_sync(
                config, client=mock_client, change_set=ChangeSet(to_sync=("a.md",))
            )

        mock_client.create_document.assert_not_called()


class TestPlanSync:
    """Tests for plan_sync."""

    def test_plan(self, config, mock_client):
        decisions = plan_sync(config, client=mock_client)

        assert [(d.action, d.path) for d in decisions] == [(SyncAction.CREATE, "a.md")]
        mock_client.create_document.assert_not_called()
