"""Reconciliation engine: turns a change set into document operations."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..api import OutlineClient
from ..exceptions import LocalIOError
from ..models import ChangeSet, RemoteDocument, SyncOutcome
from ..output import OutputFormatter

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken for a path."""

    CREATE = "create"
    """Create a new document from the local file"""

    UPDATE = "update"
    """Overwrite the existing document with the local file"""

    DELETE = "delete"
    """Delete the document of a removed file"""

    SKIP = "skip"
    """Removed file has no document, nothing to do"""


@dataclass(frozen=True)
class SyncDecision:
    """Represents a decision about how to reconcile a path."""

    action: SyncAction
    """Action to take"""

    path: str
    """Local file path (also the document title)"""

    document: Optional[RemoteDocument] = None
    """Matching remote document, if any"""

    reason: str = ""
    """Human-readable reason for this decision"""


class SyncEngine:
    """Reconciles local files against the documents of one collection.

    Items are processed one at a time. A failing item is recorded in the
    outcome and never stops the rest of the batch. Nothing is rolled back:
    re-running converges because matching is done by path.
    """

    def __init__(
        self,
        client: OutlineClient,
        collection_id: str,
        output: Optional[OutputFormatter] = None,
        base_path: Optional[Path] = None,
        reader: Optional[Callable[[str], str]] = None,
    ):
        """Initialize sync engine.

        Args:
            client: API client
            collection_id: Collection new documents are created in
            output: Output formatter for displaying progress
            base_path: Directory relative file paths are read from
                (defaults to the current directory)
            reader: Optional function returning the content of a path;
                replaces reading from ``base_path``
        """
        self.client = client
        self.collection_id = collection_id
        self.output = output or OutputFormatter(quiet=True)
        self.base_path = base_path or Path(".")
        self._reader = reader or self._read_file

    def _read_file(self, path: str) -> str:
        """Read a local file as UTF-8 text.

        Raises:
            LocalIOError: If the file cannot be read or decoded
        """
        try:
            return (self.base_path / path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LocalIOError(path, str(e)) from e

    def plan(
        self,
        change_set: ChangeSet,
        index: Mapping[str, RemoteDocument],
        delete_removed: bool = True,
    ) -> list[SyncDecision]:
        """Decide what to do for each path without touching anything.

        All ``to_sync`` paths come first, in order, then the ``to_delete``
        paths in order if ``delete_removed`` is set. A path present in both
        lists is planned twice (sync, then delete).

        Args:
            change_set: Paths to sync and to delete
            index: Remote documents keyed by title
            delete_removed: Whether deletions are processed at all

        Returns:
            Ordered list of decisions
        """
        decisions: list[SyncDecision] = []

        for path in change_set.to_sync:
            document = index.get(path)
            if document is not None:
                decisions.append(
                    SyncDecision(SyncAction.UPDATE, path, document, "Document exists")
                )
            else:
                decisions.append(
                    SyncDecision(SyncAction.CREATE, path, None, "New file")
                )

        if delete_removed:
            for path in change_set.to_delete:
                document = index.get(path)
                if document is not None:
                    decisions.append(
                        SyncDecision(SyncAction.DELETE, path, document, "File removed")
                    )
                else:
                    decisions.append(
                        SyncDecision(
                            SyncAction.SKIP, path, None, "No document for removed file"
                        )
                    )

        return decisions

    def reconcile(
        self,
        change_set: ChangeSet,
        index: Mapping[str, RemoteDocument],
        delete_removed: bool = True,
    ) -> SyncOutcome:
        """Create, update and delete documents so the collection matches.

        Args:
            change_set: Paths to sync and to delete
            index: Remote documents keyed by title, built once for this run
            delete_removed: Whether deletions are processed at all

        Returns:
            SyncOutcome with counts and per-file errors
        """
        outcome = SyncOutcome()
        decisions = self.plan(change_set, index, delete_removed)

        deletions = sum(
            1 for d in decisions if d.action in (SyncAction.DELETE, SyncAction.SKIP)
        )
        announced_deletions = False

        for decision in decisions:
            if decision.action in (SyncAction.CREATE, SyncAction.UPDATE):
                self._sync_file(decision, outcome)
            else:
                if not announced_deletions:
                    self.output.info(f"\nProcessing {deletions} deletions...")
                    announced_deletions = True
                self._delete_document(decision, outcome)

        return outcome

    def _sync_file(self, decision: SyncDecision, outcome: SyncOutcome) -> None:
        """Create or update the document for one file."""
        path = decision.path
        self.output.info(f"Processing: {path}")
        try:
            content = self._reader(path)

            if decision.action == SyncAction.UPDATE and decision.document:
                document_id = decision.document.id
                self.output.info(f"  Updating existing document: {document_id}")
                self.client.update_document(document_id, path, content)
            else:
                self.output.info("  Creating new document")
                self.client.create_document(path, content, self.collection_id)

            outcome.record_synced()
        except Exception as e:
            logger.warning(f"Failed to sync {path}: {e}")
            self.output.error(f"  Failed: {e}")
            outcome.record_failure(path, str(e))

    def _delete_document(self, decision: SyncDecision, outcome: SyncOutcome) -> None:
        """Delete the document of one removed file, if there is one."""
        path = decision.path
        self.output.info(f"Deleting: {path}")

        if decision.action == SyncAction.SKIP or decision.document is None:
            self.output.info("  Document not found in Outline, skipping")
            return

        try:
            self.client.delete_document(decision.document.id)
            outcome.record_deleted()
            self.output.info(f"  Deleted document: {decision.document.id}")
        except Exception as e:
            logger.warning(f"Failed to delete {path}: {e}")
            self.output.error(f"  Failed to delete: {e}")
            outcome.record_failure(path, str(e))
