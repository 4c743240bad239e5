"""End-to-end sync runs: change set, index, reconciliation, outputs."""

import logging
from typing import Optional

from ..api import OutlineClient
from ..config import SyncConfig
from ..document_index import build_document_index
from ..models import ChangeSet, SyncOutcome
from ..output import OutputFormatter
from .changes import build_change_set
from .engine import SyncDecision, SyncEngine

logger = logging.getLogger(__name__)


def create_client(config: SyncConfig) -> OutlineClient:
    """Create an API client from the run configuration."""
    return OutlineClient(
        api_key=config.api_key,
        base_url=config.base_url,
        max_retries=config.max_retries,
        retry_delay=config.retry_delay,
        timeout=config.timeout,
    )


def _announce_change_set(change_set: ChangeSet, out: OutputFormatter) -> None:
    out.info(f"Files to sync: {len(change_set.to_sync)}")
    out.info(f"Files to delete: {len(change_set.to_delete)}")
    out.print("")


def run_sync(
    config: SyncConfig,
    output: Optional[OutputFormatter] = None,
    client: Optional[OutlineClient] = None,
    change_set: Optional[ChangeSet] = None,
) -> SyncOutcome:
    """Run a complete sync.

    Args:
        config: Run configuration
        output: Output formatter for progress messages
        client: API client (created from ``config`` if not given)
        change_set: Precomputed change set (computed from ``config`` if
            not given)

    Returns:
        SyncOutcome of the run

    Raises:
        ChangeSetError: If the change set cannot be computed
        OutlineSyncError: If the document index cannot be built
    """
    out = output or OutputFormatter(quiet=True)

    if change_set is None:
        change_set = build_change_set(config)
    _announce_change_set(change_set, out)

    if change_set.is_empty:
        out.info("No files to process")
        return SyncOutcome()

    owns_client = client is None
    api = client or create_client(config)
    try:
        out.info("Building document index from Outline...")
        index = build_document_index(api, config.collection_id)
        out.info(f"Found {len(index)} existing documents in collection")

        engine = SyncEngine(
            api, config.collection_id, output=out, base_path=config.root
        )
        outcome = engine.reconcile(change_set, index, config.delete_removed)
    finally:
        if owns_client:
            api.close()

    logger.info(
        f"Sync finished: {outcome.synced} synced, {outcome.deleted} deleted, "
        f"{outcome.failed} failed"
    )
    return outcome


def plan_sync(
    config: SyncConfig,
    output: Optional[OutputFormatter] = None,
    client: Optional[OutlineClient] = None,
) -> list[SyncDecision]:
    """Compute the decisions of a sync without changing anything.

    The document index is still fetched from the remote service.

    Args:
        config: Run configuration
        output: Output formatter for progress messages
        client: API client (created from ``config`` if not given)

    Returns:
        Ordered list of decisions
    """
    out = output or OutputFormatter(quiet=True)
    change_set = build_change_set(config)
    _announce_change_set(change_set, out)

    owns_client = client is None
    api = client or create_client(config)
    try:
        index = build_document_index(api, config.collection_id)
    finally:
        if owns_client:
            api.close()

    engine = SyncEngine(
        api, config.collection_id, output=out, base_path=config.root
    )
    return engine.plan(change_set, index, config.delete_removed)
