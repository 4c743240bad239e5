"""Sync engine for outlinesync - change sets, reconciliation and runs."""

from .changes import (
    build_change_set,
    get_all_matching_files,
    get_changed_files,
    get_deleted_files,
)
from .engine import SyncAction, SyncDecision, SyncEngine
from .runner import create_client, plan_sync, run_sync

__all__ = [
    "SyncEngine",
    "SyncAction",
    "SyncDecision",
    "build_change_set",
    "get_all_matching_files",
    "get_changed_files",
    "get_deleted_files",
    "create_client",
    "plan_sync",
    "run_sync",
]
