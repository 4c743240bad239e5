"""outlinesync - mirror a tree of markdown files into an Outline collection."""

from .api import OutlineClient
from .config import SyncConfig, SyncMode
from .document_index import DocumentIndex, build_document_index
from .exceptions import (
    ChangeSetError,
    LocalIOError,
    OutlineAPIError,
    OutlineConfigError,
    OutlineInvalidResponseError,
    OutlineNetworkError,
    OutlineRateLimitError,
    OutlineSyncError,
    OutputFileError,
)
from .models import ChangeSet, RemoteDocument, SyncError, SyncOutcome

__all__ = [
    "OutlineClient",
    "SyncConfig",
    "SyncMode",
    "DocumentIndex",
    "build_document_index",
    "ChangeSet",
    "RemoteDocument",
    "SyncError",
    "SyncOutcome",
    "ChangeSetError",
    "LocalIOError",
    "OutlineAPIError",
    "OutlineConfigError",
    "OutlineInvalidResponseError",
    "OutlineNetworkError",
    "OutlineRateLimitError",
    "OutlineSyncError",
    "OutputFileError",
]
