"""Data models for remote documents and sync results."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import OutlineInvalidResponseError


@dataclass(frozen=True)
class RemoteDocument:
    """Snapshot of a document stored in the remote collection."""

    id: str
    """Opaque document identifier"""

    title: str
    """Document title (the identity key: the local file path)"""

    text: str = ""
    """Document content"""

    collection_id: Optional[str] = None
    """Collection the document belongs to"""

    url: Optional[str] = None
    """Relative URL of the document, if reported"""

    updated_at: Optional[str] = None
    """ISO timestamp of the last remote update, if reported"""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteDocument":
        """Create a RemoteDocument from a document object in an API response.

        Args:
            data: Document dictionary as returned by the remote service

        Returns:
            RemoteDocument instance

        Raises:
            OutlineInvalidResponseError: If the object is not a document
        """
        if not isinstance(data, dict) or data.get("id") is None:
            raise OutlineInvalidResponseError(
                f"Malformed document in response: {data!r}"
            )
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            text=data.get("text") or "",
            collection_id=data.get("collectionId"),
            url=data.get("url"),
            updated_at=data.get("updatedAt"),
        )


@dataclass(frozen=True)
class ChangeSet:
    """Paths to upsert and paths to delete for one run."""

    to_sync: tuple[str, ...] = ()
    """Files to create or update, in processing order"""

    to_delete: tuple[str, ...] = ()
    """Files whose documents should be deleted, in processing order"""

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples so the set cannot change
        object.__setattr__(self, "to_sync", tuple(self.to_sync))
        object.__setattr__(self, "to_delete", tuple(self.to_delete))

    @property
    def is_empty(self) -> bool:
        return not self.to_sync and not self.to_delete


@dataclass(frozen=True)
class SyncError:
    """A failed item in a sync run."""

    file: str
    error: str


@dataclass
class SyncOutcome:
    """Aggregated result of a reconciliation run.

    Counters only ever grow while a run is in progress. Partial results
    are a normal outcome: successful items stay committed even when
    other items fail.
    """

    synced: int = 0
    deleted: int = 0
    failed: int = 0
    errors: list[SyncError] = field(default_factory=list)

    def record_synced(self) -> None:
        self.synced += 1

    def record_deleted(self) -> None:
        self.deleted += 1

    def record_failure(self, file: str, error: str) -> None:
        self.failed += 1
        self.errors.append(SyncError(file=file, error=error))

    @property
    def ok(self) -> bool:
        """True if no item failed."""
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "synced": self.synced,
            "deleted": self.deleted,
            "failed": self.failed,
            "errors": [{"file": e.file, "error": e.error} for e in self.errors],
        }
