"""Run configuration for outlinesync.

The configuration is parsed once at process start into an immutable
:class:`SyncConfig` and passed explicitly to everything that needs it.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import OutlineConfigError
from .utils import (
    DEFAULT_BASE_URL,
    DEFAULT_FILE_PATTERN,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    split_patterns,
)

# Event name of the only trigger that carries a base ref to diff against
DIFF_EVENT_NAME = "pull_request"


class SyncMode(str, Enum):
    """How the set of files to process is determined."""

    FULL = "full"
    """Sync every matching file, never delete"""

    CHANGED = "changed"
    """Sync added/modified files and delete removed ones, from a git diff"""

    @classmethod
    def from_string(cls, value: Optional[str]) -> "SyncMode":
        """Parse a sync mode, defaulting to FULL for empty values.

        Raises:
            OutlineConfigError: If the value is not a known mode
        """
        if not value:
            return cls.FULL
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise OutlineConfigError(
                f"Invalid SYNC_MODE {value!r} (expected one of: {valid})"
            ) from None


def parse_bool(value: Optional[str], default: bool = True) -> bool:
    """Parse a boolean flag where only ``false`` turns a default-on flag off."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() != "false"


@dataclass(frozen=True)
class SyncConfig:
    """Immutable configuration of a sync run."""

    api_key: str
    collection_id: str
    base_url: str = DEFAULT_BASE_URL
    sync_mode: SyncMode = SyncMode.FULL
    delete_removed: bool = True
    file_pattern: str = DEFAULT_FILE_PATTERN
    exclude_patterns: tuple[str, ...] = ()
    base_ref: Optional[str] = None
    event_name: Optional[str] = None
    output_file: Optional[Path] = None
    root: Path = field(default_factory=Path.cwd)
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.api_key:
            raise OutlineConfigError("OUTLINE_API_KEY is required")
        if not self.collection_id:
            raise OutlineConfigError("COLLECTION_ID is required")
        if self.max_retries < 0:
            raise OutlineConfigError("max_retries must not be negative")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))

    @property
    def use_diff(self) -> bool:
        """True if the change set comes from a git diff against the base ref."""
        return (
            self.sync_mode is SyncMode.CHANGED
            and bool(self.base_ref)
            and self.event_name == DIFF_EVENT_NAME
        )

    @property
    def diff_base(self) -> Optional[str]:
        """Git revision the diff is computed against."""
        return f"origin/{self.base_ref}" if self.base_ref else None

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        root: Optional[Path] = None,
    ) -> "SyncConfig":
        """Parse the configuration from environment variables.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            root: Directory files are read from (defaults to the cwd)

        Returns:
            SyncConfig instance

        Raises:
            OutlineConfigError: If a required value is missing or invalid
        """
        env = os.environ if environ is None else environ
        output_file = env.get("GITHUB_OUTPUT")
        return cls(
            api_key=env.get("OUTLINE_API_KEY", ""),
            collection_id=env.get("COLLECTION_ID", ""),
            base_url=env.get("OUTLINE_BASE_URL") or DEFAULT_BASE_URL,
            sync_mode=SyncMode.from_string(env.get("SYNC_MODE")),
            delete_removed=parse_bool(env.get("DELETE_REMOVED")),
            file_pattern=env.get("FILE_PATTERN") or DEFAULT_FILE_PATTERN,
            exclude_patterns=split_patterns(env.get("EXCLUDE_PATTERNS")),
            base_ref=env.get("GITHUB_BASE_REF") or None,
            event_name=env.get("GITHUB_EVENT_NAME") or None,
            output_file=Path(output_file) if output_file else None,
            root=root if root is not None else Path.cwd(),
        )
