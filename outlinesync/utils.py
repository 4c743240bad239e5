"""Utility functions and constants for outlinesync."""

import fnmatch
from collections.abc import Iterable
from typing import Optional

# =============================================================================
# Constants for remote operations
# =============================================================================

DEFAULT_BASE_URL: str = "https://app.getoutline.com"

# Page size used when listing documents in a collection
DEFAULT_PAGE_SIZE: int = 100

# Retry configuration for rate limits and transient network errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

DEFAULT_TIMEOUT: float = 30.0  # seconds

# =============================================================================
# Constants for local files
# =============================================================================

DEFAULT_FILE_PATTERN: str = "**/*.md"

# Directories never descended into during a full scan
SKIPPED_DIRECTORIES: frozenset[str] = frozenset({".git", "node_modules"})


# =============================================================================
# Glob matching utilities
# =============================================================================


def _match_segments(parts: list[str], pattern_parts: list[str]) -> bool:
    """Match path segments against pattern segments, expanding ``**``."""
    if not pattern_parts:
        return not parts

    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        # Zero or more directories
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))

    if not parts:
        return False
    return fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def matches_glob(path: str, pattern: str) -> bool:
    """Check whether a relative POSIX path matches a glob pattern.

    Matching is done segment by segment with ``fnmatch``, so ``*`` and ``?``
    never cross a ``/``. A ``**`` segment matches zero or more directories
    anywhere in the pattern: ``**/*.md`` matches both ``README.md`` and
    ``docs/guide.md``, and ``docs/**/*.md`` matches ``docs/a.md``.

    Args:
        path: Relative path using forward slashes
        pattern: Glob pattern

    Returns:
        True if the path matches
    """
    return _match_segments(path.split("/"), pattern.split("/"))


def filter_paths(
    paths: Iterable[str],
    include: str,
    exclude: Optional[Iterable[str]] = None,
) -> list[str]:
    """Keep paths matching ``include`` and none of ``exclude``, in order.

    Args:
        paths: Relative paths to filter
        include: Glob pattern a path must match
        exclude: Glob patterns a path must not match

    Returns:
        Filtered list preserving the input order
    """
    excluded = list(exclude or [])
    return [
        path
        for path in paths
        if matches_glob(path, include)
        and not any(matches_glob(path, pattern) for pattern in excluded)
    ]


def split_patterns(value: Optional[str]) -> tuple[str, ...]:
    """Split a comma or newline separated pattern list.

    Args:
        value: Raw value (e.g. from an environment variable)

    Returns:
        Tuple of non-empty, stripped patterns
    """
    if not value:
        return ()
    parts = value.replace("\n", ",").split(",")
    return tuple(part.strip() for part in parts if part.strip())
