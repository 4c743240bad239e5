"""Change set computation from git diffs or a full filesystem scan."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from ..config import SyncConfig
from ..exceptions import ChangeSetError
from ..models import ChangeSet
from ..utils import SKIPPED_DIRECTORIES, filter_paths

logger = logging.getLogger(__name__)


def _git_diff_names(base: str, diff_filter: str, cwd: Path) -> list[str]:
    """Run ``git diff --name-only --relative`` against ``base...HEAD``.

    Paths are relative to ``cwd`` and only changes below ``cwd`` are listed,
    so they use the same identity keys as a full scan of ``cwd``.

    Args:
        base: Base revision (e.g. ``origin/main``)
        diff_filter: Value for ``--diff-filter`` (e.g. ``AM`` or ``D``)
        cwd: Repository working directory

    Returns:
        Paths reported by git, in git's order

    Raises:
        ChangeSetError: If git is missing or the diff fails
    """
    command = [
        "git",
        "diff",
        "--name-only",
        "--relative",
        "-z",
        f"--diff-filter={diff_filter}",
        f"{base}...HEAD",
    ]
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except FileNotFoundError as e:
        raise ChangeSetError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise ChangeSetError(
            f"git diff against {base} failed: {stderr or e.returncode}"
        ) from e

    return [name for name in result.stdout.split("\0") if name]


def get_changed_files(
    base: str,
    pattern: str,
    exclude: Sequence[str] = (),
    cwd: Optional[Path] = None,
) -> list[str]:
    """Get files added or modified since ``base`` that match the filters."""
    names = _git_diff_names(base, "AM", cwd or Path.cwd())
    return filter_paths(names, pattern, exclude)


def get_deleted_files(
    base: str,
    pattern: str,
    exclude: Sequence[str] = (),
    cwd: Optional[Path] = None,
) -> list[str]:
    """Get files deleted since ``base`` that match the filters."""
    names = _git_diff_names(base, "D", cwd or Path.cwd())
    return filter_paths(names, pattern, exclude)


def get_all_matching_files(
    root: Path,
    pattern: str,
    exclude: Sequence[str] = (),
) -> list[str]:
    """Get every file below ``root`` matching the filters.

    ``.git`` and ``node_modules`` directories are never descended into.

    Args:
        root: Directory to scan
        pattern: Include glob pattern
        exclude: Exclude glob patterns

    Returns:
        Sorted relative POSIX paths
    """
    found: list[str] = []

    def scan(directory: Path) -> None:
        try:
            items = sorted(directory.iterdir())
        except PermissionError:
            logger.warning(f"Permission denied: {directory}")
            return
        for item in items:
            if item.is_dir():
                if item.name not in SKIPPED_DIRECTORIES and not item.is_symlink():
                    scan(item)
            elif item.is_file():
                found.append(item.relative_to(root).as_posix())

    scan(root)
    return filter_paths(sorted(found), pattern, exclude)


def build_change_set(config: SyncConfig) -> ChangeSet:
    """Compute the change set for a run.

    In diff mode, added/modified files are synced and deleted files are
    deleted (only if ``delete_removed`` is enabled). Otherwise every
    matching file is synced and nothing is deleted, since a full scan has
    no prior state to diff against.

    Args:
        config: Run configuration

    Returns:
        ChangeSet for the run

    Raises:
        ChangeSetError: If the git diff fails
    """
    pattern = config.file_pattern
    exclude = config.exclude_patterns

    if config.use_diff and config.diff_base:
        logger.info(f"Detecting changes against {config.diff_base}")
        to_sync = get_changed_files(config.diff_base, pattern, exclude, config.root)
        to_delete = (
            get_deleted_files(config.diff_base, pattern, exclude, config.root)
            if config.delete_removed
            else []
        )
        return ChangeSet(to_sync=tuple(to_sync), to_delete=tuple(to_delete))

    logger.info("Running full sync of all matching files")
    to_sync = get_all_matching_files(config.root, pattern, exclude)
    return ChangeSet(to_sync=tuple(to_sync))
