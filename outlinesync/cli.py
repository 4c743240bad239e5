"""CLI interface for syncing markdown files to Outline."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import OutlineClient
from .config import SyncConfig, SyncMode, parse_bool
from .exceptions import (
    ChangeSetError,
    OutlineConfigError,
    OutlineSyncError,
    OutputFileError,
)
from .output import OutputFormatter, write_outputs
from .sync import plan_sync, run_sync
from .utils import DEFAULT_BASE_URL, DEFAULT_FILE_PATTERN, split_patterns

logger = logging.getLogger(__name__)


def _connection_options(func: Any) -> Any:
    """Options shared by every command that talks to the remote service."""
    func = click.option(
        "--collection-id",
        "-c",
        envvar="COLLECTION_ID",
        help="ID of the collection to sync into",
    )(func)
    func = click.option(
        "--base-url",
        envvar="OUTLINE_BASE_URL",
        default=DEFAULT_BASE_URL,
        show_default=True,
        help="Base URL of the Outline instance",
    )(func)
    func = click.option(
        "--api-key",
        "-k",
        envvar="OUTLINE_API_KEY",
        help="Outline API key",
    )(func)
    return func


def _require(value: Optional[str], name: str) -> str:
    if not value:
        raise OutlineConfigError(f"{name} is required")
    return value


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="outlinesync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """outlinesync - Mirror markdown files into an Outline collection."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("outlinesync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@_connection_options
@click.option(
    "--sync-mode",
    "-m",
    envvar="SYNC_MODE",
    type=click.Choice([mode.value for mode in SyncMode], case_sensitive=False),
    default=SyncMode.FULL.value,
    show_default=True,
    help="'changed' syncs a git diff (pull requests only), 'full' every file",
)
@click.option(
    "--delete-removed",
    envvar="DELETE_REMOVED",
    default="true",
    show_default=True,
    help="Delete documents of removed files ('false' to disable)",
)
@click.option(
    "--file-pattern",
    "-p",
    envvar="FILE_PATTERN",
    default=DEFAULT_FILE_PATTERN,
    show_default=True,
    help="Glob pattern of files to sync",
)
@click.option(
    "--exclude",
    "-e",
    envvar="EXCLUDE_PATTERNS",
    default="",
    help="Comma separated glob patterns of files to skip",
)
@click.option(
    "--base-ref",
    envvar="GITHUB_BASE_REF",
    help="Branch to diff against in 'changed' mode",
)
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    help="Trigger event; diffs are only used for 'pull_request'",
)
@click.option(
    "--output-file",
    envvar="GITHUB_OUTPUT",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to append key=value result lines to",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Directory containing the files to sync",
)
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.pass_context
def sync(
    ctx: Any,
    api_key: Optional[str],
    base_url: str,
    collection_id: Optional[str],
    sync_mode: str,
    delete_removed: str,
    file_pattern: str,
    exclude: str,
    base_ref: Optional[str],
    event_name: Optional[str],
    output_file: Optional[Path],
    root: Path,
    dry_run: bool,
) -> None:
    """Sync matching files to documents in a collection.

    Each file becomes a document titled with its path. Existing documents
    with that title are updated, new ones are created, and in 'changed'
    mode documents of deleted files are removed.

    Examples:
        outlinesync sync -c COLLECTION_ID
        outlinesync sync -c COLLECTION_ID -p "docs/**/*.md" -e "docs/drafts/*"
        outlinesync sync --sync-mode changed --base-ref main \\
            --event-name pull_request
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        config = SyncConfig(
            api_key=api_key or "",
            collection_id=collection_id or "",
            base_url=base_url or DEFAULT_BASE_URL,
            sync_mode=SyncMode.from_string(sync_mode),
            delete_removed=parse_bool(delete_removed),
            file_pattern=file_pattern or DEFAULT_FILE_PATTERN,
            exclude_patterns=split_patterns(exclude),
            base_ref=base_ref or None,
            event_name=event_name or None,
            output_file=output_file,
            root=root,
        )
    except OutlineConfigError as e:
        out.error(str(e))
        ctx.exit(1)

    out.print_header(config)
    if config.use_diff:
        out.info(f"Detecting changes against {config.diff_base}...")
    else:
        out.info("Running full sync of all matching files...")

    try:
        if dry_run:
            decisions = plan_sync(config, output=out)
            out.print_plan(decisions)
            return
        outcome = run_sync(config, output=out)
    except ChangeSetError as e:
        out.error(f"Could not determine files to sync: {e}")
        ctx.exit(1)
    except OutlineSyncError as e:
        logger.debug("Sync aborted", exc_info=True)
        out.error(f"Fatal error: {e}")
        ctx.exit(1)

    out.print("")
    out.print_outcome(outcome)

    try:
        write_outputs(outcome, config.output_file)
    except OutputFileError as e:
        out.error(str(e))
        ctx.exit(1)

    if not outcome.ok:
        ctx.exit(1)


@main.command(name="ls")
@_connection_options
@click.pass_context
def ls(
    ctx: Any,
    api_key: Optional[str],
    base_url: str,
    collection_id: Optional[str],
) -> None:
    """List the documents of a collection."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        key = _require(api_key, "OUTLINE_API_KEY")
        collection = _require(collection_id, "COLLECTION_ID")
        with OutlineClient(api_key=key, base_url=base_url) as client:
            documents = client.list_documents(collection)
    except OutlineSyncError as e:
        out.error(str(e))
        ctx.exit(1)

    if not documents and not out.json_output:
        out.info("No documents in collection")
        return
    out.print_documents(documents)


@main.command()
@click.argument("title")
@_connection_options
@click.pass_context
def find(
    ctx: Any,
    title: str,
    api_key: Optional[str],
    base_url: str,
    collection_id: Optional[str],
) -> None:
    """Find the document whose title is exactly TITLE.

    TITLE is usually a file path, e.g. docs/guide.md.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        key = _require(api_key, "OUTLINE_API_KEY")
        collection = _require(collection_id, "COLLECTION_ID")
        with OutlineClient(api_key=key, base_url=base_url) as client:
            document = client.find_by_title(title, collection)
    except OutlineSyncError as e:
        out.error(str(e))
        ctx.exit(1)

    if document is None:
        out.error(f"No document titled {title!r}")
        ctx.exit(1)

    out.print_documents([document])


if __name__ == "__main__":
    main()
