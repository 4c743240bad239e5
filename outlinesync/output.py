"""Console output and pipeline outputs for outlinesync."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .exceptions import OutputFileError
from .models import RemoteDocument, SyncOutcome

if TYPE_CHECKING:
    from .config import SyncConfig
    from .sync.engine import SyncDecision


class OutputFormatter:
    """Formats user-facing output as rich text or JSON."""

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Rich console for stdout (created if not given)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        if not self.quiet and not self.json_output:
            self.console.print(escape(message))

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {escape(message)}")

    def print_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data))

    def print_header(self, config: "SyncConfig") -> None:
        """Print the settings of a run."""
        if self.quiet or self.json_output:
            return
        self.console.print("[bold]Outline Markdown Sync[/bold]")
        self.console.print(f"Base URL: {config.base_url}")
        self.console.print(f"Collection ID: {config.collection_id}")
        self.console.print(f"Sync Mode: {config.sync_mode.value}")
        self.console.print(f"Delete Removed: {config.delete_removed}")
        self.console.print(f"File Pattern: {config.file_pattern}")
        if config.exclude_patterns:
            self.console.print(f"Exclude: {', '.join(config.exclude_patterns)}")
        self.console.print("")

    def print_outcome(self, outcome: SyncOutcome) -> None:
        """Print the run report: counts, then the failed files."""
        if self.json_output:
            self.print_json(outcome.to_dict())
            return

        table = Table(title="Results", show_header=False)
        table.add_column("Result")
        table.add_column("Count", justify="right")
        table.add_row("Synced", str(outcome.synced))
        table.add_row("Deleted", str(outcome.deleted))
        table.add_row("Failed", str(outcome.failed))
        if not self.quiet:
            self.console.print(table)

        # Failures are always reported, even in quiet mode
        if outcome.errors:
            self.err_console.print("[red]Errors:[/red]")
            for err in outcome.errors:
                self.err_console.print(f"  {escape(err.file)}: {escape(err.error)}")

    def print_plan(self, decisions: Sequence["SyncDecision"]) -> None:
        """Print the decisions of a dry run."""
        if self.json_output:
            self.print_json(
                [
                    {
                        "action": d.action.value,
                        "path": d.path,
                        "document_id": d.document.id if d.document else None,
                    }
                    for d in decisions
                ]
            )
            return

        table = Table(title="Sync plan (dry run)")
        table.add_column("Action")
        table.add_column("Path")
        table.add_column("Document")
        for decision in decisions:
            table.add_row(
                decision.action.value,
                decision.path,
                decision.document.id if decision.document else "-",
            )
        self.console.print(table)

    def print_documents(self, documents: Sequence[RemoteDocument]) -> None:
        """Print a list of remote documents."""
        if self.json_output:
            self.print_json(
                [
                    {
                        "id": d.id,
                        "title": d.title,
                        "url": d.url,
                        "updated_at": d.updated_at,
                    }
                    for d in documents
                ]
            )
            return

        table = Table()
        table.add_column("ID")
        table.add_column("Title")
        table.add_column("Updated")
        for document in documents:
            table.add_row(document.id, document.title, document.updated_at or "-")
        self.console.print(table)


def write_outputs(outcome: SyncOutcome, output_file: Optional[Path]) -> None:
    """Append the run counts as ``key=value`` lines for pipeline consumption.

    Args:
        outcome: Result of the run
        output_file: File to append to (nothing is written if None)

    Raises:
        OutputFileError: If the file cannot be written
    """
    if output_file is None:
        return
    try:
        with open(output_file, "a", encoding="utf-8") as f:
            f.write(f"synced_count={outcome.synced}\n")
            f.write(f"deleted_count={outcome.deleted}\n")
            f.write(f"failed_count={outcome.failed}\n")
    except OSError as e:
        raise OutputFileError(f"Cannot write outputs to {output_file}: {e}") from e
