"""
catalogpdf sync - Run one batch against the remote file store.

The batch runs on a background thread; this command polls its progress
until the run completes or fails.
"""

import time
import uuid
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from catalogpdf.cli.common import load_project_config
from catalogpdf.config.settings import endpoint_from_config
from catalogpdf.exceptions import ConfigurationError
from catalogpdf.jobs.batch import BatchJob
from catalogpdf.jobs.factory import PROCESSOR_KINDS, build_processor
from catalogpdf.progress import ProgressTracker

console = Console()

POLL_INTERVAL_S = 0.5


def sync(
    kind: str = typer.Option("product-sheet", "--kind", "-k", help=f"Document kind: {', '.join(PROCESSOR_KINDS)}"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    Download source XML files, render them to PDF and upload the results.
    """
    config = load_project_config(project_dir, env, verbose)
    try:
        endpoint = endpoint_from_config(config)
        endpoint.validate()
        processor = build_processor(config, kind)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    tracker = ProgressTracker()
    key = uuid.uuid4().hex[:8]
    thread = BatchJob(endpoint, processor, tracker).start(key)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.completed}/{task.total}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Syncing {endpoint.host}...", total=None)
        while True:
            state = tracker.get(key)
            if state.total:
                label = state.current_item_label or "starting"
                progress.update(task, total=state.total, completed=state.current, description=f"Processed {label}")
            if state.is_terminal or not thread.is_alive():
                break
            time.sleep(POLL_INTERVAL_S)

    thread.join()
    # The worker may have finished between the last poll and the liveness check
    state = tracker.get(key)
    tracker.remove(key)

    if not state.is_terminal:
        console.print("[red]Batch failed:[/red] worker stopped without reporting a result")
        raise typer.Exit(1)

    if state.failed:
        console.print(f"[red]Batch failed:[/red] {state.error}")
        raise typer.Exit(1)
    console.print(f"[green]Batch completed:[/green] {state.total} document(s) processed")
