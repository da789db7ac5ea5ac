# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.markup import escape

from ..domain.errors import DocstoreError
from ..domain.models import ScanResult, SortKey, SortOrder
from ..services import DocumentStore
from .panel import StatusPanel, mib

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(help="docstore CLI - document store and streaming tree scan")
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _fail(e: Exception) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    raise typer.Exit(code=1)


@app.command()
def find(
    root: Path = typer.Argument(
        Path("."),
        envvar="DOCSTORE_ROOT",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Directory to scan",
    ),
    limit: int = typer.Option(-1, "--limit", help="Stop after N entries; -1 scans everything."),
    sort: SortKey = typer.Option(SortKey.NAME, "--sort", help="Sort key inside each directory."),
    order: SortOrder = typer.Option(SortOrder.DESC, "--order", help="Sort direction."),
    skip_stat: bool = typer.Option(False, "--skip-stat", help="Do not stat entries (sizes are 0)."),
    skip_symlinks: bool = typer.Option(False, "--skip-symlinks", help="Leave symbolic links out."),
    quiet: bool = typer.Option(False, "--quiet", help="Do not draw the live status panel."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Stream a scan of ROOT, showing running totals, then list per-entry errors.
    """
    if verbose:
        setup_logging(verbose=True)
        logger.debug("Verbose logging enabled")
    if limit < -1:
        raise typer.BadParameter("--limit must be -1 or >= 0")

    store = DocumentStore(root)
    panel = StatusPanel()
    last: Optional[ScanResult] = None
    console.print(f"root: {escape(str(root))}")

    try:
        results = store.find(
            ".",
            limit=limit,
            sort=sort,
            order=order,
            skip_stat=skip_stat,
            skip_symbolic_link=skip_symlinks,
        )
        if quiet:
            for result in results:
                panel.update(result)
                last = result
        else:
            with Live(panel.render(), console=console, refresh_per_second=8) as live:
                for result in results:
                    panel.update(result)
                    last = result
                    live.update(panel.render(result))
    except (DocstoreError, OSError) as e:
        _fail(e)

    if last is not None:
        typer.echo(
            f"Scanned {panel.count} entries; dirs {mib(last.total_size.dirs)}; "
            f"files {mib(last.total_size.files)}; errors {len(last.errors)}"
        )
        for path, error in last.errors.items():
            typer.echo(f"{path}: {error}")
    typer.echo("Done.")


@app.command("ls")
def list_dir(
    uri: str = typer.Argument(".", help="Directory URI relative to --root"),
    root: Path = typer.Option(
        Path("."),
        "--root",
        envvar="DOCSTORE_ROOT",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Store root directory",
    ),
    skip_stat: bool = typer.Option(False, "--skip-stat", help="Do not stat entries."),
):
    """
    List one directory of the store, directories first.
    """
    store = DocumentStore(root)
    try:
        entries = store.list_dir(uri, skip_stat=skip_stat)
    except (DocstoreError, OSError) as e:
        _fail(e)
        return

    for entry in entries:
        if entry.stat.error is not None:
            typer.echo(f"! {entry.name}: {entry.stat.error}")
            continue
        kind = "d" if entry.is_directory else "-"
        suffix = "/" if entry.is_directory else ""
        typer.echo(f"{kind} {entry.stat.size:>12} {entry.name}{suffix}")
