"""
BibRank main CLI interface using Typer
"""

import traceback
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bibrank.bibtex.bibtex_parser import BibTeXRecordParser
from bibrank.bibtex.fetcher import HttpFetcher
from bibrank.cli.display import ConsoleReportSink
from bibrank.core.errors import BibRankError, PersistenceError
from bibrank.core.orchestrator import ReconciliationOrchestrator
from bibrank.core.record_store import JsonRecordStore
from bibrank.core.venue_index import VenueIndex
from bibrank.core.venue_matcher import VenueMatcher, rank_from_extra
from bibrank.utils.config import Config, load_sources
from bibrank.utils.logging_config import error_handler, get_logger, setup_logging

console = Console()
app = typer.Typer(
    name="bibrank",
    help="Bibliographic record reconciliation with CCF venue ranking",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def fail(message: str) -> None:
    """Print an error and exit with status 1"""
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def load_index(dataset: Path | None) -> VenueIndex:
    try:
        return VenueIndex.from_file(dataset)
    except BibRankError as e:
        fail(str(e))


@app.command()
def reconcile(
    library: Path = typer.Argument(
        ...,
        help="JSON library file",
    ),
    ids: list[str] = typer.Option(
        None,
        "--id",
        help="Record id to reconcile (repeatable, default: all records)",
    ),
    sources_file: Path = typer.Option(
        None,
        "--sources",
        help="JSON file with source definitions",
        exists=True,
        dir_okay=False,
    ),
    timeout: float = typer.Option(
        5.0,
        "--timeout",
        help="Fetch timeout in seconds",
    ),
    exclude_types: list[str] = typer.Option(
        None,
        "--exclude-type",
        help="Record type to skip (repeatable, default: computerProgram)",
    ),
    dataset: Path = typer.Option(
        None,
        "--dataset",
        help="Venue ranking dataset (JSON)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output",
    ),
):
    """
    Reconcile library records against dblp and Google Scholar.
    """
    if not library.is_file():
        fail(f"Library file not found: {library}")

    settings = {
        "fetch_timeout": timeout,
        "venue_dataset": dataset,
        "verbose": verbose,
    }
    if exclude_types:
        settings["excluded_types"] = tuple(exclude_types)

    try:
        if sources_file:
            settings["sources"] = load_sources(sources_file)
        config = Config(**settings)
    except ValueError as e:
        fail(str(e))

    # Set up logging
    setup_logging(config, config.log_file if config.verbose else None)
    log = get_logger("cli")

    index = load_index(config.venue_dataset)

    try:
        store = JsonRecordStore(library)
        if ids:
            records = [store.get(record_id) for record_id in ids]
        else:
            records = store.records()
    except PersistenceError as e:
        fail(str(e))
    except KeyError as e:
        fail(f"Unknown record id: {e.args[0]}")

    console.print(f"[bold blue]BibRank v{__import__('bibrank').__version__}[/bold blue]")
    console.print(f"Reconciling {len(records)} record(s) from {library}")
    console.print()

    error_handler.reset_counts()
    orchestrator = ReconciliationOrchestrator(
        matcher=VenueMatcher(index),
        store=store,
        fetcher=HttpFetcher(config.user_agent),
        parser=BibTeXRecordParser(),
        config=config,
        sink=ConsoleReportSink(console),
    )

    try:
        report = orchestrator.reconcile(records)
    except Exception as e:
        log.exception("Reconciliation aborted")
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print(traceback.format_exc())
        raise typer.Exit(1) from e

    summary = error_handler.get_error_summary()
    console.print()
    console.print(
        f"[bold green]Completed: {len(report.updated)} update(s), "
        f"{len(report.classified)} venue rank(s)[/bold green]"
    )
    if summary["total_errors"]:
        per_source = ", ".join(f"{name}: {count}" for name, count in summary["source_counts"].items())
        console.print(f"[yellow]Warning: {summary['total_errors']} lookup(s) failed ({per_source})[/yellow]")


@app.command()
def classify(
    venues: list[str] = typer.Argument(
        ...,
        help="Venue name(s) to classify",
    ),
    dataset: Path = typer.Option(
        None,
        "--dataset",
        help="Venue ranking dataset (JSON)",
    ),
):
    """
    Classify venue names against the CCF ranking list.
    """
    matcher = VenueMatcher(load_index(dataset))

    for venue in venues:
        result = matcher.match(venue)
        if result is None:
            console.print(f"{escape(venue)} => [yellow]no classification[/yellow]")
            continue

        line = f"{escape(venue)} => [bold green]CCF-{result.rank}[/bold green] {escape(result.matched_name)}"
        if result.matched_abbreviation:
            line += f" (via {escape(result.matched_abbreviation)})"
        console.print(line)


@app.command()
def ranks(
    library: Path = typer.Argument(
        ...,
        help="JSON library file",
    ),
):
    """
    List library records with their recorded venue rank.
    """
    if not library.is_file():
        fail(f"Library file not found: {library}")

    try:
        records = JsonRecordStore(library).records()
    except PersistenceError as e:
        fail(str(e))

    table = Table(title=str(library), title_justify="left")
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Rank", style="bold green")
    table.add_column("Title")

    for record in records:
        table.add_row(record.id, record.type, rank_from_extra(record.extra) or "-", record.title)

    console.print(table)


if __name__ == "__main__":
    app()
