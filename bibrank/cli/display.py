"""
Console rendering of reconciliation reports
"""

from rich.console import Console
from rich.table import Table

from bibrank.core.report import ReconciliationReport


class ConsoleReportSink:
    """Report sink printing rich tables"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def show(self, report: ReconciliationReport) -> None:
        if report.is_empty:
            self.console.print("[yellow]No records were reconciled[/yellow]")
            return

        if report.updated:
            table = Table(title="Metadata updated", title_justify="left")
            table.add_column("Source", style="cyan")
            table.add_column("Title")
            for outcome in report.updated:
                table.add_row(outcome.source, outcome.title)
            self.console.print(table)

        if report.unavailable:
            table = Table(title="Could not be updated", title_justify="left")
            table.add_column("Source", style="cyan")
            table.add_column("Stage", style="magenta")
            table.add_column("Reason", style="red")
            table.add_column("Title")
            for outcome in report.unavailable:
                table.add_row(outcome.source, outcome.stage, outcome.reason, outcome.title)
            self.console.print(table)

        if report.classified:
            table = Table(title="Venue ranks", title_justify="left")
            table.add_column("Rank", style="bold green")
            table.add_column("Venue")
            table.add_column("Abbreviation")
            table.add_column("Title")
            for item in report.classified:
                table.add_row(f"CCF-{item.rank}", item.venue, item.abbreviation or "", item.title)
            self.console.print(table)
