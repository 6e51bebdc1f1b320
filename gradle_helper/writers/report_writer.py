"""
Console output for validation reports.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.enums import Severity
from ..core.report import ValidationReport

SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


class ConsoleReportFormatter:
    """Prints a validation report as a table followed by a verdict line."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def build_table(self, report: ValidationReport) -> Table:
        title = f"Validation of {report.source_file}" if report.source_file else "Validation"
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Severity", width=8)
        table.add_column("Rule", style="bold", no_wrap=True)
        table.add_column("Field", no_wrap=True)
        table.add_column("Message")

        for issue in report.sorted_issues():
            style = SEVERITY_STYLES[issue.severity]
            table.add_row(
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.rule,
                issue.field or "",
                escape(issue.message),
            )
        return table

    def print_report(self, report: ValidationReport) -> None:
        if report.issues:
            self.console.print(self.build_table(report))

        if report.accepted:
            self.console.print(f"[green]✔[/green] {report.summary()}")
        else:
            self.console.print(f"[red]✘[/red] {report.summary()}")
