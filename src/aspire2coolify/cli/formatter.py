# src/aspire2coolify/cli/formatter.py
from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from aspire2coolify.core.models import AspireApp, Operation
from aspire2coolify.core.engine import DeploymentSummary
from aspire2coolify.parser.context import ParseError

# Initialize the Rich consoles for terminal output
console = Console()
err_console = Console(stderr=True)


class ReportFormatter:
    """
    ReportFormatter: the visual side of the CLI.
    Renders parse diagnostics, resource summaries and deployment reports.
    """

    def emit(self, text: str):
        """Raw output (JSON, scripts); never wrapped or highlighted."""
        console.print(text, soft_wrap=True, markup=False, highlight=False, emoji=False)

    def show_messages(self, errors: list, warnings: List[str], title: str = "Errors"):
        if errors:
            err_console.print(f"\n[bold red]{title}:[/bold red]")
            for error in errors:
                message = error.message if isinstance(error, ParseError) else str(error)
                err_console.print(f"  - {message}", markup=False)
        if warnings:
            err_console.print("\n[bold yellow]Warnings:[/bold yellow]")
            for warning in warnings:
                err_console.print(f"  - {warning}", markup=False)

    def print_model_summary(self, app: AspireApp):
        table = Table(title="Extracted Resources", show_header=True, header_style="bold magenta")
        table.add_column("Category", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Names", style="dim")

        rows = [
            ("Databases", app.databases),
            ("Storage", app.storage),
            ("Services", app.services),
            ("Applications", app.applications),
        ]
        for label, records in rows:
            table.add_row(label, str(len(records)), Text(", ".join(r.name for r in records)))
        table.add_row("References", str(len(app.references)), "")
        console.print(table)

    def print_operations(self, operations: List[Operation]):
        table = Table(title="Planned Coolify Operations", show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Category")
        table.add_column("Name", style="cyan")
        table.add_column("Endpoint")

        for i, op in enumerate(operations, 1):
            table.add_row(str(i), op.category, Text(op.display_name), Text(f"{op.method} {op.endpoint}"))
        err_console.print(table)

    def print_deploy_report(self, summary: DeploymentSummary):
        table = Table(title="Deployment Report", show_lines=True, header_style="bold magenta")
        table.add_column("Resource", style="cyan")
        table.add_column("Category", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Detail")

        for r in summary.results:
            if r.skipped:
                status, color = "SKIPPED", "yellow"
            elif r.success:
                status, color = "CREATED", "green"
            else:
                status, color = "FAILED", "red"
            detail = r.error if not r.success else (r.identifier or "")
            # Remote error text is shown verbatim, never as markup
            table.add_row(Text(r.name), r.category, f"[{color}]{status}[/{color}]", Text(detail or ""))

        console.print(table)
        console.print(Panel(
            f"[bold white]Deployment Summary[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Successful: [green]{summary.successful_count}[/green]\n"
            f"Skipped:    [yellow]{summary.skipped_count}[/yellow]\n"
            f"Failed:     [red]{summary.failed_count}[/red]",
            border_style="dim"
        ))
