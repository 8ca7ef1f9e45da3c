"""Rich renderer for reconciliation results.

Transforms SDK report objects into formatted Rich tables.
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from withholdcheck.sdk.reconcile import other_subtotal
from withholdcheck.sdk.schemas import CalculationReport, ReconciliationResult, TaxCategory

_ORDER = {category: i for i, category in enumerate(TaxCategory)}


def render_report(console: Console, report: CalculationReport) -> None:
    """Render a retry-loop report: attempts, then the result or the failure.

    Args:
        console: Rich Console instance
        report: Output of calculate_taxes() / acquire_with_retry()
    """
    _render_attempts(console, report)

    if report:
        render_result(console, report.result)
        return

    console.print(Panel(
        f"[red]Sources did not agree after {report.attempt_count} attempt(s) "
        f"({report.reason}).[/red]",
        title="Failed",
        border_style="red",
    ))


def render_result(console: Console, result: ReconciliationResult) -> None:
    """Render the comparison table and the merged breakdown."""
    _render_comparisons(console, result)
    _render_merged(console, result)


def _render_attempts(console: Console, report: CalculationReport) -> None:
    if report.attempt_count <= 1 and report:
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("attempt", style="dim")
    table.add_column("outcome")

    styles = {"success": "green", "mismatch": "yellow", "source_failure": "red"}
    for outcome in report.attempts:
        detail = outcome.reason or ""
        if outcome.source:
            detail = f"{outcome.source}: {detail}"
        style = styles[outcome.kind]
        table.add_row(f"#{outcome.attempt}", f"[{style}]{outcome.kind}[/{style}] {detail}".rstrip())

    console.print(Panel(table, title="Attempts", border_style="dim"))


def _render_comparisons(console: Console, result: ReconciliationResult) -> None:
    table = Table(
        title=f"Source comparison (tolerance {result.tolerance_pct:g} pts)",
        box=box.SIMPLE,
    )
    table.add_column("Category")
    table.add_column("Source A", justify="right")
    table.add_column("Source B", justify="right")
    table.add_column("A %", justify="right")
    table.add_column("B %", justify="right")
    table.add_column("Δ pts", justify="right")
    table.add_column("OK", justify="center")

    for c in result.comparisons:
        status = "[green]✓[/green]" if c.within else "[red]✗[/red]"
        table.add_row(
            c.category.label,
            f"${c.amount_a:,.2f}",
            f"${c.amount_b:,.2f}",
            f"{c.pct_a:.2f}%",
            f"{c.pct_b:.2f}%",
            f"{c.deviation:.2f}",
            status,
        )

    console.print(table)


def _render_merged(console: Console, result: ReconciliationResult) -> None:
    merged = result.merged
    table = Table(title=f"Breakdown on ${result.salary:,.2f}", box=box.SIMPLE)
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("% of salary", justify="right")
    table.add_column("Note", style="dim")

    for category in sorted(merged.amounts, key=_ORDER.get):
        if category in result.filled:
            note = "[cyan]from source B[/cyan]"
        elif category in merged.missing:
            note = "not found"
        else:
            note = ""
        table.add_row(
            category.label,
            f"${merged.amounts[category]:,.2f}",
            f"{result.percentages[category]:.2f}%",
            note,
        )

    other = other_subtotal(merged)
    if other is not None:
        table.add_section()
        table.add_row(
            "Other (SDI + FLI)",
            f"${other:,.2f}",
            f"{other / result.salary * 100:.2f}%",
            "subtotal",
        )

    console.print(table)
