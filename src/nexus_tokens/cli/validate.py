"""
Validate command: check generated CSS files for malformed token values.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from nexus_tokens.validation import ValidationReport, validate_paths

from .utils import console, fail


def _print_file_report(path: Path, report: ValidationReport) -> None:
    console.print(f"\n[bold]{path}[/bold]  ({report.total} tokens)")
    for category, count in report.checked.items():
        console.print(f"  [green]✓[/green] {category} tokens: {count}")

    if report.ok and not report.warnings:
        console.print("  [green]All tokens are valid. No issues found.[/green]")
    if report.issues:
        console.print(f"  [red]ISSUES ({len(report.issues)}):[/red]")
        for issue in report.issues:
            console.print(f"     {issue}")
    if report.warnings:
        console.print(f"  [yellow]WARNINGS ({len(report.warnings)}):[/yellow]")
        for warning in report.warnings:
            console.print(f"     {warning}")

    table = Table(title="Token Breakdown", show_header=True)
    table.add_column("Category")
    table.add_column("Count", justify="right")
    for category, count in report.breakdown().items():
        table.add_row(category, str(count))
    console.print(table)


def validate_command(
    paths: list[Path] = typer.Argument(..., help="CSS files or output directories"),
) -> None:
    """Validate generated tokens.css files."""
    missing = [p for p in paths if not p.exists()]
    if missing:
        raise fail(f"Not found: {', '.join(str(p) for p in missing)}")

    summary = validate_paths(paths)
    if not summary.reports:
        raise fail("No CSS files found")

    for path, report in summary.reports.items():
        _print_file_report(path, report)

    if not summary.ok:
        raise typer.Exit(code=1)
