"""
Build commands.

- build: resolve every (alias, theme) target and write CSS/JSON outputs
- layers: show the effective layer order for one target
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from nexus_tokens.core.config import load_config
from nexus_tokens.core.engine import BuildReport, CompositionEngine
from nexus_tokens.core.errors import TokenError
from nexus_tokens.core.ir import BuildTarget, Theme
from nexus_tokens.output.writer import (
    CSS_FILE,
    WriteOptions,
    clean_output,
    target_dir,
    write_target,
)
from nexus_tokens.validation import validate_file

from .utils import console, fail, layer_source_for


def _print_report(report: BuildReport) -> None:
    table = Table(title="Build Targets")
    table.add_column("Target", style="cyan")
    table.add_column("Status")
    table.add_column("Tokens", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Detail")

    for result in report:
        if result.ok:
            status = "[green]ok[/green]"
            detail = f"{len(result.layers)} layers"
        else:
            status = "[red]failed[/red]"
            detail = result.error.message if result.error else ""
        table.add_row(
            str(result.target),
            status,
            str(result.token_count),
            str(len(result.warnings)),
            detail,
        )
    console.print(table)


def build_command(
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="tokens.toml or project directory (default: current)"
    ),
    alias: list[str] | None = typer.Option(
        None, "--alias", "-a", help="Build only these aliases (repeatable)"
    ),
    theme: list[Theme] | None = typer.Option(
        None, "--theme", "-t", help="Build only these themes (repeatable)"
    ),
    clean: bool = typer.Option(True, "--clean/--no-clean", help="Empty the output directory first"),
    validate: bool = typer.Option(False, "--validate", help="Validate written CSS files"),
) -> None:
    """Resolve all build targets and write CSS and JSON outputs."""
    try:
        config = load_config(config_path)
        source = layer_source_for(config)
        targets = config.targets(alias or None, [t.value for t in theme] if theme else None)
        if not targets:
            raise fail("No build targets: set [build] aliases in tokens.toml or pass --alias")

        engine = CompositionEngine(config.to_engine_config())
        report = engine.build_all(source.layer_order(), source, targets)
    except TokenError as e:
        raise fail(str(e)) from e

    dist = config.output.dist
    if clean:
        clean_output(dist)

    options = WriteOptions(
        formats=tuple(config.output.formats),
        selector=config.output.selector,
        prefix=config.output.prefix,
        decompose_composites=config.output.decompose_composites,
    )
    for result in report.succeeded:
        write_target(dist, result, options)

    _print_report(report)
    console.print(f"Output: {dist}")

    invalid = 0
    if validate and "css" in options.formats:
        for result in report.succeeded:
            css_path = target_dir(dist, result.target) / CSS_FILE
            validation = validate_file(css_path)
            if not validation.ok:
                invalid += 1
                console.print(f"[red]{css_path}: {len(validation.issues)} issues[/red]")
                for issue in validation.issues:
                    console.print(f"   {issue}")

    if not report.ok or invalid:
        raise typer.Exit(code=1)


def layers_command(
    alias: str = typer.Option(..., "--alias", "-a", help="Brand alias"),
    theme: Theme = typer.Option(Theme.LIGHT, "--theme", "-t", help="Color theme"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="tokens.toml or project directory (default: current)"
    ),
) -> None:
    """Show the effective layer order for one target."""
    try:
        config = load_config(config_path)
        source = layer_source_for(config)
        engine = CompositionEngine(config.to_engine_config())
        target = BuildTarget(alias=alias, theme=theme)
        order = engine.effective_layers(source.layer_order(), target)
    except TokenError as e:
        raise fail(str(e)) from e

    table = Table(title=f"Layers for {target}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Layer", style="cyan")
    for index, name in enumerate(order, start=1):
        table.add_row(str(index), name)
    console.print(table)
