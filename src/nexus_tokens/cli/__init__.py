"""
nexus-tokens CLI.

Commands:

- build: resolve tokens for every (alias, theme) target and write outputs
- layers: print the effective layer order for a target
- validate: check generated CSS files
- version: print the installed version
"""

from __future__ import annotations

import typer

from .build import build_command, layers_command
from .utils import configure_logging, get_version, version_callback
from .validate import validate_command

app = typer.Typer(
    help="Resolve layered design tokens into CSS and JSON per brand and theme",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    configure_logging(verbose)


app.command("build")(build_command)
app.command("layers")(layers_command)
app.command("validate")(validate_command)


@app.command("version")
def version_command() -> None:
    """Print the installed version."""
    typer.echo(get_version())


def main() -> None:
    app()


__all__ = ["app", "main"]
