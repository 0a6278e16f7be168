"""
Shared CLI helpers: console, logging setup, version and source selection.
"""

from __future__ import annotations

import logging
import os

import typer
from rich.console import Console

from nexus_tokens._version import get_version
from nexus_tokens.core.config import ProjectConfig
from nexus_tokens.core.loader import DirectoryLayerSource, LayerSource, load_document

console = Console()
err_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from --verbose or the LOG_LEVEL env var."""
    if verbose:
        level = logging.DEBUG
    else:
        log_level = os.getenv("LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, log_level, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nexus-tokens version {get_version()}")
        raise typer.Exit()


def fail(message: str) -> typer.Exit:
    """Print an error and return the Exit to raise."""
    err_console.print(f"[red]Error: {message}[/red]")
    return typer.Exit(code=1)


def layer_source_for(config: ProjectConfig) -> LayerSource:
    """Layer source described by the [tokens] section."""
    if config.tokens.document is not None:
        return load_document(config.tokens.document, exclude_kinds=config.tokens.exclude_kinds)
    source = config.tokens.source or config.root / "tokens"
    return DirectoryLayerSource(source, exclude_kinds=config.tokens.exclude_kinds)
