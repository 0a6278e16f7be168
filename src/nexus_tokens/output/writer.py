"""
Output directory handling.

Each successful target is written to ``<dist>/<alias>/<theme>/``::

    dist/
      myq/light/tokens.css
      myq/light/tokens.json
      myq/dark/tokens.css
      ...
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from nexus_tokens.core.engine import TargetResult
from nexus_tokens.core.ir import BuildTarget

from .css import render_css
from .json_format import dumps

logger = logging.getLogger(__name__)

CSS_FILE = "tokens.css"
JSON_FILE = "tokens.json"


@dataclass
class WriteOptions:
    """Serializer options shared by every target."""

    formats: tuple[str, ...] = ("css", "json")
    selector: str = ":root"
    prefix: str = ""
    decompose_composites: bool = False
    with_types: bool = False


def slugify(name: str) -> str:
    """Directory-safe form of an alias name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "default"


def target_dir(dist: Path, target: BuildTarget) -> Path:
    return dist / slugify(target.alias) / target.theme.value


def clean_output(dist: Path) -> None:
    """Remove and recreate the output directory."""
    if dist.exists():
        logger.info("Cleaning %s", dist)
        shutil.rmtree(dist)
    dist.mkdir(parents=True, exist_ok=True)


def write_target(
    dist: Path,
    result: TargetResult,
    options: WriteOptions | None = None,
) -> list[Path]:
    """
    Write the outputs for one built target.

    Args:
        dist: Output root
        result: A successful target result
        options: Formats and serializer settings

    Returns:
        Paths written, in format order

    Raises:
        ValueError: If the result holds no tree
    """
    if result.tree is None:
        raise ValueError(f"Cannot write {result.target}: build did not produce a tree")

    options = options or WriteOptions()
    out_dir = target_dir(dist, result.target)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    if "css" in options.formats:
        css_path = out_dir / CSS_FILE
        css_path.write_text(
            render_css(
                result.tree,
                selector=options.selector,
                prefix=options.prefix,
                target=result.target,
            ),
            encoding="utf-8",
        )
        written.append(css_path)

    if "json" in options.formats:
        json_path = out_dir / JSON_FILE
        json_path.write_text(
            dumps(
                result.tree,
                decompose_composites=options.decompose_composites,
                with_types=options.with_types,
            ),
            encoding="utf-8",
        )
        written.append(json_path)

    for path in written:
        logger.info("Wrote %s", path)
    return written
