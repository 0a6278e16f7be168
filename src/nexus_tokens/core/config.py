"""
Build configuration.

Two levels:

- :class:`EngineConfig` is the explicit value handed to the composition
  engine (layer rules, enabled normalizers, strictness). Nothing is read from
  process-wide state.
- :class:`ProjectConfig` is loaded from ``tokens.toml`` and describes a whole
  project build (sources, targets, outputs). It produces an EngineConfig.

Example tokens.toml::

    [tokens]
    source = "tokens"
    exclude_kinds = ["typography"]

    [build]
    aliases = ["myQ", "Chamberlain"]
    themes = ["light", "dark"]
    neutral_alias = "Mode"

    [normalize]
    enabled = ["opacity", "fontWeight", "dimension"]
    match_paths = false

    [output]
    dist = "dist"
    formats = ["css", "json"]
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ManifestError
from .ir import BuildTarget, Theme, TokenKind
from .normalizers import NORMALIZER_NAMES, Normalizer, build_normalizers

logger = logging.getLogger(__name__)

CONFIG_FILE = "tokens.toml"


# =============================================================================
# Engine configuration
# =============================================================================


@dataclass(frozen=True)
class LayerRules:
    """How layer names are classified during layer selection.

    Attributes:
        neutral_alias: Alias layer kept for every target and applied before
            the target's own alias layer
        alias_marker: Substring (case-insensitive) identifying an alias group
        palette_marker: Substring (case-insensitive) identifying a palette group
        aliases: Known brand aliases, used to classify single-segment layer names
    """

    neutral_alias: str = "Mode"
    alias_marker: str = "alias"
    palette_marker: str = "palette"
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class EngineConfig:
    """Everything the composition engine needs besides the layers themselves."""

    rules: LayerRules = field(default_factory=LayerRules)
    normalizers: tuple[Normalizer, ...] = field(default_factory=lambda: build_normalizers())
    strict_references: bool = False
    max_workers: int = 1


# =============================================================================
# Project configuration (tokens.toml)
# =============================================================================


@dataclass
class TokensConfig:
    """Where token layers come from."""

    source: Path | None = None  # directory of layer files
    document: Path | None = None  # single combined tokens document
    exclude_kinds: list[TokenKind] = field(default_factory=list)


@dataclass
class TargetsConfig:
    """Which build targets to produce and how layers are classified."""

    aliases: list[str] = field(default_factory=list)
    themes: list[Theme] = field(default_factory=lambda: [Theme.LIGHT, Theme.DARK])
    neutral_alias: str = "Mode"
    alias_marker: str = "alias"
    palette_marker: str = "palette"
    strict_references: bool = False
    max_workers: int = 1


@dataclass
class NormalizeConfig:
    """Which value normalizers run after reference resolution."""

    enabled: list[str] = field(default_factory=lambda: list(NORMALIZER_NAMES))
    match_paths: bool = False


@dataclass
class OutputConfig:
    """How resolved trees are written."""

    dist: Path = Path("dist")
    formats: list[str] = field(default_factory=lambda: ["css", "json"])
    prefix: str = ""
    selector: str = ":root"
    decompose_composites: bool = False


@dataclass
class ProjectConfig:
    """Project configuration loaded from tokens.toml."""

    root: Path
    tokens: TokensConfig = field(default_factory=TokensConfig)
    build: TargetsConfig = field(default_factory=TargetsConfig)
    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_engine_config(self) -> EngineConfig:
        rules = LayerRules(
            neutral_alias=self.build.neutral_alias,
            alias_marker=self.build.alias_marker,
            palette_marker=self.build.palette_marker,
            aliases=tuple(self.build.aliases),
        )
        return EngineConfig(
            rules=rules,
            normalizers=build_normalizers(
                self.normalize.enabled, match_paths=self.normalize.match_paths
            ),
            strict_references=self.build.strict_references,
            max_workers=self.build.max_workers,
        )

    def targets(
        self,
        aliases: list[str] | None = None,
        themes: list[str] | None = None,
    ) -> list[BuildTarget]:
        """Build targets from config, optionally narrowed by the caller."""
        selected_aliases = aliases or self.build.aliases
        selected_themes = [Theme(t) for t in themes] if themes else self.build.themes
        return [
            BuildTarget(alias=alias, theme=theme)
            for alias in selected_aliases
            for theme in selected_themes
        ]


_FORMATS = {"css", "json"}


def _resolve(root: Path, value: str | None) -> Path | None:
    if value is None:
        return None
    path = Path(value)
    return path if path.is_absolute() else root / path


def _parse_themes(values: list[Any]) -> list[Theme]:
    try:
        return [Theme(str(v).lower()) for v in values]
    except ValueError as e:
        raise ManifestError(f"[build] themes must be 'light' or 'dark': {e}") from e


def _parse_kinds(values: list[Any]) -> list[TokenKind]:
    kinds = [TokenKind.parse(str(v)) for v in values]
    unknown = [v for v, k in zip(values, kinds, strict=True) if k is TokenKind.OTHER]
    if unknown:
        raise ManifestError(f"[tokens] exclude_kinds has unknown kinds: {unknown}")
    return kinds


def parse_config(data: dict[str, Any], root: Path) -> ProjectConfig:
    """Build a ProjectConfig from already-decoded TOML data."""
    tokens_data = data.get("tokens", {})
    build_data = data.get("build", {})
    normalize_data = data.get("normalize", {})
    output_data = data.get("output", {})

    tokens = TokensConfig(
        source=_resolve(root, tokens_data.get("source")),
        document=_resolve(root, tokens_data.get("document")),
        exclude_kinds=_parse_kinds(tokens_data.get("exclude_kinds", [])),
    )
    if tokens.source is None and tokens.document is None:
        tokens.source = root / "tokens"

    max_workers = build_data.get("max_workers", 1)
    if not isinstance(max_workers, int) or max_workers < 1:
        raise ManifestError(f"[build] max_workers must be a positive integer, got {max_workers!r}")

    build = TargetsConfig(
        aliases=[str(a) for a in build_data.get("aliases", [])],
        themes=_parse_themes(build_data.get("themes", ["light", "dark"])),
        neutral_alias=build_data.get("neutral_alias", "Mode"),
        alias_marker=build_data.get("alias_marker", "alias"),
        palette_marker=build_data.get("palette_marker", "palette"),
        strict_references=bool(build_data.get("strict_references", False)),
        max_workers=max_workers,
    )

    enabled = list(normalize_data.get("enabled", NORMALIZER_NAMES))
    unknown = sorted(set(enabled) - set(NORMALIZER_NAMES))
    if unknown:
        raise ManifestError(
            f"[normalize] unknown normalizers {unknown}; choose from {list(NORMALIZER_NAMES)}"
        )
    normalize = NormalizeConfig(
        enabled=enabled,
        match_paths=bool(normalize_data.get("match_paths", False)),
    )

    formats = list(output_data.get("formats", ["css", "json"]))
    if not set(formats) <= _FORMATS:
        raise ManifestError(f"[output] formats must be a subset of {sorted(_FORMATS)}")
    output = OutputConfig(
        dist=_resolve(root, output_data.get("dist", "dist")) or root / "dist",
        formats=formats,
        prefix=output_data.get("prefix", ""),
        selector=output_data.get("selector", ":root"),
        decompose_composites=bool(output_data.get("decompose_composites", False)),
    )

    return ProjectConfig(
        root=root,
        tokens=tokens,
        build=build,
        normalize=normalize,
        output=output,
    )


def load_config(path: Path | None = None) -> ProjectConfig:
    """Load tokens.toml.

    Args:
        path: Config file, or a directory containing tokens.toml. Defaults
            to the current directory.

    Returns:
        ProjectConfig. Defaults are used when the file does not exist.

    Raises:
        ManifestError: If the file is not valid TOML or holds invalid values.
    """
    path = Path(path) if path is not None else Path.cwd()
    if path.is_dir():
        path = path / CONFIG_FILE
    root = path.parent.resolve()

    if not path.exists():
        logger.debug("No %s found at %s, using defaults", CONFIG_FILE, path)
        return parse_config({}, root)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e

    return parse_config(data, root)
