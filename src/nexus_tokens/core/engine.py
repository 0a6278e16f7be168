"""
Composition engine.

Runs the token pipeline once per build target::

    select layers -> load + merge -> resolve references -> normalize

Targets are independent. Each gets a fresh tree and its own diagnostics,
and a failure on one target is recorded in its result without stopping
the others.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace

from .config import EngineConfig, LayerRules
from .diagnostics import BuildWarning, Diagnostics
from .errors import TargetContext, TokenError, with_target
from .ir import BuildTarget, Theme, TokenTree, iter_tokens
from .layers import select_layers
from .loader import LayerSource
from .merge import merge_layers
from .normalizers import normalize_tree
from .references import resolve_references

logger = logging.getLogger(__name__)


@dataclass
class TargetResult:
    """Outcome of building one target."""

    target: BuildTarget
    tree: TokenTree | None = None
    layers: tuple[str, ...] = ()
    warnings: tuple[BuildWarning, ...] = ()
    error: TokenError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.tree is not None

    @property
    def token_count(self) -> int:
        return sum(1 for _ in iter_tokens(self.tree)) if self.tree is not None else 0


@dataclass
class BuildReport:
    """Per-target results of one build invocation, in request order."""

    results: dict[BuildTarget, TargetResult] = field(default_factory=dict)

    def __getitem__(self, target: BuildTarget) -> TargetResult:
        return self.results[target]

    def __iter__(self) -> Iterator[TargetResult]:
        return iter(self.results.values())

    def __len__(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> list[TargetResult]:
        return [r for r in self.results.values() if r.ok]

    @property
    def failed(self) -> list[TargetResult]:
        return [r for r in self.results.values() if not r.ok]

    @property
    def trees(self) -> dict[BuildTarget, TokenTree]:
        return {t: r.tree for t, r in self.results.items() if r.tree is not None}

    @property
    def warnings(self) -> dict[BuildTarget, tuple[BuildWarning, ...]]:
        return {t: r.warnings for t, r in self.results.items() if r.warnings}

    @property
    def ok(self) -> bool:
        return not self.failed


def targets_for(aliases: Iterable[str], themes: Iterable[Theme | str]) -> list[BuildTarget]:
    """Every (alias, theme) combination, alias-major."""
    theme_list = [Theme(t) for t in themes]
    return [BuildTarget(alias=alias, theme=theme) for alias in aliases for theme in theme_list]


class CompositionEngine:
    """Builds resolved token trees for (alias, theme) targets.

    Example::

        engine = CompositionEngine(EngineConfig())
        source = DirectoryLayerSource(Path("tokens"))
        report = engine.build_all(
            source.layer_order(), source, targets_for(["myQ"], ["light", "dark"])
        )
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def _rules_for(self, aliases: Iterable[str]) -> LayerRules:
        """Layer rules that also know every alias being built.

        Bare layer names are only recognised as alias layers when their alias
        is known, so other targets' brand layers must be listed too.
        """
        rules = self.config.rules
        known = {alias.casefold() for alias in rules.aliases}
        extra: list[str] = []
        for alias in aliases:
            if alias.casefold() not in known:
                known.add(alias.casefold())
                extra.append(alias)
        return replace(rules, aliases=(*rules.aliases, *extra)) if extra else rules

    def effective_layers(
        self,
        base_order: Sequence[str],
        target: BuildTarget,
        aliases: Iterable[str] = (),
    ) -> tuple[str, ...]:
        return select_layers(base_order, target, self._rules_for(aliases))

    def build(
        self,
        target: BuildTarget,
        layer_source: LayerSource,
        base_order: Sequence[str] | None = None,
        *,
        aliases: Iterable[str] = (),
    ) -> TargetResult:
        """Build a single target.

        ``aliases`` names the other brands in the same build, so their bare-named
        alias layers are dropped rather than kept as base layers.

        Raises:
            TokenError: On configuration, loading or resolution failure
        """
        if base_order is None:
            base_order = layer_source.layer_order()

        diagnostics = Diagnostics(target=str(target))
        layer_names = self.effective_layers(base_order, target, aliases)
        logger.info("Building %s from %d layers", target, len(layer_names))

        layers = [layer_source.load(name) for name in layer_names]
        merged = merge_layers(layers, diagnostics)
        resolved = resolve_references(
            merged, diagnostics, strict=self.config.strict_references
        )
        tree = normalize_tree(resolved, self.config.normalizers, diagnostics)

        result = TargetResult(
            target=target,
            tree=tree,
            layers=layer_names,
            warnings=diagnostics.warnings,
        )
        logger.info(
            "Built %s: %d tokens, %d warnings", target, result.token_count, len(result.warnings)
        )
        return result

    def _build_captured(
        self,
        target: BuildTarget,
        layer_source: LayerSource,
        base_order: Sequence[str],
        aliases: tuple[str, ...],
    ) -> TargetResult:
        try:
            return self.build(target, layer_source, base_order, aliases=aliases)
        except TokenError as e:
            error = with_target(e, TargetContext(alias=target.alias, theme=target.theme.value))
            logger.error("Build failed for %s: %s", target, e.message)
            return TargetResult(target=target, error=error)

    def build_all(
        self,
        base_order: Sequence[str],
        layer_source: LayerSource,
        targets: Iterable[BuildTarget],
    ) -> BuildReport:
        """Build every target, collecting results and errors per target.

        Args:
            base_order: Canonical layer order
            layer_source: Where layers are loaded from
            targets: Targets to build; duplicates are built once

        Returns:
            BuildReport keyed by target, in request order
        """
        unique = list(dict.fromkeys(targets))
        order = tuple(base_order)
        aliases = tuple(dict.fromkeys(t.alias for t in unique))

        if self.config.max_workers > 1 and len(unique) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(
                    pool.map(
                        lambda t: self._build_captured(t, layer_source, order, aliases), unique
                    )
                )
        else:
            results = [self._build_captured(t, layer_source, order, aliases) for t in unique]

        report = BuildReport(results={r.target: r for r in results})
        logger.info(
            "Build finished: %d succeeded, %d failed", len(report.succeeded), len(report.failed)
        )
        return report
