"""
Layer selection.

Turns the base layer order into the effective order for one build target:

- palette layers for the other theme are dropped
- alias layers for other brands are dropped; the neutral alias layer stays
- the neutral alias layer is moved in front of the target's alias layer so
  the brand mapping always overrides the neutral default

Layer names look like ``"02 Alias/myQ"``: everything before the last ``/``
is the group, the last segment is the variant. The group decides the role
(alias, palette or base); the variant names the alias or the theme.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import StrEnum

from .config import LayerRules
from .errors import ConfigurationError
from .ir import BuildTarget, Theme

logger = logging.getLogger(__name__)


class LayerRole(StrEnum):
    """What a layer contributes to a build."""

    BASE = "base"
    ALIAS = "alias"
    PALETTE = "palette"


@dataclass(frozen=True)
class LayerInfo:
    """Classification of a single layer name."""

    name: str
    role: LayerRole
    variant: str
    theme: Theme | None = None
    neutral: bool = False


_THEME_WORD = re.compile(r"\b(light|dark)\b", re.IGNORECASE)


def _theme_of(variant: str) -> Theme | None:
    match = _THEME_WORD.search(variant)
    return Theme(match.group(1).lower()) if match else None


def _is_neutral(variant: str, rules: LayerRules) -> bool:
    # "Mode" also matches numbered modes such as "Mode 1"
    pattern = rf"^{re.escape(rules.neutral_alias)}(?:\s+\d+)?$"
    return re.match(pattern, variant.strip(), re.IGNORECASE) is not None


def _same_alias(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


def classify_layer(name: str, rules: LayerRules | None = None) -> LayerInfo:
    """Work out the role of a layer from its name."""
    rules = rules or LayerRules()
    group, _, variant = name.rpartition("/")
    group_lower = group.lower()

    if group and rules.palette_marker.lower() in group_lower:
        return LayerInfo(name, LayerRole.PALETTE, variant, theme=_theme_of(variant))
    if group and rules.alias_marker.lower() in group_lower:
        return LayerInfo(name, LayerRole.ALIAS, variant, neutral=_is_neutral(variant, rules))

    if not group:
        # Bare names: neutral/known aliases and theme names
        if _is_neutral(variant, rules):
            return LayerInfo(name, LayerRole.ALIAS, variant, neutral=True)
        if any(_same_alias(variant, alias) for alias in rules.aliases):
            return LayerInfo(name, LayerRole.ALIAS, variant)
        if rules.palette_marker.lower() in variant.lower() or variant.strip().lower() in (
            Theme.LIGHT.value,
            Theme.DARK.value,
        ):
            return LayerInfo(name, LayerRole.PALETTE, variant, theme=_theme_of(variant))

    return LayerInfo(name, LayerRole.BASE, variant)


def _unique(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


def _keep(info: LayerInfo, target: BuildTarget) -> bool:
    if info.role is LayerRole.PALETTE:
        return info.theme is None or info.theme is target.theme
    if info.role is LayerRole.ALIAS:
        return info.neutral or _same_alias(info.variant, target.alias)
    return True


def _neutral_before_alias(infos: list[LayerInfo]) -> list[LayerInfo]:
    """Move neutral alias layers that follow the target alias layer in front of it.

    Only the neutral layers move; every other layer keeps its position.
    """
    alias_index = next(
        (i for i, info in enumerate(infos) if info.role is LayerRole.ALIAS and not info.neutral),
        None,
    )
    if alias_index is None:
        return infos

    late_neutrals = [
        info for info in infos[alias_index + 1 :] if info.role is LayerRole.ALIAS and info.neutral
    ]
    if not late_neutrals:
        return infos

    rest = [info for info in infos if info not in late_neutrals]
    insert_at = rest.index(infos[alias_index])
    return rest[:insert_at] + late_neutrals + rest[insert_at:]


def select_layers(
    base_order: Sequence[str],
    target: BuildTarget,
    rules: LayerRules | None = None,
) -> tuple[str, ...]:
    """Derive the effective layer order for a build target.

    Args:
        base_order: Canonical layer order for a base build
        target: Alias and theme being built
        rules: Layer classification rules

    Returns:
        Layer names in application order (later layers override earlier ones)

    Raises:
        ConfigurationError: If no palette layer for ``target.theme`` remains
    """
    rules = rules or LayerRules()
    if not any(_same_alias(target.alias, alias) for alias in rules.aliases):
        rules = replace(rules, aliases=(*rules.aliases, target.alias))
    infos = [classify_layer(name, rules) for name in _unique(base_order)]
    selected = [info for info in infos if _keep(info, target)]
    selected = _neutral_before_alias(selected)

    if not any(info.role is LayerRole.PALETTE for info in infos):
        raise ConfigurationError("No palette layers in layer order", target=str(target))
    palettes = [info for info in selected if info.role is LayerRole.PALETTE]
    if not any(info.theme is target.theme for info in palettes):
        raise ConfigurationError(
            f"No {target.theme.value} palette layer in layer order", target=str(target)
        )

    if not any(info.role is LayerRole.ALIAS and not info.neutral for info in selected):
        logger.warning("[%s] No alias layer for %r; using neutral mapping only", target, target.alias)

    order = tuple(info.name for info in selected)
    logger.debug("[%s] Effective layer order: %s", target, order)
    return order
