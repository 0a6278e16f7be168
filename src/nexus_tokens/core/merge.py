"""
Tree merging.

Layers are applied strictly in order. Groups accumulate the union of their
children across layers; a token at a given path is replaced whole by the
last layer that defines it. Kinds are not checked for compatibility: a
later layer with a different kind still wins, and the conflict is recorded
as a warning when a diagnostics collector is given.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .diagnostics import Diagnostics, KindConflictWarning
from .ir import Token, TokenLayer, TokenTree


def _merge_into(
    target: TokenTree,
    group: Mapping[str, Any],
    origins: dict[tuple[str, ...], str],
    layer: str,
    diagnostics: Diagnostics | None,
) -> None:
    for key, node in group.items():
        existing = target.get(key)
        if isinstance(node, Token):
            if (
                diagnostics is not None
                and isinstance(existing, Token)
                and existing.kind is not node.kind
            ):
                diagnostics.add(
                    KindConflictWarning(
                        path=node.name,
                        message=(
                            f"kind {existing.kind.value!r} from {origins.get(node.path, '?')} "
                            f"replaced by {node.kind.value!r} from {layer}"
                        ),
                        previous_layer=origins.get(node.path, ""),
                        layer=layer,
                    )
                )
            target[key] = node
            origins[node.path] = layer
        elif isinstance(existing, dict):
            _merge_into(existing, node, origins, layer, diagnostics)
        else:
            # New group, or a group replacing a token
            target[key] = {}
            _merge_into(target[key], node, origins, layer, diagnostics)


def merge_layers(
    layers: Iterable[TokenLayer],
    diagnostics: Diagnostics | None = None,
) -> TokenTree:
    """Deep-merge layers in sequence order into a new tree.

    Args:
        layers: Layers in application order; later layers win
        diagnostics: Receives a KindConflictWarning for each path whose
            kind changes between layers

    Returns:
        A fresh tree. The input layers are not modified.
    """
    merged: TokenTree = {}
    origins: dict[tuple[str, ...], str] = {}
    for layer in layers:
        _merge_into(merged, layer.tokens, origins, layer.name, diagnostics)
    return merged
