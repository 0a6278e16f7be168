"""
Structured JSON output.

Keeps the nesting of the resolved tree. Composite tokens stay intact by
default (``{"fontSize": "16px", "fontWeight": 600}``) and are only split
into one entry per member when ``decompose_composites`` is set.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from nexus_tokens.core.ir import Token, TokenKind


def _plain(value: Any) -> Any:
    """Convert read-only mappings and tuples into JSON-ready values."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_plain(v) for v in value]
    return value


def _entry(kind: TokenKind, value: Any, description: str | None, with_types: bool) -> Any:
    if not with_types:
        return _plain(value)
    entry: dict[str, Any] = {"$type": kind.value, "$value": _plain(value)}
    if description:
        entry["$description"] = description
    return entry


def render_json(
    tree: Mapping[str, Any],
    *,
    decompose_composites: bool = False,
    with_types: bool = False,
) -> dict[str, Any]:
    """
    Convert a resolved tree to a nested JSON-ready dict.

    Args:
        tree: Resolved token tree
        decompose_composites: Emit each composite member as its own entry
        with_types: Emit DTCG ``{"$type", "$value"}`` records instead of bare values

    Returns:
        Nested dict suitable for json.dumps
    """
    result: dict[str, Any] = {}
    for key, node in tree.items():
        if isinstance(node, Token):
            if decompose_composites and isinstance(node.value, Mapping):
                result[key] = {
                    member: _entry(TokenKind.parse(member), value, None, with_types)
                    for member, value in node.value.items()
                }
            else:
                result[key] = _entry(node.kind, node.value, node.description, with_types)
        else:
            result[key] = render_json(
                node, decompose_composites=decompose_composites, with_types=with_types
            )
    return result


def dumps(tree: Mapping[str, Any], **options: Any) -> str:
    """Render a resolved tree as indented JSON text."""
    return json.dumps(render_json(tree, **options), indent=2, ensure_ascii=False) + "\n"
