"""
CSS custom property output.

Resolved trees are flattened to ``--kebab-case-path: value;`` lines.
Composite tokens are always decomposed here since a custom property can
only hold one value: ``typography.heading`` with a ``fontSize`` member
becomes ``--typography-heading-font-size``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from nexus_tokens.core.ir import BuildTarget, iter_tokens

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_IDENT = re.compile(r"[^a-zA-Z0-9]+")


def kebab_case(*parts: str) -> str:
    """Join path segments into a kebab-case property name.

    ``("color", "brandPrimary", "500")`` -> ``"color-brand-primary-500"``
    """
    words: list[str] = []
    for part in parts:
        part = _CAMEL_BOUNDARY.sub("-", part)
        words.extend(w for w in _NON_IDENT.split(part) if w)
    return "-".join(words).lower()


def format_value(value: Any) -> str:
    """Render a resolved leaf value as CSS text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ", ".join(format_value(v) for v in value)
    if isinstance(value, Mapping):
        # e.g. one layer of a multi-layer shadow
        return " ".join(format_value(v) for v in value.values())
    if value is None:
        return "null"
    return str(value)


def _flatten_value(name: str, value: Any, out: dict[str, str]) -> None:
    if isinstance(value, Mapping):
        for member, member_value in value.items():
            _flatten_value(f"{name}-{kebab_case(member)}", member_value, out)
    else:
        out[name] = format_value(value)


def flatten_tree(tree: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a resolved tree to ``{property-name: css value}`` in tree order."""
    flat: dict[str, str] = {}
    for token in iter_tokens(tree):
        parts = (prefix, *token.path) if prefix else token.path
        _flatten_value(kebab_case(*parts), token.value, flat)
    return flat


def render_css(
    tree: Mapping[str, Any],
    *,
    selector: str = ":root",
    prefix: str = "",
    target: BuildTarget | None = None,
    comments: bool = False,
) -> str:
    """
    Render a resolved tree as a CSS block.

    Args:
        tree: Resolved token tree
        selector: Selector wrapping the custom properties
        prefix: Prepended to every property name
        target: Named in the header comment when given
        comments: Emit token descriptions as trailing comments

    Returns:
        CSS text ending with a newline
    """
    lines: list[str] = ["/**", " * Do not edit directly, this file was auto-generated."]
    if target is not None:
        lines.append(f" * Target: {target.alias} / {target.theme.value}")
    lines.append(" */")
    lines.append("")
    lines.append(f"{selector} {{")

    descriptions = _descriptions(tree, prefix) if comments else {}
    for name, value in flatten_tree(tree, prefix).items():
        line = f"  --{name}: {value};"
        note = descriptions.get(name)
        if note:
            line += f" /* {note} */"
        lines.append(line)

    lines.append("}")
    return "\n".join(lines) + "\n"


def _descriptions(tree: Mapping[str, Any], prefix: str) -> dict[str, str]:
    # Composite notes go on their first member property
    notes: dict[str, str] = {}
    for token in iter_tokens(tree):
        if not token.description:
            continue
        parts = (prefix, *token.path) if prefix else token.path
        names: dict[str, str] = {}
        _flatten_value(kebab_case(*parts), token.value, names)
        first = next(iter(names), None)
        if first is not None:
            notes[first] = token.description.replace("*/", "* /")
    return notes
