"""
Token IR types.

A token tree is a nested mapping of group names to either further groups
or :class:`Token` leaves. Layers hold read-only trees as loaded from disk;
every pipeline stage (merge, resolve, normalize) returns a fresh tree of
plain dicts and never mutates its input.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class Theme(StrEnum):
    """Color theme of a build target."""

    LIGHT = "light"
    DARK = "dark"

    @property
    def opposite(self) -> Theme:
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


class TokenKind(StrEnum):
    """Explicit kind tag carried on every token."""

    COLOR = "color"
    DIMENSION = "dimension"
    SPACING = "spacing"
    SIZING = "sizing"
    BORDER_RADIUS = "borderRadius"
    BORDER_WIDTH = "borderWidth"
    OPACITY = "opacity"
    FONT_WEIGHT = "fontWeight"
    FONT_FAMILY = "fontFamily"
    FONT_SIZE = "fontSize"
    LINE_HEIGHT = "lineHeight"
    LETTER_SPACING = "letterSpacing"
    NUMBER = "number"
    STRING = "string"
    TYPOGRAPHY = "typography"
    SURFACE = "surface"
    SHADOW = "shadow"
    BORDER = "border"
    COMPOSITION = "composition"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> TokenKind:
        """Map a ``$type``/``type`` string onto a kind.

        Accepts DTCG names (``fontWeight``), Tokens Studio plurals
        (``fontWeights``, ``fontFamilies``) and any casing. Unknown
        kinds map to ``OTHER``.
        """
        if not raw:
            return cls.OTHER
        key = re.sub(r"[\s_-]", "", raw).lower()
        return _KIND_ALIASES.get(key, cls.OTHER)

    @property
    def is_composite(self) -> bool:
        return self in COMPOSITE_KINDS


_KIND_ALIASES: dict[str, TokenKind] = {kind.value.lower(): kind for kind in TokenKind}
_KIND_ALIASES.update(
    {
        "fontweights": TokenKind.FONT_WEIGHT,
        "fontfamilies": TokenKind.FONT_FAMILY,
        "fontsizes": TokenKind.FONT_SIZE,
        "lineheights": TokenKind.LINE_HEIGHT,
        "boxshadow": TokenKind.SHADOW,
        "paragraphspacing": TokenKind.SPACING,
        "radius": TokenKind.BORDER_RADIUS,
        "text": TokenKind.STRING,
    }
)

COMPOSITE_KINDS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.TYPOGRAPHY,
        TokenKind.SURFACE,
        TokenKind.SHADOW,
        TokenKind.BORDER,
        TokenKind.COMPOSITION,
    }
)


# =============================================================================
# Build targets
# =============================================================================


class BuildTarget(BaseModel):
    """One (alias, theme) combination to resolve."""

    model_config = ConfigDict(frozen=True)

    alias: str = Field(min_length=1, description="Brand variant selecting the alias layer")
    theme: Theme = Field(description="Palette selection")

    def __str__(self) -> str:
        return f"{self.alias}/{self.theme.value}"


# =============================================================================
# Tokens and layers
# =============================================================================


@dataclass(frozen=True)
class Token:
    """
    A single design token.

    Attributes:
        path: Names from the tree root down to this token
        kind: Explicit kind tag
        value: Literal, reference string, or (composite kinds) a mapping of
            sub-property name to literal/reference
        description: Optional designer note carried through to outputs
    """

    path: tuple[str, ...]
    kind: TokenKind
    value: Any
    description: str | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return ".".join(self.path)

    @property
    def is_composite(self) -> bool:
        return isinstance(self.value, Mapping)

    def with_value(self, value: Any) -> Token:
        return replace(self, value=value)


TokenTree: TypeAlias = dict[str, Any]
"""Nested mapping of group name to group or :class:`Token`."""


@dataclass(frozen=True)
class TokenLayer:
    """A named, read-only token tree as loaded from one token set."""

    name: str
    tokens: Mapping[str, Any]

    def __iter__(self) -> Iterator[Token]:
        return iter_tokens(self.tokens)

    def __len__(self) -> int:
        return sum(1 for _ in iter_tokens(self.tokens))


def freeze_tree(tree: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a read-only deep view of a token tree."""
    frozen: dict[str, Any] = {}
    for key, node in tree.items():
        if isinstance(node, Token):
            if isinstance(node.value, Mapping):
                node = node.with_value(MappingProxyType(dict(node.value)))
            frozen[key] = node
        else:
            frozen[key] = freeze_tree(node)
    return MappingProxyType(frozen)


# =============================================================================
# Tree helpers
# =============================================================================

REFERENCE_PATTERN = re.compile(r"^\{([^{}]+)\}$")


def parse_reference(value: Any) -> str | None:
    """Return the dotted target path if ``value`` is exactly ``{a.b.c}``."""
    if not isinstance(value, str):
        return None
    match = REFERENCE_PATTERN.match(value.strip())
    return match.group(1) if match else None


def iter_tokens(tree: Mapping[str, Any]) -> Iterator[Token]:
    """Yield every token in a tree, depth first, in key order."""
    for node in tree.values():
        if isinstance(node, Token):
            yield node
        elif isinstance(node, Mapping):
            yield from iter_tokens(node)


def find_node(tree: Mapping[str, Any], path: tuple[str, ...] | list[str]) -> Any:
    """Look up a group or token by path. Returns None if absent."""
    node: Any = tree
    for segment in path:
        if not isinstance(node, Mapping) or segment not in node:
            return None
        node = node[segment]
    return node


def map_tokens(tree: Mapping[str, Any], fn: Any) -> TokenTree:
    """Return a new tree with ``fn(token)`` applied to every token."""
    result: TokenTree = {}
    for key, node in tree.items():
        if isinstance(node, Token):
            result[key] = fn(node)
        else:
            result[key] = map_tokens(node, fn)
    return result
