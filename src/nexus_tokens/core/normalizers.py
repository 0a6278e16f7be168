"""
Value normalizers.

Normalizers rewrite resolved token values into canonical, unit-free forms.
They run after reference resolution, so they see the final value whether it
was written as a literal or arrived through a chain of references.

Each normalizer is selected by the token's kind tag. Inside composite
tokens (typography, surface, ...) it is selected by member name, so a
typography ``fontWeight`` member is normalized like a fontWeight token.
Matching on path text (``"opacity"`` anywhere in the path) is available as
an opt-in for token sources whose kinds are unreliable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .diagnostics import Diagnostics, NormalizationWarning
from .ir import Token, TokenKind, TokenTree, map_tokens

logger = logging.getLogger(__name__)

NormalizeFn = Callable[[str, Any, "Diagnostics | None"], Any]

_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
_UNIT_SUFFIX = re.compile(r"(?:px|rem|em|%)$", re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _member_key(name: str) -> str:
    return re.sub(r"[\s_-]", "", name).lower()


def _warn(diagnostics: Diagnostics | None, normalizer: str, path: str, message: str) -> None:
    if diagnostics is not None:
        diagnostics.add(NormalizationWarning(path=path, message=message, normalizer=normalizer))
    else:
        logger.warning("[%s] %s: %s", normalizer, path, message)


# =============================================================================
# Opacity
# =============================================================================


def normalize_opacity(path: str, value: Any, diagnostics: Diagnostics | None = None) -> Any:
    """Normalize an opacity to a 0-1 string with two decimals.

    ``"56px"`` -> ``"0.56"``, ``32`` -> ``"0.32"``, ``0.7`` -> ``"0.70"``,
    ``1`` -> ``"1.00"``. Values above 1 are read as a 0-100 scale.
    Unparsable values are returned unchanged with a warning.
    """
    number: float | None = None
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str):
        text = _UNIT_SUFFIX.sub("", value.strip()).strip()
        if _NUMBER.match(text):
            number = float(text)

    if number is None:
        _warn(diagnostics, "opacity", path, f"could not normalize opacity {value!r}")
        return value

    if number > 1:
        number = number / 100
    return f"{number:.2f}"


# =============================================================================
# Font weight
# =============================================================================

FONT_WEIGHT_KEYWORDS: dict[str, int] = {
    "thin": 100,
    "hairline": 100,
    "extralight": 200,
    "ultralight": 200,
    "light": 300,
    "normal": 400,
    "regular": 400,
    "medium": 500,
    "semibold": 600,
    "demibold": 600,
    "bold": 700,
    "extrabold": 800,
    "ultrabold": 800,
    "black": 900,
    "heavy": 900,
    "extrablack": 950,
    "ultrablack": 950,
}


def normalize_font_weight(path: str, value: Any, diagnostics: Diagnostics | None = None) -> Any:
    """Map a font weight to its numeric value.

    Numbers pass through. Strings are parsed as a leading integer first
    (``"400"`` -> 400), then looked up as a keyword ignoring case and
    spacing (``"Semi Bold"`` -> 600). Unknown keywords pass through with a
    warning.
    """
    if _is_number(value) or not isinstance(value, str):
        return value

    match = _LEADING_INT.match(value)
    if match:
        return int(match.group(1))

    weight = FONT_WEIGHT_KEYWORDS.get(_member_key(value))
    if weight is not None:
        return weight

    _warn(diagnostics, "fontWeight", path, f"unknown font weight keyword {value!r}")
    return value


# =============================================================================
# Dimension
# =============================================================================


def normalize_dimension(path: str, value: Any, diagnostics: Diagnostics | None = None) -> Any:
    """Give unitless dimensions a ``px`` unit. Zero stays ``"0"``."""
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str) and _NUMBER.match(value.strip()):
        number = float(value.strip())
    else:
        return value

    if number == 0:
        return "0"
    return f"{_plain_number(number)}px"


def _plain_number(number: float) -> str:
    """Format without exponent notation or trailing zeros."""
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


# =============================================================================
# Registry-free selection
# =============================================================================


@dataclass(frozen=True)
class Normalizer:
    """A value normalizer and the tokens it applies to.

    Attributes:
        name: Config name (``opacity``, ``fontWeight``, ``dimension``)
        fn: ``(path, value, diagnostics) -> value``
        kinds: Token kinds selected by kind tag
        members: Composite member names (compared without case or separators)
        path_hint: Path segment substring used when ``match_paths`` is on
        match_paths: Also select tokens whose path contains ``path_hint``
    """

    name: str
    fn: NormalizeFn
    kinds: frozenset[TokenKind]
    members: frozenset[str] = frozenset()
    path_hint: str | None = None
    match_paths: bool = False

    def matches(self, token: Token) -> bool:
        if token.kind in self.kinds:
            return True
        if self.match_paths and self.path_hint:
            return any(self.path_hint in segment.lower() for segment in token.path)
        return False

    def matches_member(self, member: str) -> bool:
        return _member_key(member) in self.members

    def __call__(self, path: str, value: Any, diagnostics: Diagnostics | None = None) -> Any:
        return self.fn(path, value, diagnostics)


def _opacity(match_paths: bool) -> Normalizer:
    return Normalizer(
        name="opacity",
        fn=normalize_opacity,
        kinds=frozenset({TokenKind.OPACITY}),
        members=frozenset({"opacity"}),
        path_hint="opacity",
        match_paths=match_paths,
    )


def _font_weight(match_paths: bool) -> Normalizer:
    return Normalizer(
        name="fontWeight",
        fn=normalize_font_weight,
        kinds=frozenset({TokenKind.FONT_WEIGHT}),
        members=frozenset({"fontweight"}),
        path_hint="fontweight",
        match_paths=match_paths,
    )


def _dimension(match_paths: bool) -> Normalizer:
    return Normalizer(
        name="dimension",
        fn=normalize_dimension,
        kinds=frozenset(
            {
                TokenKind.DIMENSION,
                TokenKind.SPACING,
                TokenKind.SIZING,
                TokenKind.BORDER_RADIUS,
                TokenKind.BORDER_WIDTH,
                TokenKind.FONT_SIZE,
            }
        ),
        members=frozenset({"fontsize", "paragraphspacing", "borderradius", "borderwidth"}),
    )


_FACTORIES: dict[str, Callable[[bool], Normalizer]] = {
    "opacity": _opacity,
    "fontWeight": _font_weight,
    "dimension": _dimension,
}

NORMALIZER_NAMES: tuple[str, ...] = tuple(_FACTORIES)


def build_normalizers(
    enabled: Iterable[str] | None = None,
    *,
    match_paths: bool = False,
) -> tuple[Normalizer, ...]:
    """Create normalizers by name, in the order given.

    Args:
        enabled: Names from ``NORMALIZER_NAMES``. Defaults to all of them.
        match_paths: Also select tokens by path text (legacy behaviour)

    Raises:
        KeyError: If a name is not a known normalizer
    """
    names = list(enabled) if enabled is not None else list(NORMALIZER_NAMES)
    return tuple(_FACTORIES[name](match_paths) for name in names)


# =============================================================================
# Tree pass
# =============================================================================


def _normalize_token(
    token: Token,
    normalizers: tuple[Normalizer, ...],
    diagnostics: Diagnostics | None,
) -> Token:
    if isinstance(token.value, Mapping):
        members: dict[str, Any] = {}
        for member, value in token.value.items():
            for normalizer in normalizers:
                if normalizer.matches_member(member):
                    value = normalizer(f"{token.name}.{member}", value, diagnostics)
            members[member] = value
        return token.with_value(members)

    value = token.value
    for normalizer in normalizers:
        if normalizer.matches(token):
            value = normalizer(token.name, value, diagnostics)
    if value is token.value:
        return token
    return token.with_value(value)


def normalize_tree(
    tree: TokenTree,
    normalizers: Iterable[Normalizer],
    diagnostics: Diagnostics | None = None,
) -> TokenTree:
    """Apply normalizers to every token. Returns a new tree."""
    selected = tuple(normalizers)
    return map_tokens(tree, lambda token: _normalize_token(token, selected, diagnostics))
