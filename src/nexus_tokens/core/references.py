"""
Reference resolution.

A token value that is exactly ``{path.to.token}`` is a reference. It is
looked up in the fully merged tree (not the layer it came from) and
replaced by the referenced token's resolved value, following chains of
references until a literal is reached.

Policy:

- A path revisited within one chain raises :class:`CyclicReferenceError`.
- A reference to a path that holds no token is kept verbatim and reported
  as an :class:`UnresolvedReferenceWarning`. Tokens that reach it through
  a chain keep their own original reference and are reported too. With
  ``strict=True`` an :class:`UnresolvedReferenceError` is raised instead.
- Composite members are resolved one by one with the same rule.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .diagnostics import Diagnostics, UnresolvedReferenceWarning
from .errors import CyclicReferenceError, UnresolvedReferenceError
from .ir import Token, TokenTree, find_node, map_tokens, parse_reference

logger = logging.getLogger(__name__)


class _Unresolved(Exception):
    """Internal signal: a chain ended at a missing path."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(reference)


class ReferenceResolver:
    """Resolves references against one merged tree.

    Resolved values are memoized, so each token is resolved once no matter
    how many tokens reference it.
    """

    def __init__(
        self,
        tree: Mapping[str, Any],
        diagnostics: Diagnostics | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self.tree = tree
        self.diagnostics = diagnostics
        self.strict = strict
        self._resolved: dict[str, Any] = {}
        self._dangling: dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def resolve_path(self, path: str) -> Any:
        """Resolved value of the token at a dotted path.

        Raises:
            KeyError: If no token exists at ``path``
            CyclicReferenceError: If the token is part of a reference cycle
        """
        node = find_node(self.tree, tuple(path.split(".")))
        if not isinstance(node, Token):
            raise KeyError(path)
        return self._resolve_root(node)

    def resolve_token(self, token: Token) -> Token:
        """Return ``token`` with its value resolved."""
        value = self._resolve_root(token)
        if value is token.value:
            return token
        return token.with_value(value)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _resolve_root(self, token: Token) -> Any:
        try:
            return self._resolve_token(token, ())
        except _Unresolved:
            return token.value

    def _resolve_token(self, token: Token, chain: tuple[str, ...]) -> Any:
        name = token.name
        if name in self._resolved:
            return self._resolved[name]
        if name in self._dangling:
            raise _Unresolved(self._dangling[name])
        if name in chain:
            raise CyclicReferenceError([*chain, name])

        try:
            value = self._resolve_value(token.value, name, (*chain, name))
        except _Unresolved as missing:
            self._dangling[name] = missing.reference
            self._report(name, token.value, missing.reference)
            raise

        self._resolved[name] = value
        return value

    def _resolve_value(self, value: Any, owner: str, chain: tuple[str, ...]) -> Any:
        if isinstance(value, Mapping):
            return {
                member: self._resolve_member(member_value, f"{owner}.{member}", chain)
                for member, member_value in value.items()
            }
        if isinstance(value, list):
            return [self._resolve_member(item, owner, chain) for item in value]

        reference = parse_reference(value)
        if reference is None:
            return value

        node = find_node(self.tree, tuple(reference.split(".")))
        if not isinstance(node, Token):
            raise _Unresolved(reference)
        return self._resolve_token(node, chain)

    def _resolve_member(self, value: Any, owner: str, chain: tuple[str, ...]) -> Any:
        try:
            return self._resolve_value(value, owner, chain)
        except _Unresolved as missing:
            self._report(owner, value, missing.reference)
            return value

    def _report(self, path: str, value: Any, missing: str) -> None:
        reference = str(value)
        if parse_reference(value) == missing:
            message = f"reference {reference} does not point to a token"
        else:
            message = f"reference {reference} depends on unresolved reference {{{missing}}}"

        if self.strict:
            raise UnresolvedReferenceError(path, reference)
        if self.diagnostics is not None:
            self.diagnostics.add(
                UnresolvedReferenceWarning(path=path, message=message, reference=reference)
            )
        else:
            logger.warning("%s: %s", path, message)


def resolve_references(
    tree: TokenTree,
    diagnostics: Diagnostics | None = None,
    *,
    strict: bool = False,
) -> TokenTree:
    """Resolve every reference in a merged tree. Returns a new tree.

    Args:
        tree: Fully merged token tree
        diagnostics: Receives unresolved reference warnings
        strict: Raise UnresolvedReferenceError instead of warning

    Raises:
        CyclicReferenceError: If any token is part of a reference cycle
        UnresolvedReferenceError: If ``strict`` and a reference is dangling
    """
    resolver = ReferenceResolver(tree, diagnostics, strict=strict)
    return map_tokens(tree, resolver.resolve_token)
