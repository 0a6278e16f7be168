"""
Error types for token loading, layer selection and reference resolution.

Errors are fatal for the build target they occur in. Non-fatal conditions
(unresolved references, unparsable normalizer input, kind conflicts) are
recorded as warnings in :mod:`nexus_tokens.core.diagnostics` instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path


class TokenError(Exception):
    """Base exception for all nexus-tokens errors."""

    def __init__(self, message: str, target: str | None = None):
        self.message = message
        self.target = target
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with the build target if known."""
        if self.target:
            return f"[{self.target}] {self.message}"
        return self.message


class ConfigurationError(TokenError):
    """
    Raised when a build target cannot be satisfied.

    Examples:
    - No palette layer exists for the requested theme
    - A layer named in the layer order cannot be found
    - Invalid values in tokens.toml
    """

    pass


class LayerNotFoundError(ConfigurationError):
    """Raised when a layer source has no layer with the requested name."""

    def __init__(self, name: str, source: str | None = None):
        self.name = name
        where = f" in {source}" if source else ""
        super().__init__(f"Token layer not found{where}: {name!r}")


class ManifestError(ConfigurationError):
    """Raised when tokens.toml cannot be read or holds invalid values."""

    pass


class TokenSourceError(TokenError):
    """Raised when a token file or combined document cannot be decoded."""

    def __init__(self, message: str, file: Path | None = None):
        self.file = file
        if file is not None:
            message = f"{file}: {message}"
        super().__init__(message)


class ReferenceResolutionError(TokenError):
    """Base class for fatal reference resolution failures."""

    pass


class CyclicReferenceError(ReferenceResolutionError):
    """
    Raised when a reference chain revisits a path that is still being resolved.

    Attributes:
        chain: Token paths in resolution order, ending with the repeated path
    """

    def __init__(self, chain: Sequence[str]):
        self.chain = tuple(chain)
        super().__init__("Cyclic token reference: " + " -> ".join(self.chain))


class UnresolvedReferenceError(ReferenceResolutionError):
    """Raised for a dangling reference when strict resolution is enabled."""

    def __init__(self, path: str, reference: str):
        self.path = path
        self.reference = reference
        super().__init__(f"{path}: reference {reference} does not point to a token")


@dataclass
class TargetContext:
    """Identifies the build target an error belongs to."""

    alias: str
    theme: str

    def format(self) -> str:
        return f"{self.alias}/{self.theme}"


def with_target(error: TokenError, context: TargetContext) -> TokenError:
    """
    Attach a build target to an error that was raised without one.

    Args:
        error: Error raised inside a pipeline stage
        context: Target being built when the error occurred

    Returns:
        The same error instance, with ``target`` set
    """
    if error.target is None:
        error.target = context.format()
        error.args = (error._format_message(),)
    return error
