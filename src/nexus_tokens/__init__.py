"""
nexus-tokens - layered design token resolution.

Merges primitive, alias, palette and mapping token sets per brand alias
and color theme, resolves references, normalizes values and writes CSS
custom properties and JSON.
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    BuildReport,
    BuildTarget,
    CompositionEngine,
    ConfigurationError,
    CyclicReferenceError,
    EngineConfig,
    TargetResult,
    Theme,
    Token,
    TokenError,
    TokenKind,
    targets_for,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "BuildReport",
    "BuildTarget",
    "CompositionEngine",
    "ConfigurationError",
    "CyclicReferenceError",
    "EngineConfig",
    "TargetResult",
    "Theme",
    "Token",
    "TokenError",
    "TokenKind",
    "targets_for",
]
