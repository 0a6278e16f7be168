"""
Token set resolution and composition.

Pipeline per build target: layer selection, merge, reference resolution,
value normalization.
"""

from .config import EngineConfig, LayerRules, ProjectConfig, load_config
from .diagnostics import (
    BuildWarning,
    Diagnostics,
    KindConflictWarning,
    NormalizationWarning,
    UnresolvedReferenceWarning,
)
from .engine import BuildReport, CompositionEngine, TargetResult, targets_for
from .errors import (
    ConfigurationError,
    CyclicReferenceError,
    LayerNotFoundError,
    ManifestError,
    TokenError,
    TokenSourceError,
    UnresolvedReferenceError,
)
from .ir import BuildTarget, Theme, Token, TokenKind, TokenLayer, TokenTree
from .layers import classify_layer, select_layers
from .loader import DirectoryLayerSource, DocumentLayerSource, LayerSource, load_document
from .merge import merge_layers
from .normalizers import (
    build_normalizers,
    normalize_dimension,
    normalize_font_weight,
    normalize_opacity,
    normalize_tree,
)
from .references import ReferenceResolver, resolve_references

__all__ = [
    # IR
    "BuildTarget",
    "Theme",
    "Token",
    "TokenKind",
    "TokenLayer",
    "TokenTree",
    # Config
    "EngineConfig",
    "LayerRules",
    "ProjectConfig",
    "load_config",
    # Pipeline
    "DirectoryLayerSource",
    "DocumentLayerSource",
    "LayerSource",
    "load_document",
    "classify_layer",
    "select_layers",
    "merge_layers",
    "ReferenceResolver",
    "resolve_references",
    "build_normalizers",
    "normalize_opacity",
    "normalize_font_weight",
    "normalize_dimension",
    "normalize_tree",
    "CompositionEngine",
    "BuildReport",
    "TargetResult",
    "targets_for",
    # Diagnostics
    "BuildWarning",
    "Diagnostics",
    "KindConflictWarning",
    "NormalizationWarning",
    "UnresolvedReferenceWarning",
    # Errors
    "TokenError",
    "ConfigurationError",
    "LayerNotFoundError",
    "ManifestError",
    "TokenSourceError",
    "CyclicReferenceError",
    "UnresolvedReferenceError",
]
