"""
Token set loading.

Two layer sources are supported:

- :class:`DirectoryLayerSource` reads one file per layer from a token
  directory (``<root>/<layer name>.json``). The layer order comes from
  ``$metadata.json`` (``tokenSetOrder``) or, when that is missing, from a
  sorted walk of the directory.
- :class:`DocumentLayerSource` splits a single combined tokens document whose
  top-level keys are layer names.

Both accept the DTCG spelling (``$value``/``$type``) and the legacy
Tokens Studio spelling (``value``/``type``) of token records.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml

from .errors import LayerNotFoundError, TokenSourceError
from .ir import Token, TokenKind, TokenLayer, freeze_tree

logger = logging.getLogger(__name__)

METADATA_FILE = "$metadata.json"
METADATA_KEY = "$metadata"
TOKEN_SUFFIXES = (".json", ".yaml", ".yml")


class LayerSource(Protocol):
    """Anything the composition engine can load layers from."""

    def layer_order(self) -> list[str]: ...

    def load(self, name: str) -> TokenLayer: ...


# =============================================================================
# Record parsing
# =============================================================================


def is_token_record(node: Any) -> bool:
    """True if ``node`` is a token record rather than a group."""
    if not isinstance(node, Mapping):
        return False
    if "$value" in node:
        return True
    return "value" in node and ("type" in node or not isinstance(node["value"], Mapping))


def parse_tokens(
    data: Mapping[str, Any],
    *,
    exclude_kinds: Iterable[TokenKind] = (),
    layer: str = "",
    _path: tuple[str, ...] = (),
    _inherited_kind: str | None = None,
) -> dict[str, Any]:
    """Convert a decoded token file into a tree of :class:`Token` leaves.

    Group-level ``$type`` is inherited by child tokens, as in DTCG. Keys
    starting with ``$`` on groups are metadata and are dropped.
    """
    excluded = frozenset(exclude_kinds)
    group_kind = data.get("$type", _inherited_kind)
    tree: dict[str, Any] = {}

    for raw_key, node in data.items():
        # YAML reads numeric scale keys such as 100: as ints
        key = str(raw_key)
        if key.startswith("$"):
            continue
        path = (*_path, key)
        if is_token_record(node):
            raw_kind = node.get("$type", node.get("type", group_kind))
            kind = TokenKind.parse(raw_kind)
            if kind in excluded:
                logger.info("Excluding %s token %s from %s", kind.value, ".".join(path), layer)
                continue
            value = node.get("$value", node.get("value"))
            description = node.get("$description", node.get("description"))
            tree[key] = Token(path=path, kind=kind, value=value, description=description)
        elif isinstance(node, Mapping):
            tree[key] = parse_tokens(
                node,
                exclude_kinds=excluded,
                layer=layer,
                _path=path,
                _inherited_kind=group_kind,
            )
        else:
            logger.debug("Skipping non-token value at %s in %s", ".".join(path), layer)
    return tree


def _read_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise TokenSourceError(f"Invalid JSON: {e}", file=path) from e
    except yaml.YAMLError as e:
        raise TokenSourceError(f"Invalid YAML: {e}", file=path) from e
    except UnicodeDecodeError as e:
        raise TokenSourceError(f"Invalid UTF-8: {e}", file=path) from e
    except OSError as e:
        raise TokenSourceError(f"Cannot read file: {e}", file=path) from e


def _token_order(metadata: Any) -> list[str] | None:
    if not isinstance(metadata, Mapping):
        return None
    order = metadata.get("tokenSetOrder")
    if order is None:
        return None
    if not isinstance(order, list) or not all(isinstance(n, str) for n in order):
        raise TokenSourceError("tokenSetOrder must be a list of layer names")
    return list(order)


# =============================================================================
# Directory source
# =============================================================================


class DirectoryLayerSource:
    """Layers stored as one file per layer under a token directory.

    Loaded layers are cached. Each layer is read at most once even when
    several build targets load it concurrently.
    """

    def __init__(self, root: Path, *, exclude_kinds: Iterable[TokenKind] = ()) -> None:
        self.root = Path(root)
        self.exclude_kinds = frozenset(exclude_kinds)
        self._cache: dict[str, TokenLayer] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"DirectoryLayerSource({str(self.root)!r})"

    def discover(self) -> list[str]:
        """All layer names found on disk, sorted."""
        names = {
            path.relative_to(self.root).with_suffix("").as_posix()
            for path in self.root.rglob("*")
            if path.is_file()
            and path.suffix in TOKEN_SUFFIXES
            and not path.name.startswith("$")
        }
        return sorted(names)

    def layer_order(self) -> list[str]:
        """Base layer order from $metadata.json, else sorted discovery."""
        if not self.root.is_dir():
            raise TokenSourceError("Token directory does not exist", file=self.root)

        metadata_path = self.root / METADATA_FILE
        if metadata_path.exists():
            order = _token_order(_read_file(metadata_path))
            if order is not None:
                logger.debug("Layer order from %s: %s", metadata_path, order)
                return order

        order = self.discover()
        logger.info("No tokenSetOrder in %s, using sorted discovery order", self.root)
        return order

    def _path_for(self, name: str) -> Path:
        for suffix in TOKEN_SUFFIXES:
            candidate = self.root / f"{name}{suffix}"
            if candidate.is_file():
                return candidate
        raise LayerNotFoundError(name, source=str(self.root))

    def load(self, name: str) -> TokenLayer:
        with self._lock:
            cached = self._cache.get(name)
            if cached is not None:
                return cached

            path = self._path_for(name)
            data = _read_file(path)
            if data is None:
                data = {}
            if not isinstance(data, Mapping):
                raise TokenSourceError("Token file must contain an object", file=path)

            layer = TokenLayer(
                name=name,
                tokens=freeze_tree(
                    parse_tokens(data, exclude_kinds=self.exclude_kinds, layer=name)
                ),
            )
            self._cache[name] = layer
            logger.debug("Loaded layer %s (%d tokens) from %s", name, len(layer), path)
            return layer


# =============================================================================
# Combined document source
# =============================================================================


class DocumentLayerSource:
    """Layers stored as top-level keys of one combined tokens document."""

    def __init__(
        self,
        document: Mapping[str, Any],
        *,
        index: Iterable[str] | None = None,
        exclude_kinds: Iterable[TokenKind] = (),
    ) -> None:
        if not isinstance(document, Mapping):
            raise TokenSourceError("Combined tokens document must be an object")
        self.exclude_kinds = frozenset(exclude_kinds)

        if index is None:
            index = _token_order(document.get(METADATA_KEY))
        if index is None:
            index = [str(key) for key in document if not str(key).startswith("$")]
        self._index = list(index)

        self._layers: dict[str, TokenLayer] = {}
        for name in self._index:
            data = document.get(name)
            if data is None:
                continue
            if not isinstance(data, Mapping):
                raise TokenSourceError(f"Layer {name!r} must be an object")
            self._layers[name] = TokenLayer(
                name=name,
                tokens=freeze_tree(
                    parse_tokens(data, exclude_kinds=self.exclude_kinds, layer=name)
                ),
            )

    def layer_order(self) -> list[str]:
        return list(self._index)

    def load(self, name: str) -> TokenLayer:
        try:
            return self._layers[name]
        except KeyError:
            raise LayerNotFoundError(name, source="combined document") from None


def load_document(path: Path, *, exclude_kinds: Iterable[TokenKind] = ()) -> DocumentLayerSource:
    """Read a combined tokens document from disk."""
    data = _read_file(Path(path))
    if not isinstance(data, Mapping):
        raise TokenSourceError("Combined tokens document must be an object", file=Path(path))
    return DocumentLayerSource(data, exclude_kinds=exclude_kinds)
