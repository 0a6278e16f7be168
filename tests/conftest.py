"""Shared pytest fixtures for nexus-tokens tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from nexus_tokens.core.ir import TokenLayer, freeze_tree
from nexus_tokens.core.loader import parse_tokens

# Layer order as exported by the design tool. The brand alias is listed
# before the neutral "Mode" alias on purpose.
SAMPLE_ORDER = [
    "01 Primitive/Mode 1",
    "02 Alias/myQ",
    "02 Alias/Chamberlain",
    "02 Alias/Mode",
    "03 Palette/light",
    "03 Palette/dark",
    "04 Mapped/Mode 1",
]

SAMPLE_LAYERS: dict[str, dict[str, Any]] = {
    "01 Primitive/Mode 1": {
        "color": {
            "$type": "color",
            "blue": {"500": {"$value": "#0055ff"}},
            "gray": {"900": {"$value": "#111111"}},
            "white": {"$value": "#ffffff"},
            "red": {"500": {"$value": "#e02020"}},
        },
        "opacity": {
            "56": {"$type": "opacity", "$value": "56px"},
            "32": {"$type": "opacity", "$value": 32},
        },
        "fontWeight": {
            "semibold": {"$type": "fontWeights", "$value": "Semi Bold"},
            "regular": {"$type": "fontWeights", "$value": "400"},
        },
        "spacing": {
            "4": {"$type": "spacing", "$value": 16},
            "0": {"$type": "spacing", "$value": 0},
        },
    },
    "02 Alias/myQ": {
        "brand": {"primary": {"$type": "color", "$value": "{color.blue.500}"}},
    },
    "02 Alias/Chamberlain": {
        "brand": {"primary": {"$type": "color", "$value": "{color.red.500}"}},
    },
    "02 Alias/Mode": {
        "brand": {
            "primary": {"$type": "color", "$value": "{color.gray.900}"},
            "secondary": {"$type": "color", "$value": "{color.gray.900}"},
        },
    },
    "03 Palette/light": {
        "surface": {
            "background": {"$type": "color", "$value": "{color.white}"},
            "text": {"$type": "color", "$value": "{color.gray.900}"},
        },
    },
    "03 Palette/dark": {
        "surface": {
            "background": {"$type": "color", "$value": "{color.gray.900}"},
            "text": {"$type": "color", "$value": "{color.white}"},
        },
    },
    "04 Mapped/Mode 1": {
        "button": {
            "primary": {
                "fill": {"$type": "color", "$value": "{brand.primary}"},
                "disabledOpacity": {"$type": "opacity", "$value": "{opacity.56}"},
                "gap": {"$type": "spacing", "$value": "{spacing.4}"},
            },
        },
        "heading": {
            "$type": "typography",
            "$value": {
                "fontSize": 24,
                "fontWeight": "{fontWeight.semibold}",
                "lineHeight": "1.2",
            },
        },
    },
}


def make_layer(name: str, data: dict[str, Any]) -> TokenLayer:
    """Build a read-only layer from raw token-file data."""
    return TokenLayer(name=name, tokens=freeze_tree(parse_tokens(data, layer=name)))


def write_token_dir(root: Path, layers: dict[str, dict[str, Any]], order: list[str] | None) -> Path:
    """Write layers as one JSON file per layer, plus $metadata.json when ``order`` is given."""
    root.mkdir(parents=True, exist_ok=True)
    for name, data in layers.items():
        path = root / f"{name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
    if order is not None:
        (root / "$metadata.json").write_text(
            json.dumps({"tokenSetOrder": order}), encoding="utf-8"
        )
    return root


@pytest.fixture
def sample_layers() -> dict[str, TokenLayer]:
    """Sample layers keyed by name."""
    return {name: make_layer(name, data) for name, data in SAMPLE_LAYERS.items()}


@pytest.fixture
def token_dir(tmp_path: Path) -> Path:
    """Directory of sample token files with a $metadata.json layer order."""
    return write_token_dir(tmp_path / "tokens", SAMPLE_LAYERS, SAMPLE_ORDER)


@pytest.fixture
def project_dir(tmp_path: Path, token_dir: Path) -> Path:
    """Project directory with tokens.toml pointing at the sample tokens."""
    (tmp_path / "tokens.toml").write_text(
        "\n".join(
            [
                "[tokens]",
                'source = "tokens"',
                "",
                "[build]",
                'aliases = ["myQ", "Chamberlain"]',
                'themes = ["light", "dark"]',
                "",
                "[output]",
                'dist = "dist"',
                'formats = ["css", "json"]',
                "",
            ]
        ),
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def sample_order() -> list[str]:
    """Layer order as listed in the sample $metadata.json."""
    return list(SAMPLE_ORDER)


@pytest.fixture
def raw_layers() -> dict[str, dict[str, Any]]:
    """Raw token-file data for the sample layers."""
    return json.loads(json.dumps(SAMPLE_LAYERS))


@pytest.fixture
def write_tokens():
    """The ``write_token_dir`` helper."""
    return write_token_dir
