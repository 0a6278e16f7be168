"""Tests for tokens.toml loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from nexus_tokens.core.config import (
    CONFIG_FILE,
    EngineConfig,
    LayerRules,
    load_config,
    parse_config,
)
from nexus_tokens.core.errors import ManifestError
from nexus_tokens.core.ir import BuildTarget, Theme, TokenKind


class TestDefaults:
    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path)
        assert config.root == tmp_path.resolve()
        assert config.tokens.source == tmp_path.resolve() / "tokens"
        assert config.build.aliases == []
        assert config.build.themes == [Theme.LIGHT, Theme.DARK]
        assert config.output.formats == ["css", "json"]
        assert config.output.dist == tmp_path.resolve() / "dist"

    def test_engine_config_defaults(self):
        config = EngineConfig()
        assert config.rules == LayerRules()
        assert [n.name for n in config.normalizers] == ["opacity", "fontWeight", "dimension"]
        assert not config.strict_references
        assert config.max_workers == 1


class TestLoadConfig:
    def test_sample_project(self, project_dir: Path):
        config = load_config(project_dir / CONFIG_FILE)
        assert config.tokens.source == project_dir.resolve() / "tokens"
        assert config.build.aliases == ["myQ", "Chamberlain"]
        assert config.targets() == [
            BuildTarget(alias="myQ", theme=Theme.LIGHT),
            BuildTarget(alias="myQ", theme=Theme.DARK),
            BuildTarget(alias="Chamberlain", theme=Theme.LIGHT),
            BuildTarget(alias="Chamberlain", theme=Theme.DARK),
        ]

    def test_directory_argument(self, project_dir: Path):
        assert load_config(project_dir).build.aliases == ["myQ", "Chamberlain"]

    def test_narrowed_targets(self, project_dir: Path):
        config = load_config(project_dir)
        assert config.targets(["myQ"], ["dark"]) == [BuildTarget(alias="myQ", theme=Theme.DARK)]

    def test_invalid_toml(self, tmp_path: Path):
        (tmp_path / CONFIG_FILE).write_text("[build\naliases = ", encoding="utf-8")
        with pytest.raises(ManifestError, match="Invalid TOML"):
            load_config(tmp_path)


class TestParseConfig:
    def test_full(self, tmp_path: Path):
        config = parse_config(
            {
                "tokens": {"document": "export/tokens.json", "exclude_kinds": ["typography"]},
                "build": {
                    "aliases": ["myQ"],
                    "themes": ["Dark"],
                    "neutral_alias": "Default",
                    "strict_references": True,
                    "max_workers": 4,
                },
                "normalize": {"enabled": ["opacity"], "match_paths": True},
                "output": {"prefix": "ds", "selector": ".theme", "decompose_composites": True},
            },
            tmp_path,
        )
        assert config.tokens.document == tmp_path / "export" / "tokens.json"
        assert config.tokens.source is None
        assert config.tokens.exclude_kinds == [TokenKind.TYPOGRAPHY]
        assert config.build.themes == [Theme.DARK]

        engine = config.to_engine_config()
        assert engine.rules.neutral_alias == "Default"
        assert engine.rules.aliases == ("myQ",)
        assert engine.strict_references
        assert engine.max_workers == 4
        [normalizer] = engine.normalizers
        assert normalizer.name == "opacity"
        assert normalizer.match_paths

    def test_absolute_paths_kept(self, tmp_path: Path):
        dist = tmp_path / "elsewhere"
        config = parse_config({"output": {"dist": str(dist)}}, tmp_path / "project")
        assert config.output.dist == dist

    @pytest.mark.parametrize(
        "data,match",
        [
            ({"build": {"themes": ["sepia"]}}, "themes"),
            ({"build": {"max_workers": 0}}, "max_workers"),
            ({"normalize": {"enabled": ["rounding"]}}, "unknown normalizers"),
            ({"output": {"formats": ["scss"]}}, "formats"),
            ({"tokens": {"exclude_kinds": ["gradientMesh"]}}, "exclude_kinds"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, data, match):
        with pytest.raises(ManifestError, match=match):
            parse_config(data, tmp_path)
