"""Tests for CSS and JSON serialization and the output writer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nexus_tokens.core.engine import CompositionEngine, TargetResult
from nexus_tokens.core.ir import BuildTarget, Theme, Token, TokenKind, freeze_tree
from nexus_tokens.core.loader import DirectoryLayerSource
from nexus_tokens.output.css import flatten_tree, format_value, kebab_case, render_css
from nexus_tokens.output.json_format import dumps, render_json
from nexus_tokens.output.writer import (
    CSS_FILE,
    JSON_FILE,
    WriteOptions,
    clean_output,
    slugify,
    target_dir,
    write_target,
)

MYQ_LIGHT = BuildTarget(alias="myQ", theme=Theme.LIGHT)


@pytest.fixture
def tree():
    return {
        "color": {
            "brandPrimary": Token(("color", "brandPrimary"), TokenKind.COLOR, "#0055ff"),
        },
        "opacity": {"disabled": Token(("opacity", "disabled"), TokenKind.OPACITY, "0.56")},
        "heading": Token(
            ("heading",),
            TokenKind.TYPOGRAPHY,
            {"fontSize": "24px", "fontWeight": 600, "lineHeight": "1.2"},
            description="Page title",
        ),
    }


class TestKebabCase:
    @pytest.mark.parametrize(
        "parts,expected",
        [
            (("color", "brandPrimary", "500"), "color-brand-primary-500"),
            (("02 Alias", "myQ"), "02-alias-my-q"),
            (("font_size", "XL"), "font-size-xl"),
            (("space", "1.5"), "space-1-5"),
        ],
    )
    def test_parts(self, parts, expected):
        assert kebab_case(*parts) == expected


class TestFormatValue:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (16.0, "16"),
            (1.5, "1.5"),
            (True, "true"),
            (None, "null"),
            (["Inter", "sans-serif"], "Inter, sans-serif"),
            ([{"x": 0, "y": "1px"}], "0 1px"),
        ],
    )
    def test_values(self, value, expected):
        assert format_value(value) == expected


class TestCss:
    def test_flatten_decomposes_composites(self, tree):
        flat = flatten_tree(tree)
        assert flat == {
            "color-brand-primary": "#0055ff",
            "opacity-disabled": "0.56",
            "heading-font-size": "24px",
            "heading-font-weight": "600",
            "heading-line-height": "1.2",
        }

    def test_prefix(self, tree):
        assert "ds-color-brand-primary" in flatten_tree(tree, prefix="ds")

    def test_render(self, tree):
        css = render_css(tree, target=MYQ_LIGHT)
        assert css.startswith("/**\n * Do not edit directly")
        assert " * Target: myQ / light" in css
        assert ":root {\n" in css
        assert "  --color-brand-primary: #0055ff;" in css
        assert css.endswith("}\n")

    def test_selector_and_comments(self, tree):
        css = render_css(tree, selector='[data-theme="dark"]', comments=True)
        assert '[data-theme="dark"] {' in css
        assert "  --heading-font-size: 24px; /* Page title */" in css

    def test_composite_note_on_first_member_only(self, tree):
        css = render_css(tree, prefix="ds", comments=True)
        assert "  --ds-heading-font-size: 24px; /* Page title */" in css
        assert "  --ds-heading-font-weight: 600;\n" in css
        assert "Page title" not in css.split("font-size")[0]

    def test_simple_token_note(self):
        tree = {"gap": Token(("gap",), TokenKind.SPACING, "8px", description="Grid gap")}
        assert "  --gap: 8px; /* Grid gap */" in render_css(tree, comments=True)

    def test_frozen_tree(self, tree):
        assert flatten_tree(freeze_tree(tree)) == flatten_tree(tree)


class TestJson:
    def test_composites_kept_by_default(self, tree):
        data = render_json(tree)
        assert data["heading"] == {"fontSize": "24px", "fontWeight": 600, "lineHeight": "1.2"}
        assert data["color"]["brandPrimary"] == "#0055ff"

    def test_decomposed(self, tree):
        data = render_json(tree, decompose_composites=True, with_types=True)
        assert data["heading"]["fontWeight"] == {"$type": "fontWeight", "$value": 600}
        assert data["heading"]["lineHeight"]["$type"] == "lineHeight"

    def test_with_types(self, tree):
        data = render_json(tree, with_types=True)
        assert data["color"]["brandPrimary"] == {"$type": "color", "$value": "#0055ff"}
        assert data["heading"]["$description"] == "Page title"

    def test_dumps_read_only_tree(self, tree):
        text = dumps(freeze_tree(tree))
        assert json.loads(text)["heading"]["fontSize"] == "24px"
        assert text.endswith("\n")


class TestWriter:
    def test_slugify(self):
        assert slugify("myQ") == "myq"
        assert slugify("Brand X / Pro") == "brand-x-pro"
        assert slugify("***") == "default"

    def test_target_dir(self, tmp_path: Path):
        assert target_dir(tmp_path, MYQ_LIGHT) == tmp_path / "myq" / "light"

    def test_write_both_formats(self, tmp_path: Path, tree):
        result = TargetResult(target=MYQ_LIGHT, tree=tree)
        written = write_target(tmp_path, result)
        out = tmp_path / "myq" / "light"
        assert written == [out / CSS_FILE, out / JSON_FILE]
        assert "--opacity-disabled: 0.56;" in (out / CSS_FILE).read_text(encoding="utf-8")
        data = json.loads((out / JSON_FILE).read_text(encoding="utf-8"))
        assert data["opacity"]["disabled"] == "0.56"

    def test_css_only(self, tmp_path: Path, tree):
        result = TargetResult(target=MYQ_LIGHT, tree=tree)
        written = write_target(tmp_path, result, WriteOptions(formats=("css",), prefix="ds"))
        assert [p.name for p in written] == [CSS_FILE]
        assert "--ds-opacity-disabled" in written[0].read_text(encoding="utf-8")

    def test_failed_result_rejected(self, tmp_path: Path):
        with pytest.raises(ValueError):
            write_target(tmp_path, TargetResult(target=MYQ_LIGHT))

    def test_clean_output(self, tmp_path: Path):
        dist = tmp_path / "dist"
        (dist / "old").mkdir(parents=True)
        (dist / "old" / "tokens.css").write_text("", encoding="utf-8")
        clean_output(dist)
        assert dist.is_dir()
        assert list(dist.iterdir()) == []

    def test_sample_build_output(self, tmp_path: Path, token_dir: Path):
        result = CompositionEngine().build(MYQ_LIGHT, DirectoryLayerSource(token_dir))
        write_target(tmp_path / "dist", result)
        css = (tmp_path / "dist" / "myq" / "light" / CSS_FILE).read_text(encoding="utf-8")
        assert "  --button-primary-fill: #0055ff;" in css
        assert "  --button-primary-disabled-opacity: 0.56;" in css
        assert "  --heading-font-weight: 600;" in css
