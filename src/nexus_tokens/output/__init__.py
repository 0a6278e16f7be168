"""Serializers for resolved token trees."""

from .css import flatten_tree, kebab_case, render_css
from .json_format import dumps, render_json
from .writer import WriteOptions, clean_output, target_dir, write_target

__all__ = [
    "flatten_tree",
    "kebab_case",
    "render_css",
    "render_json",
    "dumps",
    "WriteOptions",
    "clean_output",
    "target_dir",
    "write_target",
]
