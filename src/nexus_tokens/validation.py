"""
Post-build validation of generated CSS.

Reads ``--name: value;`` declarations back out of a tokens.css file and
checks that each category of token came out in a usable form: opacities
in 0-1, numeric font weights, hex/rgb colors, dimensions with units, and
no leftover references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

_DECLARATION = re.compile(r"--([^:\s]+)\s*:\s*([^;]+);")
_COLOR = re.compile(r"^(#[0-9a-fA-F]{3,8}|rgba?\([^)]+\))$")
_SIZE = re.compile(r"^(0|[\d.]+(?:px|rem|em|%))$")
_SIZE_KEYWORDS = {"auto", "inherit", "initial"}
_HALF_STEP_WEIGHTS = {250, 350, 450, 550, 650, 750, 850, 950}

_SIZING_MARKERS = ("sizing", "spacing", "border-radius", "border-width")


@dataclass(frozen=True)
class Declaration:
    """One custom property read from a CSS file."""

    name: str
    value: str


class ValidationReport:
    """Result of validating a generated CSS file."""

    def __init__(self, declarations: list[Declaration]) -> None:
        self.declarations = declarations
        self.issues: list[str] = []
        self.warnings: list[str] = []
        self.checked: dict[str, int] = {}

    def add_issue(self, message: str) -> None:
        self.issues.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def ok(self) -> bool:
        return len(self.issues) == 0

    @property
    def total(self) -> int:
        return len(self.declarations)

    def breakdown(self) -> dict[str, int]:
        """Token counts per category; ``Other`` holds the remainder."""
        names = [(d.name, d.value) for d in self.declarations]
        counts = {
            "Colors": sum(1 for n, _ in names if "color" in n),
            "Opacity": sum(1 for n, _ in names if "opacity" in n),
            "Font Weights": sum(1 for n, _ in names if "font-weight" in n),
            "Font Families": sum(1 for n, _ in names if "font-family" in n),
            "Sizing (rem)": sum(1 for n, v in names if "sizing" in n and "rem" in v),
            "Sizing (scale)": sum(1 for n, _ in names if "sizing-scale" in n),
            "Spacing": sum(1 for n, _ in names if "spacing" in n),
            "Border Radius": sum(1 for n, _ in names if "border-radius" in n),
            "Border Width": sum(1 for n, _ in names if "border-width" in n),
        }
        counts["Other"] = self.total - sum(counts.values())
        return counts

    def __repr__(self) -> str:
        return f"ValidationReport(tokens={self.total}, issues={len(self.issues)}, warnings={len(self.warnings)})"


def parse_declarations(css: str) -> list[Declaration]:
    return [
        Declaration(name=f"--{m.group(1).strip()}", value=m.group(2).strip())
        for m in _DECLARATION.finditer(css)
    ]


def _as_float(value: str) -> float | None:
    match = re.match(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)", value)
    return float(match.group(0)) if match else None


def _check_opacity(report: ValidationReport, decls: list[Declaration]) -> None:
    for d in decls:
        number = _as_float(d.value)
        if number is None:
            report.add_issue(f"{d.name}: Not a valid number ({d.value})")
        elif number < 0 or number > 1:
            report.add_issue(f"{d.name}: Out of range 0-1 ({number:g})")
        elif "px" in d.value:
            report.add_issue(f"{d.name}: Contains 'px' unit ({d.value})")


def _check_font_weight(report: ValidationReport, decls: list[Declaration]) -> None:
    for d in decls:
        number = _as_float(d.value)
        if number is None:
            report.add_issue(f"{d.name}: Not a valid number ({d.value})")
        elif number < 100 or number > 900:
            report.add_warning(f"{d.name}: Unusual font weight ({number:g})")
        elif number % 100 != 0 and number not in _HALF_STEP_WEIGHTS:
            report.add_warning(f"{d.name}: Non-standard font weight ({number:g})")


def _check_color(report: ValidationReport, decls: list[Declaration]) -> None:
    for d in decls:
        if not _COLOR.match(d.value):
            report.add_issue(f"{d.name}: Invalid color format ({d.value})")


def _check_sizing(report: ValidationReport, decls: list[Declaration]) -> None:
    for d in decls:
        if not _SIZE.match(d.value) and d.value not in _SIZE_KEYWORDS:
            report.add_warning(f"{d.name}: Sizing without unit ({d.value})")


def _check_invalid(report: ValidationReport, decls: list[Declaration]) -> None:
    for d in decls:
        if d.value in ("undefined", "null", "") or "{" in d.value:
            report.add_issue(f"{d.name}: Invalid value ({d.value})")


def validate_css(css: str) -> ValidationReport:
    """Validate the custom properties in generated CSS text."""
    decls = parse_declarations(css)
    report = ValidationReport(decls)

    opacity = [d for d in decls if "opacity" in d.name]
    font_weight = [d for d in decls if "font-weight" in d.name]
    color = [d for d in decls if "color" in d.name]
    sizing = [d for d in decls if any(marker in d.name for marker in _SIZING_MARKERS)]

    report.checked = {
        "Opacity": len(opacity),
        "Font Weight": len(font_weight),
        "Color": len(color),
        "Sizing/Spacing": len(sizing),
    }

    _check_opacity(report, opacity)
    _check_font_weight(report, font_weight)
    _check_color(report, color)
    _check_sizing(report, sizing)
    _check_invalid(report, decls)
    return report


def validate_file(path: Path) -> ValidationReport:
    return validate_css(Path(path).read_text(encoding="utf-8"))


@dataclass
class ValidationSummary:
    """Validation reports for several files."""

    reports: dict[Path, ValidationReport] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.reports.values())


def validate_paths(paths: list[Path]) -> ValidationSummary:
    """Validate CSS files; directories are searched for .css files."""
    summary = ValidationSummary()
    for path in paths:
        files = sorted(path.rglob("*.css")) if path.is_dir() else [path]
        for file in files:
            summary.reports[file] = validate_file(file)
    return summary
