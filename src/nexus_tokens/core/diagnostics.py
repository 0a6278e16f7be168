"""
Non-fatal build diagnostics.

Warnings are plain records collected per build target and returned next to
the resolved tree. They are never raised. Each warning is also logged so a
CLI run shows it as it happens.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildWarning:
    """A non-fatal condition found while building one target."""

    code: ClassVar[str] = "warning"

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class UnresolvedReferenceWarning(BuildWarning):
    """A reference points at a path that holds no token. The reference is kept."""

    code: ClassVar[str] = "unresolved-reference"

    reference: str = ""


@dataclass(frozen=True)
class NormalizationWarning(BuildWarning):
    """A normalizer could not interpret a value. The value is kept."""

    code: ClassVar[str] = "normalization"

    normalizer: str = ""


@dataclass(frozen=True)
class KindConflictWarning(BuildWarning):
    """Two layers define the same path with different kinds. The later layer wins."""

    code: ClassVar[str] = "kind-conflict"

    previous_layer: str = ""
    layer: str = ""


class Diagnostics:
    """Collects warnings for a single build target."""

    def __init__(self, target: str | None = None) -> None:
        self.target = target
        self._warnings: list[BuildWarning] = []

    def add(self, warning: BuildWarning) -> None:
        self._warnings.append(warning)
        if self.target:
            logger.warning("[%s] %s", self.target, warning)
        else:
            logger.warning("%s", warning)

    def extend(self, warnings: Iterable[BuildWarning]) -> None:
        for warning in warnings:
            self.add(warning)

    @property
    def warnings(self) -> tuple[BuildWarning, ...]:
        return tuple(self._warnings)

    def by_code(self, code: str) -> list[BuildWarning]:
        return [w for w in self._warnings if w.code == code]

    def __iter__(self) -> Iterator[BuildWarning]:
        return iter(self._warnings)

    def __len__(self) -> int:
        return len(self._warnings)

    def __bool__(self) -> bool:
        return bool(self._warnings)

    def __repr__(self) -> str:
        return f"Diagnostics(target={self.target!r}, warnings={len(self._warnings)})"
