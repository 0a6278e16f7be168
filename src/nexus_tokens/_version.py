"""Version lookup for nexus-tokens."""

import tomllib
from importlib import metadata
from pathlib import Path

DIST_NAME = "nexus-tokens"
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """Return the installed distribution version.

    A source checkout that was never installed falls back to the
    ``[project]`` table of its pyproject.toml.
    """
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        pass
    try:
        with _PYPROJECT.open("rb") as f:
            return str(tomllib.load(f)["project"]["version"])
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "0.0.0"
