"""Single source for the engine version reported by the API and CT packages."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

DISTRIBUTION_NAME: Final = "ukcorptax"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version.

    Source checkouts without an install fall back to ``[project].version`` in
    ``pyproject.toml``.
    """

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return _pyproject_version(PYPROJECT_PATH)


def _pyproject_version(path: Path) -> str:
    if not path.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    with path.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})

    version = project.get("version")
    if not version:
        raise RuntimeError(f"No [project].version declared in {path.name}")
    return str(version)


__all__ = ["DISTRIBUTION_NAME", "get_project_version"]
