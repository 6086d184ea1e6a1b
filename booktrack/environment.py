"""Helpers for loading environment variable files across the project."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Tuple

from dotenv import load_dotenv

ENV_FILE_VARIABLE = "BOOKTRACK_ENV_FILE"
ENV_TARGET_VARIABLE = "BOOKTRACK_ENV"

# Files already processed; importing the package twice (CLI and uvicorn
# factory) must not re-read them.
_LOADED_FILES: Tuple[Path, ...] | None = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _iter_candidate_files() -> Iterable[Path]:
    """Yield dotenv files in order of precedence."""

    explicit_paths = os.environ.get(ENV_FILE_VARIABLE)
    if explicit_paths:
        for value in explicit_paths.split(os.pathsep):
            if value.strip():
                yield Path(value).expanduser().resolve()

    root = _project_root()
    names = [".env"]
    target = os.environ.get(ENV_TARGET_VARIABLE)
    if target:
        names.append(f".env.{target}")
    names.append(".env.local")
    for name in names:
        yield (root / name).resolve()


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Load environment variables from project-level dotenv files.

    Variables that are already present in the process environment win over
    values from the files.
    """

    global _LOADED_FILES
    if _LOADED_FILES is not None and not force:
        return _LOADED_FILES

    loaded: list[Path] = []
    seen: set[Path] = set()
    for path in _iter_candidate_files():
        if path in seen or not path.is_file():
            continue
        seen.add(path)
        if load_dotenv(path, override=False):
            loaded.append(path)
    _LOADED_FILES = tuple(loaded)
    return _LOADED_FILES


__all__ = ["load_environment"]
