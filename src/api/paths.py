"""
Path helpers for repository layout.

Layout:
- config/defaults/: tracked default configs
- config/local/: instance-specific overrides (gitignored)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional


@lru_cache(maxsize=1)
def repo_root() -> Path:
    # This file lives at src/api/paths.py -> parents: api/ -> src/ -> repo root
    return Path(__file__).resolve().parents[2]


def config_defaults_dir() -> Path:
    return repo_root() / "config" / "defaults"


def config_local_dir() -> Path:
    return repo_root() / "config" / "local"


def arena_config_defaults_path() -> Path:
    return config_defaults_dir() / "arena_config.yaml"


def arena_config_local_path() -> Path:
    return config_local_dir() / "arena_config.yaml"


def first_existing(paths: Iterable[Path]) -> Optional[Path]:
    for path in paths:
        try:
            if path.exists():
                return path
        except OSError:
            continue
    return None


def resolve_layered_read_path(
    *,
    local_path: Path,
    defaults_path: Optional[Path] = None,
) -> Path:
    """
    Pick an existing file to read, preferring local overrides.
    Falls back to defaults.
    """
    candidates: list[Path] = [local_path]
    if defaults_path is not None:
        candidates.append(defaults_path)

    existing = first_existing(candidates)
    return existing or local_path
