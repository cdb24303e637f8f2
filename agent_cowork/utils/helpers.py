"""Filesystem helpers."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path(data_dir: str | None = None) -> Path:
    """Return the expanded data directory, creating it if needed."""
    return ensure_dir(Path(data_dir or "~/.agent-cowork").expanduser())
