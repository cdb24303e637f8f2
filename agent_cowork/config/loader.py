"""Load and save agent-cowork configuration as camelCase JSON."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from loguru import logger

from agent_cowork.config.schema import Config
from agent_cowork.utils.helpers import ensure_dir


def get_config_path() -> Path:
    """Return the default configuration file path."""
    return Path.home() / ".agent-cowork" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Load config from disk, falling back to defaults on any problem."""
    path = config_path or get_config_path()
    if not path.exists():
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top-level value must be an object")
        return Config(**convert_keys(data))
    except (OSError, ValueError) as exc:
        logger.warning(f"Failed to load config from {path}: {exc}")
        logger.warning("Using default configuration.")
        return Config()


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Write config to disk in camelCase form."""
    path = config_path or get_config_path()
    ensure_dir(path.parent)
    data = convert_to_camel(config.model_dump())
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case recursively."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase recursively."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
