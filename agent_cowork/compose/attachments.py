"""Fold dropped or selected files into the prompt buffer as context blocks."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from loguru import logger

from agent_cowork.compose.state import PromptBuffer
from agent_cowork.providers.base import FileReader


@dataclass(frozen=True)
class FileRef:
    """A file handed over by a drop target; ``path`` may be unknown."""

    name: str
    path: str | None = None


AttachmentSource = Union[str, "os.PathLike[str]", FileRef]


@dataclass
class AttachReport:
    """Per-batch result of an attach call."""

    attached: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)


def format_file_block(name: str, content: str) -> str:
    return f"\n\n--- File: {name} ---\n{content}\n------\n"


def _source_path(item: AttachmentSource) -> str | None:
    if isinstance(item, FileRef):
        return item.path or None
    return os.fspath(item) or None


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(Path(path).expanduser()))


class ContextAttachmentPipeline:
    """Reads files one at a time and appends each to the prompt buffer."""

    def __init__(self, buffer: PromptBuffer, file_reader: FileReader) -> None:
        self.buffer = buffer
        self.file_reader = file_reader

    async def attach(self, items: Iterable[AttachmentSource]) -> AttachReport:
        """Attach a batch in input order; a failing file does not stop the rest."""
        report = AttachReport()
        seen: set[str] = set()
        for item in items:
            path = _source_path(item)
            if path is None:
                label = item.name if isinstance(item, FileRef) else str(item)
                logger.debug(f"Skipping attachment without a path: {label}")
                report.skipped.append(label)
                continue
            key = _normalize(path)
            if key in seen:
                report.skipped.append(path)
                continue
            seen.add(key)

            try:
                result = await self.file_reader.read(path)
            except Exception as exc:
                logger.error(f"Error reading file {path}: {exc}")
                report.failed[path] = str(exc)
                continue
            if not result.success or result.data is None:
                error = result.error or "unknown error"
                logger.error(f"Failed to read file {path}: {error}")
                report.failed[path] = error
                continue

            # Read the buffer only now so edits made during the read survive.
            self.buffer.append(format_file_block(result.data.name, result.data.content))
            report.attached.append(result.data.name)
        return report
