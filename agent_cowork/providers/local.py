"""Local, dependency-free implementations of the collaborator interfaces."""

from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from agent_cowork.providers.base import FileReader, ReadFileResult, TitleGenerationError, TitleGenerator

DEFAULT_MAX_BYTES = 1024 * 1024


class HeuristicTitleGenerator(TitleGenerator):
    """Derive a title from the first non-empty line of the prompt."""

    def __init__(self, max_length: int = 40) -> None:
        self.max_length = max(8, max_length)

    async def generate(self, prompt: str) -> str:
        for line in (prompt or "").splitlines():
            cleaned = " ".join(line.split())
            if cleaned:
                if len(cleaned) > self.max_length:
                    return cleaned[: self.max_length].rstrip() + "…"
                return cleaned
        raise TitleGenerationError("Prompt is empty")


class LocalFileReader(FileReader):
    """Read UTF-8 text files from the local filesystem off the event loop."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self.max_bytes = max_bytes

    async def read(self, path: str) -> ReadFileResult:
        return await asyncio.to_thread(self._read_sync, path)

    def _read_sync(self, path: str) -> ReadFileResult:
        target = Path(path).expanduser()
        if not target.exists():
            return ReadFileResult.fail(f"File not found: {target}")
        if not target.is_file():
            return ReadFileResult.fail(f"Not a file: {target}")
        try:
            size = target.stat().st_size
            if size > self.max_bytes:
                return ReadFileResult.fail(f"File too large ({size} bytes, limit {self.max_bytes})")
            content = target.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            return ReadFileResult.fail(f"Not a UTF-8 text file: {target}")
        except OSError as exc:
            logger.debug(f"read failed for {target}: {exc}")
            return ReadFileResult.fail(str(exc))
        return ReadFileResult.ok(name=target.name, content=content, path=str(target.resolve()))
