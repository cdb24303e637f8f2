"""Saved prompt library stored at ~/.agent-cowork/prompts.json."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

from agent_cowork.utils.helpers import ensure_dir

_DATA_ROOT = Path.home() / ".agent-cowork"
_PROMPTS_FILE = "prompts.json"


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


@dataclass
class SavedPrompt:
    """One reusable prompt snippet."""

    id: str
    title: str
    content: str
    created_at: str
    updated_at: str = ""


class PromptStore:
    """CRUD over a single JSON list of saved prompts.

    The file is rewritten on every change; the front-end is single-threaded
    so there are no concurrent writers.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or _DATA_ROOT
        self._path = self._root / _PROMPTS_FILE

    @property
    def path(self) -> Path:
        return self._path

    def list_prompts(self) -> list[SavedPrompt]:
        """Return saved prompts in insertion order."""
        return self._read()

    def get_prompt(self, prompt_id: str) -> SavedPrompt | None:
        for prompt in self._read():
            if prompt.id == prompt_id:
                return prompt
        return None

    def add_prompt(self, title: str, content: str) -> SavedPrompt:
        """Create a prompt. Blank title or content is rejected."""
        _validate(title, content)
        now = _now()
        prompt = SavedPrompt(id=uuid.uuid4().hex[:8], title=title, content=content, created_at=now, updated_at=now)
        prompts = self._read()
        prompts.append(prompt)
        self._write(prompts)
        return prompt

    def update_prompt(self, prompt_id: str, title: str, content: str) -> bool:
        """Update an existing prompt. Returns False if prompt_id not found."""
        _validate(title, content)
        prompts = self._read()
        for prompt in prompts:
            if prompt.id == prompt_id:
                prompt.title = title
                prompt.content = content
                prompt.updated_at = _now()
                self._write(prompts)
                return True
        return False

    def remove_prompt(self, prompt_id: str) -> bool:
        prompts = self._read()
        kept = [p for p in prompts if p.id != prompt_id]
        if len(kept) == len(prompts):
            return False
        self._write(kept)
        return True

    # ------------------------------------------------------------------ #
    # Private                                                               #
    # ------------------------------------------------------------------ #

    def _read(self) -> list[SavedPrompt]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Prompt library unreadable at {self._path}: {exc}")
            return []
        if not isinstance(data, list):
            return []
        result: list[SavedPrompt] = []
        for d in data:
            if not isinstance(d, dict) or not d.get("id"):
                continue
            result.append(SavedPrompt(
                id=str(d["id"]),
                title=str(d.get("title", "")),
                content=str(d.get("content", "")),
                created_at=str(d.get("created_at", "")),
                updated_at=str(d.get("updated_at", "")),
            ))
        return result

    def _write(self, prompts: list[SavedPrompt]) -> None:
        ensure_dir(self._root)
        self._path.write_text(
            json.dumps([asdict(p) for p in prompts], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


def _validate(title: str, content: str) -> None:
    if not title.strip() or not content.strip():
        raise ValueError("Prompt title and content are required")
