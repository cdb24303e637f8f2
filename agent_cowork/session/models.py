"""Session data model shared by the registry and the wire codec."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SessionStatus(str, Enum):
    """Lifecycle status of one backend session."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    ERRORED = "errored"

    @classmethod
    def _missing_(cls, value: object) -> "SessionStatus | None":
        # Older backends report "completed" / "error".
        aliases = {"completed": cls.STOPPED, "error": cls.ERRORED}
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.STOPPED, SessionStatus.ERRORED)


@dataclass(frozen=True)
class Turn:
    """One entry of a session transcript."""

    role: str  # "user" | "assistant" | backend-defined message type
    content: Any


@dataclass
class Session:
    """Client-side view of one backend session."""

    session_id: str
    title: str = ""
    status: SessionStatus = SessionStatus.IDLE
    cwd: str | None = None
    turns: list[Turn] = field(default_factory=list)
    error: str | None = None
    updated_at: str = ""
    revision: int = 0
    rearmed: bool = False  # a new continue cycle may leave a terminal status

    def touch(self) -> None:
        self.updated_at = datetime.now().isoformat(timespec="seconds")
        self.revision = next(_revisions)


_revisions = itertools.count(1)
