"""Explicit compose-slot state handed to the orchestrator.

All mutations happen synchronously inside one event-loop turn, so no locks
are needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from loguru import logger

from agent_cowork.session.registry import SessionRegistry

ErrorListener = Callable[[str], None]


class PromptBuffer:
    """Not-yet-sent user input."""

    def __init__(self, value: str = "") -> None:
        self._value = value
        self.clear_count = 0

    @property
    def value(self) -> str:
        return self._value

    def set(self, text: str) -> None:
        self._value = text

    def append(self, text: str) -> str:
        """Append to the latest value and return the new contents."""
        self._value = self._value + text
        return self._value

    def clear(self) -> None:
        self._value = ""
        self.clear_count += 1

    def is_blank(self) -> bool:
        return not self._value.strip()


class PendingStart:
    """True while a new session is being requested."""

    def __init__(self) -> None:
        self._set = False

    @property
    def is_set(self) -> bool:
        return self._set

    def set(self) -> None:
        self._set = True

    def clear(self) -> None:
        self._set = False

    def __bool__(self) -> bool:
        return self._set


class GlobalError:
    """User-visible error slot shared by every compose surface."""

    def __init__(self) -> None:
        self.message: str | None = None
        self._listeners: list[ErrorListener] = []

    def report(self, message: str) -> None:
        logger.warning(f"User-visible error: {message}")
        self.message = message
        for listener in list(self._listeners):
            listener(message)

    def clear(self) -> None:
        self.message = None

    def add_listener(self, listener: ErrorListener) -> None:
        self._listeners.append(listener)


@dataclass
class ComposeContext:
    """Handles the orchestrator reads and writes."""

    registry: SessionRegistry = field(default_factory=SessionRegistry)
    buffer: PromptBuffer = field(default_factory=PromptBuffer)
    pending: PendingStart = field(default_factory=PendingStart)
    errors: GlobalError = field(default_factory=GlobalError)
    cwd: str = ""
    active_session_id: str | None = None
    awaiting_session: bool = False  # adopt the next session the backend announces
