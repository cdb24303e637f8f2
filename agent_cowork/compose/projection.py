"""Read model for the compose surface, derived from the registry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from agent_cowork.session.models import SessionStatus
from agent_cowork.session.registry import SessionRegistry

PLACEHOLDER_DISABLED = "Create/select a task to start..."
PLACEHOLDER_READY = "Describe what you want agent to handle..."


class PrimaryAction(str, Enum):
    SEND = "send"
    STOP = "stop"


@dataclass(frozen=True)
class ComposeAffordances:
    is_running: bool
    primary_action: PrimaryAction
    entry_disabled: bool
    placeholder: str


def project(registry: SessionRegistry, active_session_id: str | None, disabled: bool = False) -> ComposeAffordances:
    """Derive what the compose surface should offer right now."""
    session = registry.get(active_session_id)
    is_running = session is not None and session.status == SessionStatus.RUNNING
    return ComposeAffordances(
        is_running=is_running,
        primary_action=PrimaryAction.STOP if is_running else PrimaryAction.SEND,
        # A running session's stop control stays reachable.
        entry_disabled=disabled and not is_running,
        placeholder=PLACEHOLDER_DISABLED if disabled else PLACEHOLDER_READY,
    )
