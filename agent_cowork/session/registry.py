"""In-memory registry of backend sessions, updated from server events."""

from __future__ import annotations

from typing import Any

from loguru import logger

from agent_cowork.bus.events import (
    RunnerErrorEvent,
    ServerEvent,
    SessionDeletedEvent,
    SessionHistoryEvent,
    SessionListEvent,
    SessionStatusEvent,
    StreamMessageEvent,
    StreamUserPromptEvent,
    UnknownServerEvent,
)
from agent_cowork.session.models import Session, SessionStatus, Turn


def next_status(session: Session, incoming: SessionStatus) -> SessionStatus:
    """Resolve a reported status against the session's current one.

    Terminal statuses are sticky: a stale ``running``/``idle`` report cannot
    revive a stopped or errored session unless a new continue cycle re-armed
    it. Any transition consumes the re-arm, so one continue cycle can revive
    the session at most once.
    """
    current = session.status
    if incoming.is_terminal:
        session.rearmed = False
        return incoming
    if current.is_terminal and not session.rearmed:
        logger.debug(f"Ignoring stale {incoming.value} for {current.value} session {session.session_id}")
        return current
    session.rearmed = False
    return incoming


class SessionRegistry:
    """Single source of truth for which sessions exist and what they are doing."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def sessions(self) -> list[Session]:
        """Return all sessions, most recently updated first."""
        return sorted(self._sessions.values(), key=lambda s: s.revision, reverse=True)

    def recent_cwds(self, limit: int = 8) -> list[str]:
        """Distinct working directories of known sessions, most recent first."""
        result: list[str] = []
        for session in self.sessions():
            cwd = (session.cwd or "").strip()
            if cwd and cwd not in result:
                result.append(cwd)
            if len(result) >= limit:
                break
        return result

    def rearm(self, session_id: str) -> None:
        """Allow the next non-terminal status to supersede a terminal one."""
        session = self._sessions.get(session_id)
        if session is not None:
            session.rearmed = True

    # ------------------------------------------------------------------ #
    # Server event application                                            #
    # ------------------------------------------------------------------ #

    def apply(self, event: ServerEvent) -> None:
        """Apply one server event in place."""
        if isinstance(event, SessionStatusEvent):
            self._apply_status(event)
        elif isinstance(event, SessionListEvent):
            self._apply_list(event)
        elif isinstance(event, SessionHistoryEvent):
            self._apply_history(event)
        elif isinstance(event, StreamMessageEvent):
            self._apply_stream_message(event)
        elif isinstance(event, StreamUserPromptEvent):
            self._apply_user_prompt(event)
        elif isinstance(event, RunnerErrorEvent):
            self._apply_runner_error(event)
        elif isinstance(event, SessionDeletedEvent):
            self._apply_deleted(event)
        elif isinstance(event, UnknownServerEvent):
            logger.debug(f"Ignoring unhandled server event {event.type}")
        else:  # pragma: no cover - closed union
            raise TypeError(f"Unsupported server event: {event!r}")

    def _apply_status(self, event: SessionStatusEvent) -> None:
        p = event.payload
        session = self._sessions.get(p.session_id)
        if session is None:
            session = Session(
                session_id=p.session_id,
                title=p.title or "",
                status=p.status,
                cwd=p.cwd,
                error=p.error,
            )
            self._sessions[p.session_id] = session
            logger.info(f"Session {p.session_id} created ({p.status.value})")
        else:
            if p.title is not None:
                session.title = p.title
            if p.cwd is not None:
                session.cwd = p.cwd
            if p.error is not None:
                session.error = p.error
            session.status = next_status(session, p.status)
        session.touch()

    def _apply_list(self, event: SessionListEvent) -> None:
        for info in event.payload.sessions:
            session = self._sessions.get(info.id)
            if session is None:
                session = Session(session_id=info.id, title=info.title, status=info.status, cwd=info.cwd)
                self._sessions[info.id] = session
            else:
                session.title = info.title or session.title
                if info.cwd is not None:
                    session.cwd = info.cwd
                session.status = next_status(session, info.status)
            session.touch()

    def _apply_history(self, event: SessionHistoryEvent) -> None:
        p = event.payload
        session = self._require(p.session_id, event.type)
        if session is None:
            return
        session.status = next_status(session, p.status)
        known = len(session.turns)
        for message in p.messages[known:]:
            session.turns.append(_turn_from_message(message))
        session.touch()

    def _apply_stream_message(self, event: StreamMessageEvent) -> None:
        p = event.payload
        session = self._require(p.session_id, event.type)
        if session is None:
            return
        session.turns.append(_turn_from_message(p.message))
        session.touch()

    def _apply_user_prompt(self, event: StreamUserPromptEvent) -> None:
        p = event.payload
        session = self._require(p.session_id, event.type)
        if session is None:
            return
        session.turns.append(Turn(role="user", content=p.prompt))
        if session.status.is_terminal:
            session.rearmed = True
        session.touch()

    def _apply_runner_error(self, event: RunnerErrorEvent) -> None:
        p = event.payload
        if not p.session_id:
            return
        session = self._require(p.session_id, event.type)
        if session is None:
            return
        session.error = p.message
        session.status = next_status(session, SessionStatus.ERRORED)
        session.touch()

    def _apply_deleted(self, event: SessionDeletedEvent) -> None:
        if self._sessions.pop(event.payload.session_id, None) is not None:
            logger.info(f"Session {event.payload.session_id} deleted by backend")

    def _require(self, session_id: str, kind: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning(f"Dropping {kind} for unknown session {session_id}")
        return session


def _turn_from_message(message: dict[str, Any]) -> Turn:
    role = str(message.get("type") or message.get("role") or "assistant")
    return Turn(role=role, content=message)
