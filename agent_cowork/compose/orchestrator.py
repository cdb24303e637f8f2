"""Session orchestrator: turns compose-slot actions into client events.

Per compose slot the orchestrator moves through three states::

    composing --send, no active session--> awaiting_title --title--> composing
    composing --send, active session-----> dispatched -------------> composing

While a title request is in flight the pending-start flag is set and any
further send is dropped, so one user gesture yields at most one
``session.start``.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from loguru import logger

from agent_cowork.bus.events import (
    ClientEvent,
    SessionContinue,
    SessionContinuePayload,
    SessionStart,
    SessionStartPayload,
    SessionStop,
    SessionStopPayload,
)
from agent_cowork.compose.state import ComposeContext
from agent_cowork.providers.base import TitleGenerator
from agent_cowork.session.models import SessionStatus

DEFAULT_ALLOWED_TOOLS = "Read,Edit,Bash"

ERR_TITLE_FAILED = "Failed to get session title."
ERR_SESSION_RUNNING = "Session is still running. Please wait for it to finish."
ERR_CWD_REQUIRED = "Working Directory is required to start a session."

SendEvent = Callable[[ClientEvent], None]


class ComposeState(str, Enum):
    COMPOSING = "composing"
    AWAITING_TITLE = "awaiting_title"
    DISPATCHED = "dispatched"


class SendOutcome(str, Enum):
    """What a compose action ended up doing."""

    STARTED = "started"
    CONTINUED = "continued"
    STOPPED = "stopped"
    IGNORED = "ignored"
    REJECTED = "rejected"
    FAILED = "failed"


class SessionRejected(Exception):
    """A compose action failed validation; the message is user-facing."""


class SessionOrchestrator:
    """Validates compose actions and emits the matching client events."""

    def __init__(
        self,
        context: ComposeContext,
        send_event: SendEvent,
        title_generator: TitleGenerator,
        allowed_tools: str = DEFAULT_ALLOWED_TOOLS,
    ) -> None:
        self.context = context
        self.send_event = send_event
        self.title_generator = title_generator
        self.allowed_tools = allowed_tools
        self.state = ComposeState.COMPOSING

    @property
    def is_running(self) -> bool:
        session = self.context.registry.get(self.context.active_session_id)
        return session is not None and session.status == SessionStatus.RUNNING

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def send(self, require_cwd: bool = False) -> SendOutcome:
        """Start a new session or continue the active one with the buffer."""
        ctx = self.context
        if require_cwd and not ctx.active_session_id and not ctx.cwd.strip():
            ctx.errors.report(ERR_CWD_REQUIRED)
            return SendOutcome.REJECTED
        if ctx.buffer.is_blank():
            return SendOutcome.IGNORED
        if ctx.pending.is_set:
            logger.debug("Send dropped: session start already pending")
            return SendOutcome.IGNORED
        try:
            if ctx.active_session_id:
                return self._continue(ctx.active_session_id)
            return await self._start()
        except SessionRejected as exc:
            ctx.errors.report(str(exc))
            return SendOutcome.REJECTED
        finally:
            self.state = ComposeState.COMPOSING

    async def start_from_dialog(self) -> SendOutcome:
        """Send from the dedicated start surface, which needs a working directory."""
        return await self.send(require_cwd=True)

    def stop(self) -> SendOutcome:
        """Ask the backend to stop the active session."""
        session_id = self.context.active_session_id
        if not session_id:
            return SendOutcome.IGNORED
        self.send_event(SessionStop(payload=SessionStopPayload(session_id=session_id)))
        logger.info(f"Stop requested for session {session_id}")
        return SendOutcome.STOPPED

    async def submit(self, disabled: bool = False) -> SendOutcome:
        """Primary action: stop a running session, otherwise send."""
        running = self.is_running
        if disabled and not running:
            return SendOutcome.IGNORED
        if running:
            return self.stop()
        return await self.send()

    def new_task(self) -> None:
        """Deselect the active session so the next send starts a new one."""
        self.context.active_session_id = None

    def select_session(self, session_id: str) -> bool:
        if session_id not in self.context.registry:
            return False
        self.context.active_session_id = session_id
        self.context.awaiting_session = False
        return True

    def insert_saved_prompt(self, content: str) -> str:
        """Insert a saved prompt, on its own line if the buffer has text."""
        buffer = self.context.buffer
        buffer.set(f"{buffer.value}\n{content}" if buffer.value else content)
        return buffer.value

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _start(self) -> SendOutcome:
        ctx = self.context
        ctx.pending.set()
        self.state = ComposeState.AWAITING_TITLE
        try:
            title = await self.title_generator.generate(ctx.buffer.value)
        except Exception as exc:
            logger.warning(f"Title generation failed: {exc}")
            ctx.pending.clear()
            ctx.errors.report(ERR_TITLE_FAILED)
            return SendOutcome.FAILED

        cwd = ctx.cwd.strip() or None
        self.send_event(SessionStart(payload=SessionStartPayload(
            title=title,
            prompt=ctx.buffer.value,
            cwd=cwd,
            allowed_tools=self.allowed_tools,
        )))
        logger.info(f"Session start requested: {title!r} (cwd={cwd})")
        ctx.buffer.clear()
        ctx.pending.clear()
        ctx.errors.clear()
        ctx.awaiting_session = True
        return SendOutcome.STARTED

    def _continue(self, session_id: str) -> SendOutcome:
        ctx = self.context
        self.state = ComposeState.DISPATCHED
        session = ctx.registry.get(session_id)
        if session is not None and session.status == SessionStatus.RUNNING:
            raise SessionRejected(ERR_SESSION_RUNNING)
        self.send_event(SessionContinue(payload=SessionContinuePayload(
            session_id=session_id,
            prompt=ctx.buffer.value,
        )))
        ctx.registry.rearm(session_id)
        ctx.buffer.clear()
        ctx.errors.clear()
        logger.info(f"Continue sent to session {session_id}")
        return SendOutcome.CONTINUED
