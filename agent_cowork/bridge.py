"""Bridge between the compose surface and the agent backend."""

from __future__ import annotations

from loguru import logger

from agent_cowork.bus.channel import EventChannel, Unsubscribe
from agent_cowork.bus.events import RunnerErrorEvent, ServerEvent, SessionStatusEvent
from agent_cowork.compose.attachments import ContextAttachmentPipeline
from agent_cowork.compose.orchestrator import DEFAULT_ALLOWED_TOOLS, SendOutcome, SessionOrchestrator
from agent_cowork.compose.projection import ComposeAffordances, project
from agent_cowork.compose.state import ComposeContext
from agent_cowork.config.schema import Config
from agent_cowork.providers.base import FileReader, TitleGenerator


class CoworkBridge:
    """Wires channel, registry, compose context and orchestrator together.

    Server events are applied to the registry in delivery order from a single
    channel subscription. After a ``session.start`` the next session the
    backend announces becomes the active one.
    """

    def __init__(
        self,
        channel: EventChannel,
        title_generator: TitleGenerator,
        file_reader: FileReader,
        config: Config | None = None,
        context: ComposeContext | None = None,
    ) -> None:
        self.channel = channel
        self.config = config or Config()
        self.context = context or ComposeContext(cwd=self.config.compose.default_cwd)
        self.registry = self.context.registry
        self.orchestrator = SessionOrchestrator(
            context=self.context,
            send_event=channel.send,
            title_generator=title_generator,
            allowed_tools=self.config.compose.allowed_tools or DEFAULT_ALLOWED_TOOLS,
        )
        self.attachments = ContextAttachmentPipeline(self.context.buffer, file_reader)
        self._unsubscribe: Unsubscribe | None = channel.subscribe(self.handle_server_event)

    async def open(self) -> None:
        await self.channel.open()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.channel.close()

    def affordances(self, disabled: bool = False) -> ComposeAffordances:
        return project(self.registry, self.context.active_session_id, disabled=disabled)

    async def send(self) -> SendOutcome:
        """Send from the main compose surface (start surface when configured)."""
        if self.config.compose.require_cwd_on_start:
            return await self.orchestrator.start_from_dialog()
        return await self.orchestrator.send()

    def handle_server_event(self, event: ServerEvent) -> None:
        ctx = self.context
        is_new = isinstance(event, SessionStatusEvent) and event.payload.session_id not in self.registry
        self.registry.apply(event)

        if is_new and ctx.awaiting_session:
            session_id = event.payload.session_id
            ctx.active_session_id = session_id
            ctx.awaiting_session = False
            logger.info(f"Session {session_id} is now active")
        elif isinstance(event, RunnerErrorEvent):
            ctx.errors.report(event.payload.message)
