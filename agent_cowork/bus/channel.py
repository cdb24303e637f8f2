"""Event channel: client events out, decoded server events fanned out to subscribers."""

from __future__ import annotations

from typing import Callable

from loguru import logger

from agent_cowork.bus.events import (
    ClientEvent,
    EventDecodeError,
    ServerEvent,
    decode_server_event,
    encode_client_event,
)
from agent_cowork.bus.transport import Transport

ServerEventHandler = Callable[[ServerEvent], None]
DecodeErrorSink = Callable[[str, EventDecodeError], None]
Unsubscribe = Callable[[], None]


class _Registration:
    __slots__ = ("handler", "active")

    def __init__(self, handler: ServerEventHandler) -> None:
        self.handler = handler
        self.active = True


class EventChannel:
    """Bidirectional pipe between the front-end and the agent backend."""

    def __init__(self, transport: Transport, on_decode_error: DecodeErrorSink | None = None) -> None:
        self.transport = transport
        self.on_decode_error = on_decode_error
        self._registrations: list[_Registration] = []

    async def open(self) -> None:
        await self.transport.start(self.receive_raw)

    async def close(self) -> None:
        await self.transport.close()

    def send(self, event: ClientEvent) -> None:
        """Fire-and-forget one client event."""
        frame = encode_client_event(event)
        logger.debug(f"-> {event.type}")
        self.transport.send_raw(frame)

    def subscribe(self, handler: ServerEventHandler) -> Unsubscribe:
        """Register ``handler`` for every decoded server event."""
        registration = _Registration(handler)
        self._registrations.append(registration)

        def unsubscribe() -> None:
            if not registration.active:
                return
            registration.active = False
            self._registrations = [r for r in self._registrations if r is not registration]

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._registrations)

    def receive_raw(self, raw: str) -> None:
        """Decode one inbound frame and dispatch it."""
        try:
            event = decode_server_event(raw)
        except EventDecodeError as exc:
            logger.warning(f"Dropping malformed server event: {exc}")
            if self.on_decode_error is not None:
                self.on_decode_error(raw, exc)
            return
        self.dispatch(event)

    def dispatch(self, event: ServerEvent) -> None:
        logger.debug(f"<- {event.type}")
        for registration in list(self._registrations):
            if not registration.active:
                continue
            try:
                registration.handler(event)
            except Exception:
                logger.exception(f"Server event handler failed for {event.type}")
