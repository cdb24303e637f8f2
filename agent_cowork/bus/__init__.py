"""Event bus module: wire contract, channel and transports to the agent backend."""

from agent_cowork.bus.channel import EventChannel, Unsubscribe
from agent_cowork.bus.events import ClientEvent, EventDecodeError, ServerEvent, decode_server_event
from agent_cowork.bus.transport import InMemoryTransport, SubprocessTransport, Transport

__all__ = [
    "ClientEvent",
    "EventChannel",
    "EventDecodeError",
    "InMemoryTransport",
    "ServerEvent",
    "SubprocessTransport",
    "Transport",
    "Unsubscribe",
    "decode_server_event",
]
