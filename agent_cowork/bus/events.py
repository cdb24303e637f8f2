"""Wire contract between the front-end and the agent backend.

Client events carry user intent to the backend; server events report session
state back. Both travel as JSON objects of the form
``{"type": "<kind>", "payload": {...}}`` with camelCase payload keys.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from agent_cowork.session.models import SessionStatus


class EventDecodeError(ValueError):
    """Raised when a raw server frame cannot be decoded into an event."""


def _coerce_status(value: object) -> SessionStatus:
    if isinstance(value, SessionStatus):
        return value
    return SessionStatus(value)


Status = Annotated[SessionStatus, BeforeValidator(_coerce_status)]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class _LenientModel(BaseModel):
    """Server payloads may grow fields the client does not know about."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Client -> backend
# ---------------------------------------------------------------------------

class SessionStartPayload(_Model):
    title: str
    prompt: str
    cwd: str | None = None
    allowed_tools: str = Field(alias="allowedTools")


class SessionContinuePayload(_Model):
    session_id: str = Field(alias="sessionId")
    prompt: str


class SessionStopPayload(_Model):
    session_id: str = Field(alias="sessionId")


class SessionStart(_Model):
    type: Literal["session.start"] = "session.start"
    payload: SessionStartPayload


class SessionContinue(_Model):
    type: Literal["session.continue"] = "session.continue"
    payload: SessionContinuePayload


class SessionStop(_Model):
    type: Literal["session.stop"] = "session.stop"
    payload: SessionStopPayload


ClientEvent = Union[SessionStart, SessionContinue, SessionStop]


def client_event_to_dict(event: ClientEvent) -> dict[str, Any]:
    """Return the wire representation of a client event."""
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode_client_event(event: ClientEvent) -> str:
    """Serialize a client event to one JSON frame."""
    return json.dumps(client_event_to_dict(event), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Backend -> client
# ---------------------------------------------------------------------------

class SessionInfo(_LenientModel):
    id: str
    title: str = ""
    status: Status = SessionStatus.IDLE
    cwd: str | None = None


class SessionStatusPayload(_LenientModel):
    session_id: str = Field(alias="sessionId")
    status: Status
    title: str | None = None
    cwd: str | None = None
    error: str | None = None


class SessionListPayload(_LenientModel):
    sessions: list[SessionInfo] = Field(default_factory=list)


class SessionHistoryPayload(_LenientModel):
    session_id: str = Field(alias="sessionId")
    status: Status
    messages: list[dict[str, Any]] = Field(default_factory=list)


class SessionDeletedPayload(_LenientModel):
    session_id: str = Field(alias="sessionId")


class StreamMessagePayload(_LenientModel):
    session_id: str = Field(alias="sessionId")
    message: dict[str, Any]


class StreamUserPromptPayload(_LenientModel):
    session_id: str = Field(alias="sessionId")
    prompt: str


class RunnerErrorPayload(_LenientModel):
    session_id: str | None = Field(default=None, alias="sessionId")
    message: str


class SessionStatusEvent(_LenientModel):
    type: Literal["session.status"] = "session.status"
    payload: SessionStatusPayload


class SessionListEvent(_LenientModel):
    type: Literal["session.list"] = "session.list"
    payload: SessionListPayload


class SessionHistoryEvent(_LenientModel):
    type: Literal["session.history"] = "session.history"
    payload: SessionHistoryPayload


class SessionDeletedEvent(_LenientModel):
    type: Literal["session.deleted"] = "session.deleted"
    payload: SessionDeletedPayload


class StreamMessageEvent(_LenientModel):
    type: Literal["stream.message"] = "stream.message"
    payload: StreamMessagePayload


class StreamUserPromptEvent(_LenientModel):
    type: Literal["stream.user_prompt"] = "stream.user_prompt"
    payload: StreamUserPromptPayload


class RunnerErrorEvent(_LenientModel):
    type: Literal["runner.error"] = "runner.error"
    payload: RunnerErrorPayload


class UnknownServerEvent(_LenientModel):
    """A well-formed frame of a kind this client does not handle."""

    type: str
    payload: Any = None


ServerEvent = Union[
    SessionStatusEvent,
    SessionListEvent,
    SessionHistoryEvent,
    SessionDeletedEvent,
    StreamMessageEvent,
    StreamUserPromptEvent,
    RunnerErrorEvent,
    UnknownServerEvent,
]

SERVER_EVENT_TYPES: dict[str, type[BaseModel]] = {
    "session.status": SessionStatusEvent,
    "session.list": SessionListEvent,
    "session.history": SessionHistoryEvent,
    "session.deleted": SessionDeletedEvent,
    "stream.message": StreamMessageEvent,
    "stream.user_prompt": StreamUserPromptEvent,
    "runner.error": RunnerErrorEvent,
}


def decode_server_event(raw: str | bytes | Mapping[str, Any]) -> ServerEvent:
    """Decode one raw server frame.

    Raises:
        EventDecodeError: the frame is not a JSON object with a string
            ``type``, or its payload does not match the kind's schema.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise EventDecodeError(f"invalid JSON: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise EventDecodeError(f"expected an object, got {type(data).__name__}")
    kind = data.get("type")
    if not isinstance(kind, str) or not kind:
        raise EventDecodeError("missing event type")

    model = SERVER_EVENT_TYPES.get(kind, UnknownServerEvent)
    try:
        return model.model_validate(dict(data))  # type: ignore[return-value]
    except ValidationError as exc:
        raise EventDecodeError(f"invalid {kind!r} payload: {exc.error_count()} error(s)") from exc
