from __future__ import annotations

import json

import pytest

from agent_cowork.bus.channel import EventChannel
from agent_cowork.bus.events import SessionStatusEvent, SessionStop, SessionStopPayload
from agent_cowork.bus.transport import InMemoryTransport

STATUS_FRAME = json.dumps({"type": "session.status", "payload": {"sessionId": "s1", "status": "running"}})


async def _open_channel(**kwargs) -> tuple[EventChannel, InMemoryTransport]:
    transport = InMemoryTransport()
    channel = EventChannel(transport, **kwargs)
    await channel.open()
    return channel, transport


@pytest.mark.asyncio
async def test_send_serializes_to_transport():
    channel, transport = await _open_channel()
    channel.send(SessionStop(payload=SessionStopPayload(session_id="s1")))
    assert [json.loads(frame) for frame in transport.sent] == [{"type": "session.stop", "payload": {"sessionId": "s1"}}]


@pytest.mark.asyncio
async def test_server_events_fan_out_in_registration_order():
    channel, transport = await _open_channel()
    seen: list[tuple[str, str]] = []
    channel.subscribe(lambda e: seen.append(("a", e.type)))
    channel.subscribe(lambda e: seen.append(("b", e.type)))

    transport.deliver(STATUS_FRAME)

    assert seen == [("a", "session.status"), ("b", "session.status")]


@pytest.mark.asyncio
async def test_unsubscribe_is_idempotent_and_removes_only_its_registration():
    channel, transport = await _open_channel()
    seen: list[str] = []
    handler = seen.append
    first = channel.subscribe(handler)
    channel.subscribe(handler)

    first()
    first()
    transport.deliver(STATUS_FRAME)

    assert len(seen) == 1
    assert channel.subscriber_count == 1


@pytest.mark.asyncio
async def test_unsubscribe_during_dispatch_is_safe():
    channel, transport = await _open_channel()
    seen: list[str] = []
    unsubscribers = []

    def first(event):
        seen.append("first")
        unsubscribers[0]()

    unsubscribers.append(channel.subscribe(first))
    channel.subscribe(lambda e: seen.append("second"))

    transport.deliver(STATUS_FRAME)
    transport.deliver(STATUS_FRAME)

    assert seen == ["first", "second", "second"]


@pytest.mark.asyncio
async def test_malformed_frame_is_reported_and_subscription_survives():
    errors: list[str] = []
    channel, transport = await _open_channel(on_decode_error=lambda raw, exc: errors.append(raw))
    seen = []
    channel.subscribe(seen.append)

    transport.deliver("{broken")
    transport.deliver(STATUS_FRAME)

    assert errors == ["{broken"]
    assert len(seen) == 1
    assert isinstance(seen[0], SessionStatusEvent)


@pytest.mark.asyncio
async def test_failing_handler_does_not_block_later_handlers():
    channel, transport = await _open_channel()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    channel.subscribe(broken)
    channel.subscribe(seen.append)

    transport.deliver(STATUS_FRAME)

    assert len(seen) == 1


@pytest.mark.asyncio
async def test_closed_transport_drops_sends():
    channel, transport = await _open_channel()
    await channel.close()
    channel.send(SessionStop(payload=SessionStopPayload(session_id="s1")))
    assert transport.sent == []
