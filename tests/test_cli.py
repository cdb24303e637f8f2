from __future__ import annotations

import json

import pytest

from agent_cowork.bridge import CoworkBridge
from agent_cowork.bus.channel import EventChannel
from agent_cowork.bus.transport import InMemoryTransport
from agent_cowork.cli.commands import _handle_line
from agent_cowork.session.prompt_store import PromptStore
from tests.fakes import FakeFileReader, FakeTitleGenerator


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def bridge(transport: InMemoryTransport) -> CoworkBridge:
    return CoworkBridge(
        channel=EventChannel(transport),
        title_generator=FakeTitleGenerator(title="T"),
        file_reader=FakeFileReader({}),
    )


@pytest.mark.asyncio
async def test_cwd_without_argument_lists_recent_directories(bridge, transport, tmp_path, capsys):
    await bridge.open()
    for session_id, cwd in (("s1", "/repo/a"), ("s2", "/repo/b")):
        transport.deliver(json.dumps({"type": "session.status", "payload": {"sessionId": session_id, "status": "idle", "cwd": cwd}}))

    assert await _handle_line(bridge, PromptStore(tmp_path), "/cwd")

    out = capsys.readouterr().out
    assert out.index("/repo/b") < out.index("/repo/a")
    assert bridge.context.cwd == ""


@pytest.mark.asyncio
async def test_cwd_with_argument_sets_working_directory(bridge, tmp_path):
    await bridge.open()
    assert await _handle_line(bridge, PromptStore(tmp_path), "/cwd /work")
    assert bridge.context.cwd == "/work"


@pytest.mark.asyncio
async def test_quit_ends_the_loop(bridge, tmp_path):
    assert not await _handle_line(bridge, PromptStore(tmp_path), "/quit")
