from __future__ import annotations

import pytest

from agent_cowork.bus.events import decode_server_event
from agent_cowork.compose.projection import PLACEHOLDER_DISABLED, PLACEHOLDER_READY, PrimaryAction, project
from agent_cowork.session.registry import SessionRegistry


def _registry(status: str) -> SessionRegistry:
    registry = SessionRegistry()
    registry.apply(decode_server_event({"type": "session.status", "payload": {"sessionId": "s1", "status": status}}))
    return registry


def test_running_session_shows_stop():
    view = project(_registry("running"), "s1")
    assert view.is_running
    assert view.primary_action is PrimaryAction.STOP
    assert not view.entry_disabled


@pytest.mark.parametrize("status", ["idle", "stopped", "errored"])
def test_non_running_session_shows_send(status):
    view = project(_registry(status), "s1")
    assert not view.is_running
    assert view.primary_action is PrimaryAction.SEND


def test_disabled_entry_stays_enabled_while_running():
    assert not project(_registry("running"), "s1", disabled=True).entry_disabled
    assert project(_registry("idle"), "s1", disabled=True).entry_disabled


def test_no_active_session():
    view = project(_registry("running"), None)
    assert not view.is_running
    assert view.primary_action is PrimaryAction.SEND
    assert view.placeholder == PLACEHOLDER_READY
    assert project(SessionRegistry(), None, disabled=True).placeholder == PLACEHOLDER_DISABLED
