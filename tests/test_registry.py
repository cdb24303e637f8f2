from __future__ import annotations

from agent_cowork.bus.events import decode_server_event
from agent_cowork.session.models import SessionStatus
from agent_cowork.session.registry import SessionRegistry


def _status(session_id: str, status: str, **extra) -> object:
    return decode_server_event({"type": "session.status", "payload": {"sessionId": session_id, "status": status, **extra}})


def _registry_with(session_id: str, status: str, **extra) -> SessionRegistry:
    registry = SessionRegistry()
    registry.apply(_status(session_id, status, **extra))
    return registry


def test_status_event_creates_session():
    registry = _registry_with("s1", "running", title="Fix bug", cwd="/repo")
    session = registry.get("s1")
    assert session is not None
    assert session.title == "Fix bug"
    assert session.cwd == "/repo"
    assert session.status is SessionStatus.RUNNING
    assert registry.get("missing") is None
    assert registry.get(None) is None


def test_stopped_is_sticky_against_stale_running():
    registry = _registry_with("s1", "running")
    registry.apply(_status("s1", "stopped"))
    registry.apply(_status("s1", "running"))
    assert registry.get("s1").status is SessionStatus.STOPPED


def test_errored_is_sticky_against_stale_idle():
    registry = _registry_with("s1", "running")
    registry.apply(_status("s1", "error"))
    registry.apply(_status("s1", "idle"))
    assert registry.get("s1").status is SessionStatus.ERRORED


def test_rearm_allows_one_new_cycle():
    registry = _registry_with("s1", "stopped")
    registry.rearm("s1")
    registry.apply(_status("s1", "running"))
    assert registry.get("s1").status is SessionStatus.RUNNING

    registry.apply(_status("s1", "stopped"))
    registry.apply(_status("s1", "running"))
    assert registry.get("s1").status is SessionStatus.STOPPED


def test_user_prompt_echo_rearms_and_records_turn():
    registry = _registry_with("s1", "stopped")
    registry.apply(decode_server_event({"type": "stream.user_prompt", "payload": {"sessionId": "s1", "prompt": "again"}}))
    registry.apply(_status("s1", "running"))
    session = registry.get("s1")
    assert session.status is SessionStatus.RUNNING
    assert session.turns[-1].role == "user"
    assert session.turns[-1].content == "again"


def test_duplicate_status_events_are_tolerated():
    registry = _registry_with("s1", "running")
    registry.apply(_status("s1", "running"))
    registry.apply(_status("s1", "stopped"))
    registry.apply(_status("s1", "stopped"))
    assert registry.get("s1").status is SessionStatus.STOPPED
    assert len(registry) == 1


def test_stream_messages_append_in_order():
    registry = _registry_with("s1", "running")
    for text in ("one", "two"):
        registry.apply(decode_server_event(
            {"type": "stream.message", "payload": {"sessionId": "s1", "message": {"type": "assistant", "text": text}}}
        ))
    turns = registry.get("s1").turns
    assert [t.content["text"] for t in turns] == ["one", "two"]
    assert all(t.role == "assistant" for t in turns)


def test_history_only_extends_transcript():
    registry = _registry_with("s1", "running")
    registry.apply(decode_server_event(
        {"type": "stream.message", "payload": {"sessionId": "s1", "message": {"type": "user", "text": "hi"}}}
    ))
    registry.apply(decode_server_event({
        "type": "session.history",
        "payload": {
            "sessionId": "s1",
            "status": "completed",
            "messages": [{"type": "user", "text": "hi"}, {"type": "assistant", "text": "hello"}],
        },
    }))
    session = registry.get("s1")
    assert [t.content["text"] for t in session.turns] == ["hi", "hello"]
    assert session.status is SessionStatus.STOPPED


def test_events_for_unknown_sessions_are_dropped():
    registry = SessionRegistry()
    registry.apply(decode_server_event(
        {"type": "stream.message", "payload": {"sessionId": "ghost", "message": {"type": "assistant"}}}
    ))
    assert len(registry) == 0


def test_session_list_creates_and_updates():
    registry = _registry_with("s1", "stopped")
    registry.apply(decode_server_event({
        "type": "session.list",
        "payload": {"sessions": [
            {"id": "s1", "title": "Old", "status": "running"},
            {"id": "s2", "title": "New", "status": "idle", "cwd": "/b"},
        ]},
    }))
    assert registry.get("s1").status is SessionStatus.STOPPED
    assert registry.get("s2").title == "New"


def test_runner_error_marks_session_errored():
    registry = _registry_with("s1", "running")
    registry.apply(decode_server_event({"type": "runner.error", "payload": {"sessionId": "s1", "message": "crashed"}}))
    session = registry.get("s1")
    assert session.status is SessionStatus.ERRORED
    assert session.error == "crashed"


def test_backend_deletion_removes_session():
    registry = _registry_with("s1", "idle")
    registry.apply(decode_server_event({"type": "session.deleted", "payload": {"sessionId": "s1"}}))
    assert "s1" not in registry


def test_unknown_event_kind_changes_nothing():
    registry = _registry_with("s1", "running")
    before = registry.get("s1").revision
    registry.apply(decode_server_event({"type": "permission.request", "payload": {}}))
    assert registry.get("s1").revision == before


def test_recent_cwds_are_distinct_and_most_recent_first():
    registry = SessionRegistry()
    registry.apply(_status("s1", "idle", cwd="/a"))
    registry.apply(_status("s2", "idle", cwd="/b"))
    registry.apply(_status("s3", "idle", cwd="/a"))
    registry.apply(_status("s4", "idle"))
    assert registry.recent_cwds() == ["/a", "/b"]
    assert registry.recent_cwds(limit=1) == ["/a"]


def _user_prompt(session_id: str, prompt: str) -> object:
    return decode_server_event({"type": "stream.user_prompt", "payload": {"sessionId": session_id, "prompt": prompt}})


def test_echo_during_a_run_does_not_outlive_completion():
    registry = _registry_with("s1", "running")
    registry.apply(_user_prompt("s1", "go"))
    registry.apply(_status("s1", "completed"))
    registry.apply(_status("s1", "running"))
    session = registry.get("s1")
    assert session.status is SessionStatus.STOPPED
    assert not session.rearmed


def test_terminal_answer_to_a_continue_consumes_the_rearm():
    registry = _registry_with("s1", "stopped")
    registry.rearm("s1")
    registry.apply(decode_server_event({"type": "runner.error", "payload": {"sessionId": "s1", "message": "boom"}}))
    registry.apply(_status("s1", "running"))
    assert registry.get("s1").status is SessionStatus.ERRORED


def test_immediate_completion_after_rearm_stays_sticky():
    registry = _registry_with("s1", "stopped")
    registry.rearm("s1")
    registry.apply(_status("s1", "completed"))
    registry.apply(_status("s1", "idle"))
    assert registry.get("s1").status is SessionStatus.STOPPED
