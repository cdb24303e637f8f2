from __future__ import annotations

import pytest

from agent_cowork.compose.orchestrator import SessionOrchestrator
from agent_cowork.compose.state import ComposeContext
from tests.fakes import FakeTitleGenerator, Outbox


@pytest.fixture
def context() -> ComposeContext:
    return ComposeContext()


@pytest.fixture
def outbox() -> Outbox:
    return Outbox()


@pytest.fixture
def titles() -> FakeTitleGenerator:
    return FakeTitleGenerator()


@pytest.fixture
def orchestrator(context: ComposeContext, outbox: Outbox, titles: FakeTitleGenerator) -> SessionOrchestrator:
    return SessionOrchestrator(context=context, send_event=outbox, title_generator=titles)
