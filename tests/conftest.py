from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from app.modules.alerts.cooldown import CooldownGate
from app.modules.alerts.engine import EvaluationOrchestrator
from app.modules.alerts.notifier import AlertDispatcher, LoopbackChannel
from app.modules.alerts.service import get_orchestrator
from app.modules.alerts.store import AlertHistoryStore
from app.modules.vitals.models import VitalsReading
from tests.fakes import NORMAL_VITALS, FakeClock, RecordingChannel


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate() -> CooldownGate:
    return CooldownGate()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def store() -> AlertHistoryStore:
    return AlertHistoryStore()


@pytest.fixture
def orchestrator(
    channel: RecordingChannel,
    gate: CooldownGate,
    store: AlertHistoryStore,
    clock: FakeClock,
) -> EvaluationOrchestrator:
    """A pipeline with its own state, a scripted channel and a frozen clock."""
    dispatcher = AlertDispatcher(channel=channel, gate=gate, timeout_seconds=1.0)
    return EvaluationOrchestrator(dispatcher=dispatcher, store=store, clock=clock)


@pytest.fixture
def loopback_orchestrator(clock: FakeClock) -> EvaluationOrchestrator:
    dispatcher = AlertDispatcher(channel=LoopbackChannel(), gate=CooldownGate())
    return EvaluationOrchestrator(
        dispatcher=dispatcher, store=AlertHistoryStore(), clock=clock
    )


@pytest.fixture
def reading_factory():
    def _make(**overrides: object) -> VitalsReading:
        return VitalsReading(**{**NORMAL_VITALS, **overrides})

    return _make


@pytest.fixture
async def client(
    orchestrator: EvaluationOrchestrator,
) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_orchestrator, None)
