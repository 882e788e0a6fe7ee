from fastapi import Request

from app.core.config import Settings, settings as default_settings
from app.modules.alerts.cooldown import CooldownGate
from app.modules.alerts.engine import EvaluationOrchestrator
from app.modules.alerts.notifier import AlertDispatcher, build_channel
from app.modules.alerts.store import AlertHistoryStore


def build_orchestrator(config: Settings = default_settings) -> EvaluationOrchestrator:
    """Assemble a fresh pipeline with its own gate and history store."""
    dispatcher = AlertDispatcher(
        channel=build_channel(config),
        gate=CooldownGate(),
        timeout_seconds=config.NOTIFICATION_TIMEOUT_SECONDS,
    )
    return EvaluationOrchestrator(dispatcher=dispatcher, store=AlertHistoryStore())


def get_orchestrator(request: Request) -> EvaluationOrchestrator:
    """FastAPI dependency returning the pipeline owned by the running app."""
    return request.app.state.orchestrator
