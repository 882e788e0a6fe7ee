"""HTTP endpoints for browsing and resolving recorded alerts."""

from fastapi import APIRouter, Depends, Query

from app.modules.alerts.engine import EvaluationOrchestrator
from app.modules.alerts.schemas import AlertEvent
from app.modules.alerts.service import get_orchestrator
from app.shared.constants import DEFAULT_HISTORY_LIMIT
from app.shared.schemas import ItemEnvelope, ListEnvelope

router = APIRouter()


@router.get(
    "/history",
    response_model=ListEnvelope[AlertEvent],
    summary="Get recent alert history",
)
async def read_alert_history(
    limit: int = Query(
        DEFAULT_HISTORY_LIMIT, ge=1, le=1000, description="Maximum alerts to return"
    ),
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
) -> ListEnvelope[AlertEvent]:
    """Return the last `limit` alerts, oldest first."""
    return ListEnvelope[AlertEvent].of(orchestrator.history(limit))


@router.get(
    "/active",
    response_model=ListEnvelope[AlertEvent],
    summary="Get unresolved alerts",
)
async def read_active_alerts(
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
) -> ListEnvelope[AlertEvent]:
    return ListEnvelope[AlertEvent].of(orchestrator.active())


@router.delete(
    "/{alert_id}",
    response_model=ItemEnvelope[AlertEvent],
    summary="Mark an alert as resolved",
)
async def resolve_alert(
    alert_id: str,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
) -> ItemEnvelope[AlertEvent]:
    event = orchestrator.resolve(alert_id)
    return ItemEnvelope[AlertEvent](
        message=f"Alert {alert_id} marked as resolved", data=event
    )
