from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable

import structlog

from app.modules.alerts.notifier import AlertDispatcher
from app.modules.alerts.schemas import AlertEvent, AlertPayload, EvaluationReport
from app.modules.alerts.store import AlertHistoryStore
from app.modules.vitals.classifier import classify
from app.modules.vitals.models import VitalsReading
from app.shared.constants import DEFAULT_HISTORY_LIMIT
from app.shared.schemas import utc_now

log = structlog.get_logger(__name__)


class EvaluationOrchestrator:
    """Run one reading through classify -> dispatch -> record and report what happened."""

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        store: AlertHistoryStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._dispatcher = dispatcher
        self._store = store
        self._clock = clock

    @property
    def dispatcher(self) -> AlertDispatcher:
        return self._dispatcher

    @property
    def store(self) -> AlertHistoryStore:
        return self._store

    async def evaluate(
        self,
        patient_id: str,
        patient_name: str,
        room: str,
        reading: VitalsReading,
    ) -> EvaluationReport:
        classification = classify(reading)
        log.info(
            "vitals_evaluated",
            patient_id=patient_id,
            status=classification.status.value,
            issue_count=len(classification.issues),
        )
        if not classification.needs_alert:
            return EvaluationReport(classification=classification)

        now = self._clock()
        # Warning readings still pass through dispatch so the recorded outcome says why no SMS went out.
        outcome = await self._dispatcher.dispatch(
            AlertPayload(
                patient_id=patient_id,
                patient_name=patient_name,
                room=room,
                vitals=reading,
                status=classification.status,
                issues=classification.issues,
                requested_at=now,
            )
        )

        event = AlertEvent(
            id=uuid.uuid4().hex,
            patient_id=patient_id,
            patient_name=patient_name,
            room=room,
            vitals=reading,
            status=classification.status,
            issues=tuple(classification.issues),
            sms_sent=outcome.sent,
            sms_details=outcome,
            timestamp=now,
        )
        alert_id = self._store.append(event)
        log.info(
            "alert_recorded",
            alert_id=alert_id,
            patient_id=patient_id,
            status=classification.status.value,
            sms_sent=outcome.sent,
            reason=outcome.reason.value if outcome.reason else None,
        )
        return EvaluationReport(
            classification=classification, dispatch=outcome, alert_id=alert_id
        )

    def history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AlertEvent]:
        return self._store.list(limit)

    def active(self) -> list[AlertEvent]:
        return self._store.list_unresolved()

    def resolve(self, alert_id: str) -> AlertEvent:
        event = self._store.resolve(alert_id, self._clock())
        log.info("alert_resolved", alert_id=alert_id, patient_id=event.patient_id)
        return event

    async def aclose(self) -> None:
        await self._dispatcher.aclose()
