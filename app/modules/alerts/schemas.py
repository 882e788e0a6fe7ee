from datetime import datetime

from pydantic import ConfigDict, Field

from app.modules.vitals.models import ClassificationResult, VitalsReading
from app.shared.constants import DispatchReason, NotificationProvider, Severity
from app.shared.schemas import CamelModel


class AlertPayload(CamelModel):
    """What the dispatcher needs to know about one alert-worthy reading."""

    model_config = ConfigDict(frozen=True)

    patient_id: str
    patient_name: str
    room: str
    vitals: VitalsReading
    status: Severity
    issues: list[str] = Field(default_factory=list)
    requested_at: datetime


class DispatchOutcome(CamelModel):
    """Result of a single notification attempt, whether or not anything was sent."""

    model_config = ConfigDict(frozen=True)

    sent: bool
    provider: NotificationProvider | None = None
    reason: DispatchReason | None = None
    reference_id: str | None = None
    error_code: str | None = None
    delivery_status: str | None = None
    message: str
    body: str | None = None


class AlertEvent(CamelModel):
    """
    One alert-worthy evaluation as recorded in history.

    Severity and issues are copied at creation; only `resolved`/`resolved_at` change afterwards.
    """

    id: str = Field(frozen=True)
    patient_id: str = Field(frozen=True)
    patient_name: str = Field(frozen=True)
    room: str = Field(frozen=True)
    vitals: VitalsReading = Field(frozen=True)
    status: Severity = Field(frozen=True)
    issues: tuple[str, ...] = Field(frozen=True)
    sms_sent: bool = Field(frozen=True)
    sms_details: DispatchOutcome = Field(frozen=True)
    timestamp: datetime = Field(frozen=True)
    resolved: bool = False
    resolved_at: datetime | None = None


class EvaluationReport(CamelModel):
    classification: ClassificationResult
    dispatch: DispatchOutcome | None = None
    alert_id: str | None = None
