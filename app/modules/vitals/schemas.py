from pydantic import Field

from app.modules.alerts.schemas import DispatchOutcome
from app.modules.vitals.models import VitalsReading
from app.shared.constants import Severity
from app.shared.schemas import CamelModel


class VitalsCheckRequest(CamelModel):
    """Inbound payload for checking a caller-supplied reading."""

    patient_id: str = Field(min_length=1)
    patient_name: str = Field(min_length=1)
    room: str = Field(min_length=1)
    vitals: VitalsReading


class VitalsCheckResponse(CamelModel):
    success: bool = True
    status: Severity
    issues: list[str]
    sms_sent: bool
    sms_details: DispatchOutcome | None = None
    alert_id: str | None = None


class PatientVitalsResponse(VitalsCheckResponse):
    """Check result for a generated reading, echoing who was read and what was measured."""

    patient_id: str
    patient_name: str
    room: str
    vitals: VitalsReading
