"""HTTP endpoints that run readings through the evaluation pipeline."""

from fastapi import APIRouter, Depends

from app.modules.alerts.engine import EvaluationOrchestrator
from app.modules.alerts.service import get_orchestrator
from app.modules.patients.service import PatientDirectory, get_patient_directory
from app.modules.vitals.generator import generate_random_vitals
from app.modules.vitals.schemas import (
    PatientVitalsResponse,
    VitalsCheckRequest,
    VitalsCheckResponse,
)

router = APIRouter()


@router.get(
    "/random/{patient_id}",
    response_model=PatientVitalsResponse,
    summary="Generate and evaluate a synthetic reading for a patient",
)
async def evaluate_random_vitals(
    patient_id: str,
    directory: PatientDirectory = Depends(get_patient_directory),
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
) -> PatientVitalsResponse:
    patient = directory.get(patient_id)
    vitals = generate_random_vitals()
    report = await orchestrator.evaluate(patient.id, patient.name, patient.room, vitals)
    return PatientVitalsResponse(
        patient_id=patient.id,
        patient_name=patient.name,
        room=patient.room,
        vitals=vitals,
        status=report.classification.status,
        issues=report.classification.issues,
        sms_sent=bool(report.dispatch and report.dispatch.sent),
        sms_details=report.dispatch,
        alert_id=report.alert_id,
    )


@router.post(
    "/check",
    response_model=VitalsCheckResponse,
    summary="Evaluate a caller-supplied reading",
)
async def check_vitals(
    check_in: VitalsCheckRequest,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
) -> VitalsCheckResponse:
    """Classify the reading, notify on Critical, and record an alert for Warning or Critical."""
    report = await orchestrator.evaluate(
        check_in.patient_id, check_in.patient_name, check_in.room, check_in.vitals
    )
    return VitalsCheckResponse(
        status=report.classification.status,
        issues=report.classification.issues,
        sms_sent=bool(report.dispatch and report.dispatch.sent),
        sms_details=report.dispatch,
        alert_id=report.alert_id,
    )
