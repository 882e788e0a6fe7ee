from fastapi import APIRouter, Depends

from app.modules.patients.schemas import Patient
from app.modules.patients.service import PatientDirectory, get_patient_directory
from app.shared.schemas import ItemEnvelope, ListEnvelope

router = APIRouter()


@router.get("", response_model=ListEnvelope[Patient], summary="List all patients")
async def list_patients(
    directory: PatientDirectory = Depends(get_patient_directory),
) -> ListEnvelope[Patient]:
    return ListEnvelope[Patient].of(directory.list())


@router.get("/{patient_id}", response_model=ItemEnvelope[Patient], summary="Get one patient")
async def read_patient(
    patient_id: str,
    directory: PatientDirectory = Depends(get_patient_directory),
) -> ItemEnvelope[Patient]:
    return ItemEnvelope[Patient](data=directory.get(patient_id))
