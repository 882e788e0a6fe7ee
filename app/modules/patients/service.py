from typing import Iterable, List

from app.core.exceptions import NotFoundError
from app.modules.patients.schemas import Patient


def _patient(id: str, name: str, age: int, gender: str, room: str, bed: int, doctor: str) -> Patient:
    return Patient(
        id=id, name=name, age=age, gender=gender, room=room, bed=bed, assigned_doctor=doctor
    )


DEFAULT_PATIENTS: tuple[Patient, ...] = (
    _patient("1", "John Doe", 65, "Male", "ICU-A", 101, "Dr. Anderson"),
    _patient("2", "Jane Smith", 28, "Female", "118C", 118, "Dr. Smith"),
    _patient("3", "Michael Vision", 56, "Male", "312B", 312, "Dr. Anderson"),
    _patient("4", "Emma Davis", 34, "Female", "204A", 204, "Dr. Smith"),
    _patient("5", "Sarah James", 62, "Female", "401D", 401, "Dr. Anderson"),
    _patient("6", "Robert Wilson", 71, "Male", "305E", 305, "Dr. Johnson"),
)


class PatientDirectory:
    """Read-only lookup of the ward roster."""

    def __init__(self, patients: Iterable[Patient] = DEFAULT_PATIENTS) -> None:
        self._patients = {patient.id: patient for patient in patients}

    def list(self) -> List[Patient]:
        return list(self._patients.values())

    def get(self, patient_id: str) -> Patient:
        patient = self._patients.get(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient with ID {patient_id} not found")
        return patient


patient_directory = PatientDirectory()


def get_patient_directory() -> PatientDirectory:
    return patient_directory
