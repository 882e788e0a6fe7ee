from app.shared.schemas import CamelModel


class Patient(CamelModel):
    id: str
    name: str
    age: int
    gender: str
    room: str
    bed: int
    assigned_doctor: str
