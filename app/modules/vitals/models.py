import math
import re

from pydantic import ConfigDict, Field, computed_field, field_validator

from app.core.exceptions import ValidationError
from app.shared.constants import Severity
from app.shared.schemas import CamelModel

_BP_PART = re.compile(r"^[+-]?\d+(\.\d+)?$")

_FROZEN = ConfigDict(frozen=True)


def _format_part(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


class BloodPressureReading(CamelModel):
    """Structured representation of a blood pressure reading."""

    model_config = _FROZEN

    systolic: float
    diastolic: float

    @classmethod
    def parse(cls, raw: object) -> "BloodPressureReading":
        """Parse an "S/D" string; anything else is rejected rather than guessed."""
        if not isinstance(raw, str):
            raise ValidationError(
                f"Blood pressure must be a 'systolic/diastolic' string, got {raw!r}"
            )
        parts = [part.strip() for part in raw.split("/")]
        if len(parts) != 2 or not all(_BP_PART.match(part) for part in parts):
            raise ValidationError(
                f"Malformed blood pressure '{raw}': expected 'systolic/diastolic'"
            )
        return cls(systolic=float(parts[0]), diastolic=float(parts[1]))

    def as_string(self) -> str:
        return f"{_format_part(self.systolic)}/{_format_part(self.diastolic)}"


class VitalsReading(CamelModel):
    """One snapshot of a patient's vitals. Frozen once captured."""

    model_config = _FROZEN

    hr: float = Field(description="Heart rate in beats per minute")
    temp: float = Field(description="Body temperature in °F")
    spo2: float = Field(description="Oxygen saturation in %")
    bp: str = Field(
        description="Blood pressure as 'systolic/diastolic'", examples=["118/76"]
    )

    @field_validator("hr", "temp", "spo2")
    @classmethod
    def reject_non_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("vital values must be finite numbers")
        return value

    @field_validator("bp", mode="before")
    @classmethod
    def normalize_blood_pressure(cls, value: object) -> str:
        return BloodPressureReading.parse(value).as_string()

    @property
    def blood_pressure(self) -> BloodPressureReading:
        return BloodPressureReading.parse(self.bp)


class ClassificationResult(CamelModel):
    model_config = _FROZEN

    status: Severity
    issues: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def needs_alert(self) -> bool:
        return self.status != Severity.NORMAL
