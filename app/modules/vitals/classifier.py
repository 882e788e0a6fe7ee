"""Clinical threshold checks for a single vitals reading."""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.core.exceptions import ValidationError
from app.modules.vitals.models import BloodPressureReading, ClassificationResult, VitalsReading
from app.shared.constants import Severity


@dataclass(frozen=True)
class VitalRange:
    label: str
    normal: str
    unit: str = ""


# Normal ranges as shown to clinicians in issue text, keyed by reading field.
VITAL_RANGES: dict[str, VitalRange] = {
    "hr": VitalRange(label="HR", normal="60-100", unit=" BPM"),
    "temp": VitalRange(label="TEMP", normal="97-99.5°F", unit="°F"),
    "spo2": VitalRange(label="SpO2", normal="95-100%", unit="%"),
    "bp": VitalRange(label="BP", normal="90-139 systolic"),
}

Finding = tuple[Severity, str]


def classify(reading: VitalsReading) -> ClassificationResult:
    """
    Classify a reading as Normal, Warning or Critical.

    Every vital is checked independently in a fixed order (HR, TEMP, SpO2, BP). Each
    out-of-range vital contributes one issue line, and the overall status is the worst
    status seen; a Critical finding is never downgraded by later checks.
    """
    findings = (
        _check_heart_rate(_finite("hr", reading.hr)),
        _check_temperature(_finite("temp", reading.temp)),
        _check_spo2(_finite("spo2", reading.spo2)),
        _check_blood_pressure(BloodPressureReading.parse(reading.bp)),
    )

    status = Severity.NORMAL
    issues: list[str] = []
    for finding in findings:
        if finding is None:
            continue
        severity, issue = finding
        issues.append(issue)
        status = status.escalate(severity)

    return ClassificationResult(status=status, issues=issues)


def _check_heart_rate(hr: float) -> Finding | None:
    if hr < 50 or hr > 120:
        return Severity.CRITICAL, _issue("hr", Severity.CRITICAL, _format_number(hr))
    if 50 <= hr < 60 or 100 < hr <= 120:
        return Severity.WARNING, _issue("hr", Severity.WARNING, _format_number(hr))
    return None


def _check_temperature(temp: float) -> Finding | None:
    if temp > 103:
        return Severity.CRITICAL, _issue("temp", Severity.CRITICAL, _format_number(temp))
    # 99.5 < temp < 99.6 falls between the bands and raises nothing
    if 99.6 <= temp <= 103 or temp < 97:
        return Severity.WARNING, _issue("temp", Severity.WARNING, _format_number(temp))
    return None


def _check_spo2(spo2: float) -> Finding | None:
    if spo2 < 90:
        return Severity.CRITICAL, _issue("spo2", Severity.CRITICAL, _format_number(spo2))
    if 90 <= spo2 < 95:
        return Severity.WARNING, _issue("spo2", Severity.WARNING, _format_number(spo2))
    return None


def _check_blood_pressure(bp: BloodPressureReading) -> Finding | None:
    if bp.systolic > 160:
        return Severity.CRITICAL, _issue("bp", Severity.CRITICAL, bp.as_string())
    if 140 <= bp.systolic <= 160:
        return Severity.WARNING, _issue("bp", Severity.WARNING, bp.as_string())
    return None


def _issue(key: str, severity: Severity, shown_value: str) -> str:
    vital = VITAL_RANGES[key]
    level = "CRITICAL" if severity == Severity.CRITICAL else "Warning"
    return f"{vital.label} {level}: {shown_value}{vital.unit} (Normal: {vital.normal})"


def _finite(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise ValidationError(f"Vital '{name}' must be a finite number, got {value!r}")
    return value


def _format_number(value: float) -> str:
    """Render 130.0 as "130" and 103.5 as "103.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)
