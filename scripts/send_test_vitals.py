#!/usr/bin/env python3
"""
Manual helper for exercising a running backend and the SMS channel.

Usage:
    # Evaluate a reading through the API
    python scripts/send_test_vitals.py check --patient-id 1 --hr 130 --temp 103.5 --spo2 85 --bp 170/100

    # Show recent alerts
    python scripts/send_test_vitals.py history --limit 10

    # Send one Critical alert straight through the configured channel (no server needed)
    python scripts/send_test_vitals.py test-sms
"""

import asyncio
import json

import httpx
import typer

from app.core.config import settings
from app.modules.alerts.cooldown import CooldownGate
from app.modules.alerts.notifier import AlertDispatcher, build_channel
from app.modules.alerts.schemas import AlertPayload
from app.modules.vitals.classifier import classify
from app.modules.vitals.models import VitalsReading
from app.shared.schemas import utc_now

app = typer.Typer()

BASE_URL = "http://localhost:5000"


@app.command()
def check(
    patient_id: str = typer.Option("1", help="Patient ID"),
    patient_name: str = typer.Option("John Doe", help="Patient display name"),
    room: str = typer.Option("ICU-A", help="Room label"),
    hr: float = typer.Option(72, help="Heart rate (bpm)"),
    temp: float = typer.Option(98.6, help="Temperature (°F)"),
    spo2: float = typer.Option(98, help="Oxygen saturation (%)"),
    bp: str = typer.Option("118/76", help="Blood pressure as systolic/diastolic"),
    base_url: str = typer.Option(BASE_URL, help="Backend base URL"),
):
    """Post a reading to /api/vitals/check and print the verdict."""
    payload = {
        "patientId": patient_id,
        "patientName": patient_name,
        "room": room,
        "vitals": {"hr": hr, "temp": temp, "spo2": spo2, "bp": bp},
    }
    response = httpx.post(f"{base_url}{settings.API_PREFIX}/vitals/check", json=payload)
    if response.status_code != 200:
        typer.echo(f"Check failed ({response.status_code}): {response.text}", err=True)
        raise typer.Exit(1)

    body = response.json()
    typer.echo(f"Status: {body['status']}")
    for issue in body["issues"]:
        typer.echo(f"  - {issue}")
    typer.echo(f"SMS sent: {body['smsSent']}")
    if body.get("smsDetails"):
        typer.echo(json.dumps(body["smsDetails"], indent=2))
    typer.echo(f"Alert ID: {body.get('alertId')}")


@app.command()
def history(
    limit: int = typer.Option(10, help="Number of alerts to show"),
    active: bool = typer.Option(False, help="Only unresolved alerts"),
    base_url: str = typer.Option(BASE_URL, help="Backend base URL"),
):
    """List recorded alerts."""
    path = "active" if active else f"history?limit={limit}"
    response = httpx.get(f"{base_url}{settings.API_PREFIX}/alerts/{path}")
    response.raise_for_status()
    for alert in response.json()["data"]:
        state = "resolved" if alert["resolved"] else "open"
        typer.echo(
            f"{alert['timestamp']}  {alert['id']}  {alert['status']:<8}  "
            f"{alert['patientName']} ({alert['room']})  sms={alert['smsSent']}  {state}"
        )


@app.command()
def test_sms(
    patient_name: str = typer.Option("John Doe", help="Patient display name"),
):
    """Send one Critical alert through the configured channel (live or loopback)."""
    asyncio.run(_test_sms(patient_name))


async def _test_sms(patient_name: str) -> None:
    reading = VitalsReading(hr=130, temp=103.5, spo2=85, bp="170/100")
    classification = classify(reading)
    dispatcher = AlertDispatcher(
        channel=build_channel(settings),
        gate=CooldownGate(),
        timeout_seconds=settings.NOTIFICATION_TIMEOUT_SECONDS,
    )
    typer.echo(f"Channel: {dispatcher.provider.value}")
    try:
        outcome = await dispatcher.dispatch(
            AlertPayload(
                patient_id="manual-test",
                patient_name=patient_name,
                room="ICU-A BED 101",
                vitals=reading,
                status=classification.status,
                issues=classification.issues,
                requested_at=utc_now(),
            )
        )
    finally:
        await dispatcher.aclose()
    typer.echo(json.dumps(outcome.model_dump(by_alias=True, mode="json"), indent=2))


if __name__ == "__main__":
    app()
