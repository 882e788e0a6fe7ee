import asyncio
from datetime import timedelta

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import ChannelError
from app.modules.alerts.cooldown import CooldownGate
from app.modules.alerts.notifier import (
    AlertDispatcher,
    LoopbackChannel,
    TwilioSmsChannel,
    build_channel,
    build_message,
)
from app.modules.alerts.schemas import AlertPayload
from app.modules.vitals.models import VitalsReading
from app.shared.constants import DispatchReason, NotificationProvider, Severity
from tests.fakes import T0, RecordingChannel


def _payload(status: Severity = Severity.CRITICAL, patient_id: str = "1", at=T0) -> AlertPayload:
    return AlertPayload(
        patient_id=patient_id,
        patient_name="John Doe",
        room="ICU-A",
        vitals=VitalsReading(hr=130, temp=103.5, spo2=85, bp="170/100"),
        status=status,
        issues=["HR CRITICAL: 130 BPM (Normal: 60-100)"],
        requested_at=at,
    )


def test_message_is_short_fixed_format() -> None:
    assert build_message(_payload()) == "ALERT John Doe HR:130 SpO2:85"


@pytest.mark.asyncio
async def test_warning_is_never_sent_and_gate_untouched() -> None:
    channel, gate = RecordingChannel(), CooldownGate()
    dispatcher = AlertDispatcher(channel, gate)

    outcome = await dispatcher.dispatch(_payload(Severity.WARNING))

    assert outcome.sent is False
    assert outcome.reason == DispatchReason.NOT_CRITICAL
    assert outcome.provider is None
    assert channel.sent == []
    assert gate.last_sent("1") is None


@pytest.mark.asyncio
async def test_live_success_records_gate_and_reference() -> None:
    channel, gate = RecordingChannel(), CooldownGate()
    dispatcher = AlertDispatcher(channel, gate)

    outcome = await dispatcher.dispatch(_payload())

    assert outcome.sent is True
    assert outcome.provider == NotificationProvider.LIVE
    assert outcome.reference_id == "SM0001"
    assert outcome.delivery_status == "queued"
    assert gate.last_sent("1") == T0


@pytest.mark.asyncio
async def test_cooldown_blocks_without_touching_gate() -> None:
    channel, gate = RecordingChannel(), CooldownGate()
    dispatcher = AlertDispatcher(channel, gate)
    await dispatcher.dispatch(_payload())

    outcome = await dispatcher.dispatch(_payload(at=T0 + timedelta(minutes=30)))

    assert outcome.sent is False
    assert outcome.reason == DispatchReason.COOLDOWN
    assert gate.last_sent("1") == T0
    assert len(channel.sent) == 1

    after_window = await dispatcher.dispatch(_payload(at=T0 + timedelta(hours=1)))
    assert after_window.sent is True


@pytest.mark.asyncio
async def test_channel_failure_does_not_start_cooldown() -> None:
    channel = RecordingChannel(fail_with=ChannelError("21608", "Unverified number"))
    gate = CooldownGate()
    dispatcher = AlertDispatcher(channel, gate)

    failed = await dispatcher.dispatch(_payload())

    assert failed.sent is False
    assert failed.reason == DispatchReason.CHANNEL_ERROR
    assert failed.error_code == "21608"
    assert failed.provider == NotificationProvider.LIVE
    assert gate.last_sent("1") is None

    channel.fail_with = None
    retry = await dispatcher.dispatch(_payload(at=T0 + timedelta(milliseconds=1)))
    assert retry.sent is True


@pytest.mark.asyncio
async def test_hung_channel_times_out_as_channel_error() -> None:
    channel, gate = RecordingChannel(delay_seconds=5), CooldownGate()
    dispatcher = AlertDispatcher(channel, gate, timeout_seconds=0.05)

    outcome = await dispatcher.dispatch(_payload())

    assert outcome.sent is False
    assert outcome.error_code == "TIMEOUT"
    assert gate.last_sent("1") is None


@pytest.mark.asyncio
async def test_concurrent_criticals_for_one_patient_send_once() -> None:
    channel, gate = RecordingChannel(delay_seconds=0.01), CooldownGate()
    dispatcher = AlertDispatcher(channel, gate)

    outcomes = await asyncio.gather(*(dispatcher.dispatch(_payload()) for _ in range(5)))

    assert sum(outcome.sent for outcome in outcomes) == 1
    assert [o.reason for o in outcomes if not o.sent] == [DispatchReason.COOLDOWN] * 4
    assert len(channel.sent) == 1


@pytest.mark.asyncio
async def test_loopback_succeeds_and_records_gate() -> None:
    gate = CooldownGate()
    dispatcher = AlertDispatcher(LoopbackChannel(), gate)

    outcome = await dispatcher.dispatch(_payload())

    assert outcome.sent is True
    assert outcome.provider == NotificationProvider.LOOPBACK
    assert outcome.message == "SMS logged (loopback mode)"
    assert outcome.body == "ALERT John Doe HR:130 SpO2:85"
    assert gate.last_sent("1") == T0


def test_build_channel_requires_all_four_credentials() -> None:
    partial = Settings(
        TWILIO_ACCOUNT_SID="AC123", TWILIO_AUTH_TOKEN="secret", TWILIO_PHONE_NUMBER="+15550001"
    )
    full = Settings(
        TWILIO_ACCOUNT_SID="AC123",
        TWILIO_AUTH_TOKEN="secret",
        TWILIO_PHONE_NUMBER="+15550001",
        DOCTOR_PHONE_NUMBER="+15550002",
    )

    assert isinstance(build_channel(partial), LoopbackChannel)
    assert isinstance(build_channel(full), TwilioSmsChannel)


@pytest.mark.asyncio
async def test_twilio_channel_posts_form_and_returns_sid() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"sid": "SMabc", "status": "queued"})

    channel = TwilioSmsChannel(
        "AC123", "secret", "+15550001", "+15550002", transport=httpx.MockTransport(handler)
    )
    receipt = await channel.send("ALERT John Doe HR:130 SpO2:85")
    await channel.aclose()

    assert receipt.reference_id == "SMabc"
    assert receipt.status == "queued"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/2010-04-01/Accounts/AC123/Messages.json"
    assert request.headers["Authorization"].startswith("Basic ")
    form = dict(httpx.QueryParams(request.content.decode()))
    assert form == {"Body": "ALERT John Doe HR:130 SpO2:85", "From": "+15550001", "To": "+15550002"}


@pytest.mark.asyncio
async def test_twilio_channel_maps_provider_error_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

    channel = TwilioSmsChannel(
        "AC123", "secret", "+15550001", "bad", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ChannelError) as exc_info:
        await channel.send("hi")

    assert exc_info.value.code == "21211"
    assert "Invalid 'To'" in exc_info.value.message


@pytest.mark.asyncio
async def test_twilio_channel_maps_transport_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    channel = TwilioSmsChannel(
        "AC123", "secret", "+15550001", "+15550002", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ChannelError) as exc_info:
        await channel.send("hi")

    assert exc_info.value.code == "TRANSPORT_ERROR"


@pytest.mark.asyncio
async def test_twilio_channel_non_json_error_falls_back_to_generic_code() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    channel = TwilioSmsChannel(
        "AC123", "secret", "+15550001", "+15550002", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ChannelError) as exc_info:
        await channel.send("hi")

    assert exc_info.value.code == "TWILIO_ERROR"
    assert "503" in exc_info.value.message
