"""Outbound alert notifications: SMS over the Twilio REST API, or a logging loopback."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from app.core.config import Settings
from app.core.exceptions import ChannelError
from app.modules.alerts.cooldown import CooldownGate
from app.modules.alerts.models import ChannelReceipt
from app.modules.alerts.schemas import AlertPayload, DispatchOutcome
from app.shared.constants import DispatchReason, NotificationProvider, Severity

log = structlog.get_logger(__name__)


class NotificationChannel(Protocol):
    provider: NotificationProvider

    async def send(self, body: str) -> ChannelReceipt: ...

    async def aclose(self) -> None: ...


class TwilioSmsChannel:
    """Live SMS channel. Provider failures surface as ChannelError carrying Twilio's error code."""

    provider = NotificationProvider.LIVE

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        to_number: str,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._account_sid = account_sid
        self.from_number = from_number
        self.to_number = to_number
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(account_sid, auth_token),
            timeout=timeout_seconds,
            transport=transport,
        )

    async def send(self, body: str) -> ChannelReceipt:
        try:
            response = await self._client.post(
                f"/Accounts/{self._account_sid}/Messages.json",
                data={"Body": body, "From": self.from_number, "To": self.to_number},
            )
        except httpx.TimeoutException as exc:
            raise ChannelError("TIMEOUT", "SMS provider did not respond in time") from exc
        except httpx.HTTPError as exc:
            raise ChannelError("TRANSPORT_ERROR", f"SMS provider unreachable: {exc}") from exc

        payload = _json_or_empty(response)
        if response.is_error:
            code = payload.get("code")
            raise ChannelError(
                str(code) if code else "TWILIO_ERROR",
                str(payload.get("message") or f"SMS provider returned HTTP {response.status_code}"),
            )
        return ChannelReceipt(reference_id=payload.get("sid"), status=payload.get("status"))

    async def aclose(self) -> None:
        await self._client.aclose()


class LoopbackChannel:
    """Stand-in used when no SMS credentials are configured: the message is only logged."""

    provider = NotificationProvider.LOOPBACK

    async def send(self, body: str) -> ChannelReceipt:
        log.info("loopback_sms", body=body, length=len(body))
        return ChannelReceipt(status="logged")

    async def aclose(self) -> None:
        return None


def build_channel(config: Settings) -> NotificationChannel:
    if config.notifications_configured:
        log.info(
            "sms_channel_ready",
            mode=NotificationProvider.LIVE.value,
            from_number=config.TWILIO_PHONE_NUMBER,
            to_number=config.DOCTOR_PHONE_NUMBER,
        )
        return TwilioSmsChannel(
            account_sid=config.TWILIO_ACCOUNT_SID or "",
            auth_token=config.TWILIO_AUTH_TOKEN or "",
            from_number=config.TWILIO_PHONE_NUMBER or "",
            to_number=config.DOCTOR_PHONE_NUMBER or "",
            base_url=config.TWILIO_API_BASE_URL,
            timeout_seconds=config.NOTIFICATION_TIMEOUT_SECONDS,
        )
    log.info("sms_channel_ready", mode=NotificationProvider.LOOPBACK.value)
    return LoopbackChannel()


def build_message(payload: AlertPayload) -> str:
    # Short enough for a single carrier segment, including on trial accounts.
    vitals = payload.vitals
    return f"ALERT {payload.patient_name} HR:{_short(vitals.hr)} SpO2:{_short(vitals.spo2)}"


class AlertDispatcher:
    """
    Decide whether an alert may go out, send it, and record the send with the cooldown gate.

    Only Critical alerts are sent. The patient's gate lock is held for the whole
    check-send-record sequence; the send itself is bounded by `timeout_seconds`.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        gate: CooldownGate,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._channel = channel
        self._gate = gate
        self._timeout_seconds = timeout_seconds

    @property
    def provider(self) -> NotificationProvider:
        return self._channel.provider

    @property
    def gate(self) -> CooldownGate:
        return self._gate

    async def dispatch(self, payload: AlertPayload) -> DispatchOutcome:
        if payload.status != Severity.CRITICAL:
            return DispatchOutcome(
                sent=False,
                reason=DispatchReason.NOT_CRITICAL,
                message="Only Critical alerts send SMS",
            )

        body = build_message(payload)
        async with self._gate.subject_lock(payload.patient_id):
            if not self._gate.may_send(payload.patient_id, payload.requested_at):
                log.info("sms_suppressed_cooldown", patient_id=payload.patient_id)
                return DispatchOutcome(
                    sent=False,
                    reason=DispatchReason.COOLDOWN,
                    message="Cooldown active",
                    body=body,
                )

            try:
                receipt = await asyncio.wait_for(
                    self._channel.send(body), timeout=self._timeout_seconds
                )
            except asyncio.TimeoutError:
                return self._failed(payload, body, "TIMEOUT", "SMS provider did not respond in time")
            except ChannelError as exc:
                return self._failed(payload, body, exc.code, exc.message)
            except Exception as exc:
                log.exception("sms_channel_crashed", patient_id=payload.patient_id)
                return self._failed(payload, body, "UNEXPECTED_ERROR", f"SMS channel failed: {exc}")

            self._gate.record_sent(payload.patient_id, payload.requested_at)

        log.info(
            "sms_sent",
            patient_id=payload.patient_id,
            provider=self.provider.value,
            reference_id=receipt.reference_id,
        )
        return DispatchOutcome(
            sent=True,
            provider=self.provider,
            reference_id=receipt.reference_id,
            delivery_status=receipt.status,
            message=(
                "SMS sent"
                if self.provider == NotificationProvider.LIVE
                else "SMS logged (loopback mode)"
            ),
            body=body,
        )

    async def aclose(self) -> None:
        await self._channel.aclose()

    def _failed(
        self, payload: AlertPayload, body: str, code: str, message: str
    ) -> DispatchOutcome:
        # A failed send is not recorded with the gate, so a retry is not held back by cooldown.
        log.warning(
            "sms_failed",
            patient_id=payload.patient_id,
            provider=self.provider.value,
            error_code=code,
            error=message,
        )
        return DispatchOutcome(
            sent=False,
            provider=self.provider,
            reason=DispatchReason.CHANNEL_ERROR,
            error_code=code,
            message=message,
            body=body,
        )


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _short(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
