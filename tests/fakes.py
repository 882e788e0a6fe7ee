"""Hand-rolled collaborators for the alerting pipeline tests."""

import asyncio
from datetime import datetime, timedelta, timezone

from app.modules.alerts.models import ChannelReceipt
from app.shared.constants import NotificationProvider

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

CRITICAL_VITALS = {"hr": 130, "temp": 103.5, "spo2": 85, "bp": "170/100"}
WARNING_VITALS = {"hr": 55, "temp": 98.6, "spo2": 98, "bp": "118/76"}
NORMAL_VITALS = {"hr": 72, "temp": 98.6, "spo2": 98, "bp": "118/76"}


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingChannel:
    """Channel double that records bodies and can fail or stall on demand."""

    def __init__(
        self,
        provider: NotificationProvider = NotificationProvider.LIVE,
        fail_with: Exception | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.provider = provider
        self.fail_with = fail_with
        self.delay_seconds = delay_seconds
        self.sent: list[str] = []
        self.closed = False

    async def send(self, body: str) -> ChannelReceipt:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(body)
        return ChannelReceipt(reference_id=f"SM{len(self.sent):04d}", status="queued")

    async def aclose(self) -> None:
        self.closed = True
