from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timedelta

from app.shared.constants import ALERT_COOLDOWN_WINDOW


class CooldownGate:
    """
    Per-patient rate limiter for outbound notifications.

    Only successful sends are recorded. The gate knows nothing about severity; it answers
    purely "has enough time passed since the last send for this patient".
    """

    def __init__(self, window: timedelta = ALERT_COOLDOWN_WINDOW) -> None:
        self.window = window
        # Entries are overwritten, never evicted; the patient population is bounded.
        self._last_sent: dict[str, datetime] = {}
        self._subject_locks: dict[str, asyncio.Lock] = {}
        self._mutex = threading.Lock()

    def may_send(self, subject_id: str, now: datetime) -> bool:
        with self._mutex:
            last = self._last_sent.get(subject_id)
        if last is None:
            return True
        return now - last >= self.window

    def record_sent(self, subject_id: str, now: datetime) -> None:
        with self._mutex:
            self._last_sent[subject_id] = now

    def last_sent(self, subject_id: str) -> datetime | None:
        with self._mutex:
            return self._last_sent.get(subject_id)

    def subject_lock(self, subject_id: str) -> asyncio.Lock:
        """
        Exclusive section for one patient's check-send-record sequence.

        Holding it across the send keeps two concurrent critical readings for the same
        patient from both passing `may_send` before either is recorded.
        """
        with self._mutex:
            lock = self._subject_locks.get(subject_id)
            if lock is None:
                lock = asyncio.Lock()
                self._subject_locks[subject_id] = lock
            return lock
