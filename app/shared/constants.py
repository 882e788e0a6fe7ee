from datetime import timedelta
from enum import Enum

# Minimum spacing between two outbound notifications for the same patient.
ALERT_COOLDOWN_WINDOW = timedelta(milliseconds=3_600_000)

DEFAULT_HISTORY_LIMIT = 50


class Severity(str, Enum):
    NORMAL = "Normal"
    WARNING = "Warning"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def escalate(self, other: "Severity") -> "Severity":
        """Return the worse of the two severities; never downgrades."""
        return other if other.rank > self.rank else self


_SEVERITY_RANK = {
    Severity.NORMAL: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
}


class NotificationProvider(str, Enum):
    LIVE = "live"
    LOOPBACK = "loopback"


class DispatchReason(str, Enum):
    NOT_CRITICAL = "NOT_CRITICAL"
    COOLDOWN = "COOLDOWN"
    CHANNEL_ERROR = "CHANNEL_ERROR"
