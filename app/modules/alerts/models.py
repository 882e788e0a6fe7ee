from dataclasses import dataclass


@dataclass
class ChannelReceipt:
    """Provider acknowledgement for an accepted message."""

    reference_id: str | None = None
    status: str | None = None
