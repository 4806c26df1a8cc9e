"""Event-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class OverflowPolicy(str, Enum):
    """What a bounded event queue does with an occurrence it cannot hold."""

    DROP_OLDEST = "drop_oldest"
    REJECT = "reject"


@dataclass
class EventOccurrence:
    """One observed contract event with its decoded arguments."""

    event_type: str
    correlation_id: str  # transaction hash, for logging only
    fields: dict[str, Any]
    block_number: int | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class QueueStats:
    """Snapshot of one event queue."""

    event_type: str
    depth: int
    announced: bool
    dropped: int = 0
