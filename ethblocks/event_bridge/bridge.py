"""EventBridge implementation: push-delivered contract events, poll-consumed."""

import threading
from collections import deque
from typing import Any, Protocol

from ..errors import NoPendingEvent, QueueFull, UnknownEventType, UnknownField
from ..logging_config import get_logger
from ..models import EventOccurrence, OverflowPolicy, QueueStats

logger = get_logger(__name__)


class IEventBridge(Protocol):
    """Per event type FIFO queues with an announce/consume protocol."""

    def register_event_type(self, event_type: str) -> None:
        """Create an empty queue for event_type (idempotent)."""
        ...

    def on_occurrence(self, event_type: str, occurrence: EventOccurrence) -> None:
        """Append an occurrence pushed by the gateway. Never raises."""
        ...

    def poll(self, event_type: str) -> bool:
        """Announce the head occurrence if there is one not yet announced."""
        ...

    def peek_field(self, event_type: str, field_name: str) -> Any:
        """Read a field of the announced occurrence."""
        ...

    def dequeue(self, event_type: str) -> EventOccurrence:
        """Remove the announced occurrence."""
        ...


class EventQueue:
    """Pending occurrences of one event type plus the announced flag."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        self.pending: deque[EventOccurrence] = deque()
        self.awaiting_consumption = False
        self.dropped = 0
        self.lock = threading.Lock()

    def stats(self) -> QueueStats:
        with self.lock:
            return QueueStats(
                event_type=self.event_type,
                depth=len(self.pending),
                announced=self.awaiting_consumption,
                dropped=self.dropped,
            )


class EventBridge:
    """
    Bridges asynchronous event delivery into a synchronous tick loop.

    Each registered event type owns an EventQueue. The producer (gateway
    callback) only appends to the tail. The consumer calls poll() once per
    tick; a True result announces the head, which stays readable through
    peek_field() until dequeue() removes it. Further polls return False
    while an occurrence is announced, so each occurrence fires exactly once.

    Precondition: for a single event type the gateway delivers occurrences
    in the order it observed them. The bridge preserves that order and
    makes no ordering promise across event types.
    """

    def __init__(
        self,
        capacity: int | None = None,
        overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST,
    ):
        if capacity is not None and capacity < 1:
            raise ValueError(f"Event queue capacity must be at least 1, got {capacity}")

        self._capacity = capacity
        self._overflow = OverflowPolicy(overflow)
        self._queues: dict[str, EventQueue] = {}
        self._registry_lock = threading.Lock()

    @property
    def capacity(self) -> int | None:
        return self._capacity

    @property
    def overflow(self) -> OverflowPolicy:
        return self._overflow

    def register_event_type(self, event_type: str) -> None:
        """Create an empty queue for event_type (idempotent)."""
        with self._registry_lock:
            if event_type in self._queues:
                return
            self._queues[event_type] = EventQueue(event_type)
        logger.debug("Registered %s event queue", event_type)

    def event_types(self) -> list[str]:
        """Registered event types in registration order."""
        return list(self._queues)

    def on_occurrence(self, event_type: str, occurrence: EventOccurrence) -> None:
        """Append an occurrence pushed by the gateway. Never raises."""
        queue = self._lookup(event_type)
        if queue is None:
            logger.warning(
                "Dropping %s event with hash %s: %s",
                event_type,
                occurrence.correlation_id,
                UnknownEventType(event_type),
            )
            return

        with queue.lock:
            if self._capacity is not None and len(queue.pending) >= self._capacity:
                if not self._make_room(queue):
                    queue.dropped += 1
                    logger.warning(
                        "Dropping %s event with hash %s: %s",
                        event_type,
                        occurrence.correlation_id,
                        QueueFull(event_type, self._capacity),
                    )
                    return

            queue.pending.append(occurrence)
            depth = len(queue.pending)

        logger.info(
            "Added %s event to queue with hash %s. Queue length %s",
            event_type,
            occurrence.correlation_id,
            depth,
            extra={"context": {"event_type": event_type, "depth": depth}},
        )

    def _make_room(self, queue: EventQueue) -> bool:
        """Evict per overflow policy. Caller holds queue.lock."""
        if self._overflow is OverflowPolicy.REJECT:
            return False

        # The announced head is being read by the consumer; never evict it.
        index = 1 if queue.awaiting_consumption else 0
        if index >= len(queue.pending):
            return False

        evicted = queue.pending[index]
        del queue.pending[index]
        queue.dropped += 1
        logger.warning(
            "Evicted oldest %s event with hash %s: queue at capacity %s",
            queue.event_type,
            evicted.correlation_id,
            self._capacity,
        )
        return True

    def poll(self, event_type: str) -> bool:
        """Announce the head occurrence if there is one not yet announced."""
        queue = self._get_queue(event_type)

        with queue.lock:
            if not queue.pending or queue.awaiting_consumption:
                return False
            queue.awaiting_consumption = True
            head = queue.pending[0]

        logger.info("Announced pending %s event with hash %s", event_type, head.correlation_id)
        return True

    def peek(self, event_type: str) -> EventOccurrence:
        """Return the announced occurrence without removing it."""
        queue = self._get_queue(event_type)

        with queue.lock:
            if not queue.awaiting_consumption:
                raise NoPendingEvent(event_type, len(queue.pending))
            return queue.pending[0]

    def peek_field(self, event_type: str, field_name: str) -> Any:
        """Read a field of the announced occurrence."""
        occurrence = self.peek(event_type)
        if field_name not in occurrence.fields:
            raise UnknownField(event_type, field_name)

        value = occurrence.fields[field_name]
        logger.debug(
            "Field %s of queued %s event with hash %s has value %s",
            field_name,
            event_type,
            occurrence.correlation_id,
            value,
        )
        return value

    def dequeue(self, event_type: str) -> EventOccurrence:
        """Remove the announced occurrence and clear the announced flag."""
        queue = self._get_queue(event_type)

        with queue.lock:
            if not queue.awaiting_consumption:
                raise NoPendingEvent(event_type, len(queue.pending))
            occurrence = queue.pending.popleft()
            queue.awaiting_consumption = False
            depth = len(queue.pending)

        logger.debug(
            "Dequeued %s event with hash %s, %s left in queue",
            event_type,
            occurrence.correlation_id,
            depth,
        )
        return occurrence

    def stats(self, event_type: str) -> QueueStats:
        """Snapshot of one queue."""
        return self._get_queue(event_type).stats()

    def all_stats(self) -> list[QueueStats]:
        """Snapshot of every queue."""
        return [queue.stats() for queue in list(self._queues.values())]

    def _get_queue(self, event_type: str) -> EventQueue:
        queue = self._lookup(event_type)
        if queue is None:
            raise UnknownEventType(event_type)
        return queue

    def _lookup(self, event_type: str) -> EventQueue | None:
        # Hosts send JSON, so a list or object name is just an unknown type.
        if not isinstance(event_type, str):
            return None
        return self._queues.get(event_type)
