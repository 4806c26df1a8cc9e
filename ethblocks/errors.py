"""Exception hierarchy for ethblocks."""


class EthBlocksError(Exception):
    """Base class for all ethblocks errors."""


class EventBridgeError(EthBlocksError):
    """Raised by EventBridge consumer operations."""


class UnknownEventType(EventBridgeError):
    """Operation referenced an event type that was never registered."""

    def __init__(self, event_type: str):
        super().__init__(f'No "{event_type}" event queue is registered')
        self.event_type = event_type


class NoPendingEvent(EventBridgeError):
    """peek/dequeue called without a prior successful poll."""

    def __init__(self, event_type: str, depth: int = 0):
        super().__init__(
            f'No announced "{event_type}" event. Queue length {depth}.'
        )
        self.event_type = event_type
        self.depth = depth


class UnknownField(EventBridgeError):
    """Requested field is absent from the announced occurrence."""

    def __init__(self, event_type: str, field_name: str):
        super().__init__(
            f'Field "{field_name}" does not exist on the queued "{event_type}" event'
        )
        self.event_type = event_type
        self.field_name = field_name


class QueueFull(EventBridgeError):
    """Occurrence dropped because the queue reached its capacity."""

    def __init__(self, event_type: str, capacity: int):
        super().__init__(f'"{event_type}" event queue is full (capacity {capacity})')
        self.event_type = event_type
        self.capacity = capacity


class GatewayError(EthBlocksError):
    """A contract call, transaction, deploy or event read failed."""


class InvalidArgument(EthBlocksError):
    """A block argument failed validation."""


class UnknownOpcode(EthBlocksError):
    """The host asked for a block that does not exist."""
