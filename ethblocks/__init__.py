"""ethblocks: ERC20 token blocks for a tick-polling visual-programming host."""

from .app import Application, IApplication
from .blocks import TokenBlocks
from .config import Settings
from .errors import (
    EthBlocksError,
    EventBridgeError,
    GatewayError,
    InvalidArgument,
    NoPendingEvent,
    QueueFull,
    UnknownEventType,
    UnknownField,
    UnknownOpcode,
)
from .event_bridge import EventBridge, IEventBridge
from .gateway import ContractArtifact, IContractGateway, Web3ContractGateway
from .models import (
    ArgumentType,
    BlockType,
    EventOccurrence,
    OverflowPolicy,
    QueueStats,
)

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "ArgumentType",
    "BlockType",
    "EventOccurrence",
    "OverflowPolicy",
    "QueueStats",
    # Components
    "EventBridge",
    "IEventBridge",
    "ContractArtifact",
    "IContractGateway",
    "Web3ContractGateway",
    "TokenBlocks",
    # Errors
    "EthBlocksError",
    "EventBridgeError",
    "GatewayError",
    "InvalidArgument",
    "NoPendingEvent",
    "QueueFull",
    "UnknownEventType",
    "UnknownField",
    "UnknownOpcode",
]
