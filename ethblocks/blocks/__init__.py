"""Token blocks module."""

from .token_blocks import EVENT_PROPERTIES, OPCODES, TokenBlocks
from .validation import ETHEREUM_ADDRESS, parse_amount, validate_address

__all__ = [
    "EVENT_PROPERTIES",
    "OPCODES",
    "TokenBlocks",
    "ETHEREUM_ADDRESS",
    "parse_amount",
    "validate_address",
]
