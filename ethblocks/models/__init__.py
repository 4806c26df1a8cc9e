"""Core data models for ethblocks."""

from .blocks import ArgumentType, BlockType
from .events import EventOccurrence, OverflowPolicy, QueueStats

__all__ = [
    # Events
    "EventOccurrence",
    "OverflowPolicy",
    "QueueStats",
    # Blocks
    "ArgumentType",
    "BlockType",
]
