"""EventBridge module."""

from .bridge import EventBridge, EventQueue, IEventBridge

__all__ = ["EventBridge", "EventQueue", "IEventBridge"]
