"""Models package for the Sheepshead server."""

from .events import EventType, GameEvent

__all__ = [
    "EventType",
    "GameEvent",
]
