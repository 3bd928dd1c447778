"""
Event definitions for Sheepshead hand history.

Every accepted action on a Hand is emitted as an immutable event, so a
hand can be audited or replayed from its deck seed plus the event list.
The engine only emits; whoever installs the emitter decides where the
events go.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import json


class EventType(str, Enum):
    """All possible event types in a hand."""

    # Lifecycle events
    HAND_STARTED = "hand_started"
    HAND_SCORED = "hand_scored"

    # Picking / calling / burying
    PLAYER_PASSED = "player_passed"
    BLIND_PICKED = "blind_picked"
    PARTNER_CALLED = "partner_called"
    CARDS_BURIED = "cards_buried"

    # Trick play
    CARD_PLAYED = "card_played"
    PARTNER_REVEALED = "partner_revealed"
    TRICK_COMPLETED = "trick_completed"


@dataclass
class GameEvent:
    """
    An immutable record of something that happened in a hand.

    Attributes:
        event_type: The type of event (from EventType enum).
        hand_id: UUID of the hand this event belongs to.
        sequence_num: Monotonically increasing sequence number within the hand.
        timestamp: When the event occurred (UTC).
        player_id: ID of player who triggered the event (if applicable).
        data: Event-specific payload data.
    """

    event_type: EventType
    hand_id: str
    sequence_num: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    player_id: Optional[str] = None
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize event to dictionary for JSON storage."""
        return {
            "event_type": self.event_type.value,
            "hand_id": self.hand_id,
            "sequence_num": self.sequence_num,
            "timestamp": self.timestamp.isoformat(),
            "player_id": self.player_id,
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict) -> "GameEvent":
        """Deserialize event from dictionary."""
        timestamp = d["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            event_type=EventType(d["event_type"]),
            hand_id=d["hand_id"],
            sequence_num=d["sequence_num"],
            timestamp=timestamp,
            player_id=d.get("player_id"),
            data=d.get("data", {}),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "GameEvent":
        """Deserialize event from JSON string."""
        return cls.from_dict(json.loads(json_str))
