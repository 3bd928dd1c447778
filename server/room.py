"""
Room management for multiplayer Sheepshead tables.

This module handles table creation, seating, and WebSocket communication
for the five players at a table. The rule engine never sees any of this:
a Room builds a fresh Hand for every deal and forwards player actions to
it under the room's lock.

A Room contains:
    - A unique room code for joining
    - Up to five RoomPlayers, seated in join order
    - The current Hand (or None between tables)
    - The dealer seat, which rotates one seat per hand
    - The set of players who will leave once the current hand ends
"""

import asyncio
import logging
import random
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import WebSocket

from config import config
from constants import MAX_ROOMS, NUM_PLAYERS, ROOM_CODE_LENGTH, ROOM_TIMEOUT_MINUTES
from game import Hand, HandPhase
from models.events import GameEvent

logger = logging.getLogger(__name__)


@dataclass
class RoomPlayer:
    """
    A player seated at a table (lobby-level representation).

    Attributes:
        id: Unique player identifier (connection id).
        name: Display name.
        websocket: WebSocket connection.
        is_host: Whether this player created the table.
    """

    id: str
    name: str
    websocket: Optional[WebSocket] = None
    is_host: bool = False


@dataclass
class Room:
    """
    A table of up to five players sharing a sequence of hands.

    Attributes:
        code: Room code for joining (e.g., "ABCD").
        players: Player id -> RoomPlayer, in seating order.
        hand: The current (or last finished) Hand.
        dealer_index: Seat index that deals the next hand.
        hands_played: Number of hands dealt at this table.
        leaving: Player ids that asked to leave after the current hand.
        event_log: Events emitted by the current hand.
        created_at: When the room was opened.
        last_activity: Last time a player joined or acted.
        game_lock: asyncio.Lock serializing every mutation of the hand.
    """

    code: str
    players: dict[str, RoomPlayer] = field(default_factory=dict)
    hand: Optional[Hand] = None
    dealer_index: int = field(
        default_factory=lambda: config.game_defaults.first_dealer_index
    )
    hands_played: int = 0
    leaving: set[str] = field(default_factory=set)
    event_log: list[GameEvent] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_activity: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    game_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def touch(self) -> None:
        self.last_activity = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Seating
    # -------------------------------------------------------------------------

    def add_player(
        self,
        player_id: str,
        name: str,
        websocket: Optional[WebSocket] = None,
    ) -> RoomPlayer:
        """
        Seat a player at the next open seat.

        The first player to join becomes the host. Callers check
        join_error() first.
        """
        room_player = RoomPlayer(
            id=player_id,
            name=name,
            websocket=websocket,
            is_host=not self.players,
        )
        self.players[player_id] = room_player
        self.touch()
        return room_player

    def remove_player(self, player_id: str) -> Optional[RoomPlayer]:
        """
        Remove a player from the table.

        A hand still in progress cannot continue with four players and
        is abandoned. The host role passes to the next seated player.

        Returns:
            The removed RoomPlayer, or None if not found.
        """
        if player_id not in self.players:
            return None

        if self.hand_in_progress():
            logger.info(
                f"Abandoning hand {self.hand.hand_id}: {player_id} left",
                extra={"room_code": self.code},
            )
            self.hand = None

        room_player = self.players.pop(player_id)
        self.leaving.discard(player_id)

        if room_player.is_host and self.players:
            next(iter(self.players.values())).is_host = True

        return room_player

    def get_player(self, player_id: str) -> Optional[RoomPlayer]:
        """Get a player by ID, or None if not found."""
        return self.players.get(player_id)

    def is_empty(self) -> bool:
        return not self.players

    def is_full(self) -> bool:
        return len(self.players) >= NUM_PLAYERS

    def hand_in_progress(self) -> bool:
        return self.hand is not None and self.hand.phase != HandPhase.SCORING

    def join_error(self) -> Optional[str]:
        """Why a new player cannot sit down, or None if they can."""
        if self.is_full():
            return "Room is full"
        if self.hand_in_progress():
            return "Hand already in progress"
        return None

    def seat_order(self) -> list[str]:
        return list(self.players)

    def display_name(self, player_id: str) -> str:
        player = self.players.get(player_id)
        return player.name if player else player_id

    def player_list(self) -> list[dict]:
        """Players in seat order for client display."""
        return [
            {
                "id": p.id,
                "name": p.name,
                "seat_index": index,
                "is_host": p.is_host,
                "leaving": p.id in self.leaving,
            }
            for index, p in enumerate(self.players.values())
        ]

    # -------------------------------------------------------------------------
    # Hands
    # -------------------------------------------------------------------------

    def start_error(self) -> Optional[str]:
        """Why a new hand cannot be dealt, or None if it can."""
        if len(self.players) != NUM_PLAYERS:
            return f"Need exactly {NUM_PLAYERS} players"
        if self.hand_in_progress():
            return "Hand already in progress"
        return None

    def start_hand(self, seed: Optional[int] = None) -> Hand:
        """
        Deal a brand-new hand.

        The dealer moves one seat to the left of the previous hand's
        dealer. Callers check start_error() first.

        Args:
            seed: Shuffle seed; defaults to the configured seed, which is
                normally unset so every deal is random.
        """
        if self.hand is not None and self.hand.next_dealer_index is not None:
            self.dealer_index = self.hand.next_dealer_index

        if seed is None:
            seed = config.game_defaults.shuffle_seed

        self.event_log = []
        self.leaving.clear()
        self.hand = Hand(
            seat_order=self.seat_order(),
            dealer_index=self.dealer_index,
            seed=seed,
            name_lookup=self.display_name,
        )
        self.hand.set_event_emitter(self._record_event)
        self.hand.start_hand()
        self.hands_played += 1
        self.touch()
        return self.hand

    def _record_event(self, event: GameEvent) -> None:
        self.event_log.append(event)
        logger.debug(
            f"Event {event.sequence_num}: {event.event_type.value}",
            extra={"room_code": self.code, "hand_id": event.hand_id},
        )

    def mark_leaving(self, player_id: str) -> bool:
        """Flag a player to leave once the current hand is scored."""
        if player_id not in self.players:
            return False
        self.leaving.add(player_id)
        return True

    def leaving_names(self) -> list[str]:
        """Display names of players leaving after this hand, in seat order."""
        return [p.name for p in self.players.values() if p.id in self.leaving]

    # -------------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------------

    async def broadcast(self, message: dict, exclude: Optional[str] = None) -> None:
        """
        Send a message to every connected player.

        Args:
            message: JSON-serializable message dict.
            exclude: Optional player ID to skip.
        """
        for player_id, player in self.players.items():
            if player_id != exclude and player.websocket:
                await self._send(player, message)

    async def send_to(self, player_id: str, message: dict) -> None:
        """
        Send a message to a specific player.

        Args:
            player_id: ID of the recipient player.
            message: JSON-serializable message dict.
        """
        player = self.players.get(player_id)
        if player and player.websocket:
            await self._send(player, message)

    async def _send(self, player: RoomPlayer, message: dict) -> None:
        try:
            await player.websocket.send_json(message)
        except Exception as e:
            # One dead socket must not stop the rest of the table
            logger.warning(
                f"Send to {player.id} failed: {e}",
                extra={"room_code": self.code, "player_id": player.id},
            )

    async def broadcast_state(self) -> None:
        """Send each player their own view of the current hand."""
        if self.hand is None:
            return
        for player_id, player in self.players.items():
            if not player.websocket:
                continue
            state = self.hand.get_state(player_id)
            if self.hand.phase == HandPhase.SCORING:
                state["players_leaving"] = self.leaving_names()
                state["summary"] = self.hand.summary()
            await self._send(player, {"type": "hand_state", "hand_state": state})


class RoomManager:
    """
    Registry of all open tables.

    Owned by the server and passed to handlers; the rule engine never
    touches it.
    """

    def __init__(
        self,
        code_length: int = ROOM_CODE_LENGTH,
        max_rooms: int = MAX_ROOMS,
    ) -> None:
        self.rooms: dict[str, Room] = {}
        self.code_length = code_length
        self.max_rooms = max_rooms

    def _generate_code(self, max_attempts: int = 100) -> str:
        """Generate a unique room code."""
        for _ in range(max_attempts):
            code = "".join(random.choices(string.ascii_uppercase, k=self.code_length))
            if code not in self.rooms:
                return code
        raise RuntimeError("Could not generate unique room code")

    def create_room(self) -> Room:
        """
        Create a new room with a unique code.

        Raises:
            RuntimeError: If the server is at its room limit.
        """
        if len(self.rooms) >= self.max_rooms:
            raise RuntimeError("Room limit reached")
        code = self._generate_code()
        room = Room(code=code)
        self.rooms[code] = room
        logger.info(f"Room {code} created", extra={"room_code": code})
        return room

    def get_room(self, code: str) -> Optional[Room]:
        """Get a room by its code (case-insensitive)."""
        return self.rooms.get(code.upper())

    def remove_room(self, code: str) -> None:
        if code in self.rooms:
            del self.rooms[code]
            logger.info(f"Room {code} closed", extra={"room_code": code})

    def find_player_room(self, player_id: str) -> Optional[Room]:
        """Find which room a player is in."""
        for room in self.rooms.values():
            if player_id in room.players:
                return room
        return None

    def idle_rooms(
        self,
        timeout_minutes: int = ROOM_TIMEOUT_MINUTES,
        now: Optional[datetime] = None,
    ) -> list[Room]:
        """Rooms with no join or player action in the last `timeout_minutes`."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=timeout_minutes)
        return [room for room in self.rooms.values() if room.last_activity < cutoff]

    def public_rooms(self) -> list[dict]:
        """Rooms that still have open seats and are not mid-hand."""
        return [
            {
                "code": room.code,
                "player_count": len(room.players),
                "open_seats": NUM_PLAYERS - len(room.players),
                "players": [p.name for p in room.players.values()],
            }
            for room in self.rooms.values()
            if room.join_error() is None
        ]
