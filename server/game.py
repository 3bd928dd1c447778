"""
Hand state machine for 5-handed Wisconsin Sheepshead.

A Hand owns one deal from shuffle to score. Every player action goes
through one of its public methods, which validates the action in full
before touching any state and returns an ActionResult. A rejected action
leaves the hand exactly as it was.

Phase flow:
    DEALING -> PICKING -> CALLING -> BURYING -> PLAYING -> SCORING

    If all five seats pass the blind, PICKING goes straight to SCORING
    and the hand is scored as a Schwanzer.

Partner calls:
    - Normal: the picker names a fail suit they hold without its ace.
      Whoever plays that ace is the partner.
    - Under: the picker holds no suitable suit, names an ace they lack
      and nominates an "under card" from their hand. The under card must
      be played the first time the called suit is led, can never win a
      trick, and when played reveals the picker as their own partner.
    - Ten: the picker holds all three fail aces and calls a ten instead.
    - Alone: voluntary, or forced when holding every fail ace and ten.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

from cards import (
    Card,
    Deck,
    Play,
    Rank,
    Suit,
    card_from_id,
    points_in,
    sort_hand,
    trick_winner,
)
from constants import BLIND_SIZE, NUM_PLAYERS, TRICKS_PER_HAND
from rules import CallType, callable_options, legal_plays
from scoring import (
    NormalHandResult,
    SchwanzerResult,
    score_normal_hand,
    score_schwanzer,
)

logger = logging.getLogger(__name__)

HandResult = Union[NormalHandResult, SchwanzerResult]


class HandPhase(Enum):
    """
    Phases of a single hand.

    Flow: DEALING -> PICKING -> CALLING -> BURYING -> PLAYING -> SCORING
    All-pass shortcut: PICKING -> SCORING
    """

    DEALING = "dealing"    # Created, cards not yet dealt
    PICKING = "picking"    # Seats offered the blind in turn
    CALLING = "calling"    # Picker chooses a partner call
    BURYING = "burying"    # Picker discards two cards
    PLAYING = "playing"    # Six tricks
    SCORING = "scoring"    # Terminal, result available


class RejectionCode(str, Enum):
    """Why an action was refused."""

    PHASE = "phase"                # Wrong phase for this action
    TURN = "turn"                  # Not this seat's turn
    AUTHORITY = "authority"        # Picker-only action from another seat
    HAND_CONTENT = "hand_content"  # Card not held, wrong number of cards
    RULE = "rule"                  # Action breaks a rule of play


@dataclass
class ActionResult:
    """
    Outcome of a player action.

    Truthy on success, so callers can write `if hand.pick(...):`.

    Attributes:
        success: Whether the action was applied.
        error: Human-readable reason for a rejection.
        code: Rejection category.
        data: Side-effect flags and payload (e.g. "partner_revealed",
            "trick_complete", "hand_complete", "results").
    """

    success: bool
    error: Optional[str] = None
    code: Optional[RejectionCode] = None
    data: dict = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict:
        result = {"success": self.success, **self.data}
        if not self.success:
            result["error"] = self.error
            result["code"] = self.code.value if self.code else None
        return result


@dataclass
class PickingState:
    """Who is being offered the blind, and who has already passed."""

    index: int
    passed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PartnerCall:
    """
    The picker's partner call, fixed once made.

    Going alone leaves suit, rank and call_type as None.
    """

    suit: Optional[Suit] = None
    rank: Optional[Rank] = None
    call_type: Optional[CallType] = None
    under_card_id: Optional[str] = None
    go_alone: bool = False

    @property
    def is_under_call(self) -> bool:
        return self.under_card_id is not None

    @property
    def called_card(self) -> Optional[Card]:
        if self.suit is None or self.rank is None:
            return None
        return Card(self.suit, self.rank)

    def to_dict(self, include_under_card: bool = True) -> dict:
        data = {
            "suit": self.suit.value if self.suit else None,
            "rank": self.rank.value if self.rank else None,
            "call_type": self.call_type.value if self.call_type else None,
            "is_under_call": self.is_under_call,
            "go_alone": self.go_alone,
        }
        if include_under_card:
            data["under_card_id"] = self.under_card_id
        return data


@dataclass
class CompletedTrick:
    """A finished trick. Points include any under card played to it."""

    plays: list[Play]
    winner: str
    points: int

    @property
    def cards(self) -> list[Card]:
        return [play.card for play in self.plays]

    def to_dict(self) -> dict:
        return {
            "plays": [play.to_dict() for play in self.plays],
            "winner": self.winner,
            "points": self.points,
        }


@dataclass
class TrickPlay:
    """
    Trick-play bookkeeping, created when burying completes.

    Attributes:
        current_index: Seat index of the player to act.
        current_trick: Plays so far in the trick being played.
        completed: Finished tricks, in order.
        under_card_played: The picker's under card has been played.
        called_suit_led: The called suit was led in a finished trick.
    """

    current_index: int
    current_trick: list[Play] = field(default_factory=list)
    completed: list[CompletedTrick] = field(default_factory=list)
    under_card_played: bool = False
    called_suit_led: bool = False

    def lead_play(self) -> Optional[Play]:
        """The first play of the current trick that can win it."""
        for play in self.current_trick:
            if not play.is_under_card:
                return play
        return None

    def eligible_cards(self) -> list[Card]:
        return [play.card for play in self.current_trick if not play.is_under_card]


def _identity(player_id: str) -> str:
    return player_id


@dataclass
class Hand:
    """
    One deal of Sheepshead, from shuffle to score.

    Attributes:
        seat_order: The five player ids in seating order.
        dealer_index: Seat index of the dealer.
        seed: Optional shuffle seed (random when None).
        name_lookup: Player id -> display name, used only by summary().
        phase: Current phase.
        hands: Player id -> cards held.
        blind: The two undealt cards (empty once picked).
        buried: The picker's two buried cards.
        picker: Player id of the picker.
        partner: Player id of the revealed partner (None until revealed).
        call: The partner call (None until calling completes).
        picking: Blind-offer cursor, present only while PICKING.
        play: Trick bookkeeping, present from PLAYING onward.
        tricks_won: Player id -> tricks taken.
        is_schwanzer: Everyone passed.
        result: Score record, set once at SCORING.
        next_dealer_index: Dealer for the following hand, set at SCORING.
        deck_seed: Seed the deck was shuffled with.
        hand_id: Unique identifier for events and logs.
    """

    seat_order: list[str]
    dealer_index: int = 0
    seed: Optional[int] = None
    name_lookup: Callable[[str], str] = field(
        default=_identity, repr=False, compare=False
    )
    phase: HandPhase = HandPhase.DEALING
    hands: dict[str, list[Card]] = field(default_factory=dict)
    blind: list[Card] = field(default_factory=list)
    buried: list[Card] = field(default_factory=list)
    picker: Optional[str] = None
    partner: Optional[str] = None
    call: Optional[PartnerCall] = None
    picking: Optional[PickingState] = None
    play: Optional[TrickPlay] = None
    tricks_won: dict[str, list[CompletedTrick]] = field(default_factory=dict)
    is_schwanzer: bool = False
    result: Optional[HandResult] = None
    next_dealer_index: Optional[int] = None
    deck_seed: Optional[int] = None
    hand_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # Event sourcing support
    _event_emitter: Optional[Callable[["GameEvent"], None]] = field(
        default=None, repr=False, compare=False
    )
    _sequence_num: int = field(default=0, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.seat_order) != NUM_PLAYERS:
            raise ValueError(f"A hand needs exactly {NUM_PLAYERS} seats")
        if len(set(self.seat_order)) != NUM_PLAYERS:
            raise ValueError("Seat ids must be unique")
        if not 0 <= self.dealer_index < NUM_PLAYERS:
            raise ValueError(f"Dealer index out of range: {self.dealer_index}")

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def set_event_emitter(self, emitter: Callable[["GameEvent"], None]) -> None:
        """
        Set callback for event emission.

        The emitter is called with each GameEvent as it occurs.

        Args:
            emitter: Callback function that receives GameEvent objects.
        """
        self._event_emitter = emitter

    def _emit(
        self,
        event_type: str,
        player_id: Optional[str] = None,
        **data: Any,
    ) -> None:
        if self._event_emitter is None:
            return

        # Import here to avoid circular dependency
        from models.events import GameEvent, EventType

        self._sequence_num += 1
        event = GameEvent(
            event_type=EventType(event_type),
            hand_id=self.hand_id,
            sequence_num=self._sequence_num,
            player_id=player_id,
            data=data,
        )
        self._event_emitter(event)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _reject(self, code: RejectionCode, message: str, **data: Any) -> ActionResult:
        logger.debug(
            f"Rejected ({code.value}): {message}",
            extra={"hand_id": self.hand_id},
        )
        return ActionResult(success=False, error=message, code=code, data=data)

    def _left_of_dealer(self) -> int:
        return (self.dealer_index + 1) % NUM_PLAYERS

    def _held_card(self, player_id: str, card_id: Any) -> Optional[Card]:
        """The card with `card_id` if `player_id` holds it, else None."""
        try:
            card = card_from_id(card_id)
        except ValueError:
            return None
        if card in self.hands.get(player_id, []):
            return card
        return None

    def current_player_id(self) -> Optional[str]:
        """The seat expected to act next, or None when nobody is."""
        if self.phase == HandPhase.PICKING:
            return self.seat_order[self.picking.index]
        if self.phase in (HandPhase.CALLING, HandPhase.BURYING):
            return self.picker
        if self.phase == HandPhase.PLAYING:
            return self.seat_order[self.play.current_index]
        return None

    def _must_play_under_card(self, player_id: str) -> bool:
        """The called suit was led by another seat and the under card is still held."""
        if self.play is None or self.call is None or not self.call.is_under_call:
            return False
        if player_id != self.picker or self.play.under_card_played:
            return False
        lead = self.play.lead_play()
        return (
            lead is not None
            and lead.player_id != player_id
            and lead.card.effective_suit == self.call.suit.value
        )

    def legal_cards(self, player_id: str) -> list[Card]:
        """
        Cards `player_id` may play right now.

        Empty outside PLAYING or when it is not that seat's turn.
        """
        if self.phase != HandPhase.PLAYING or self.current_player_id() != player_id:
            return []

        hand = self.hands[player_id]
        if self._must_play_under_card(player_id):
            return [card_from_id(self.call.under_card_id)]

        call = self.call
        return legal_plays(
            hand,
            self.play.eligible_cards(),
            called_suit=call.suit if call else None,
            called_suit_led=self.play.called_suit_led,
            is_picker=player_id == self.picker,
            called_rank=call.rank if call and call.rank else Rank.ACE,
        )

    def _finish(self, result: HandResult) -> None:
        self.result = result
        self.phase = HandPhase.SCORING
        self.next_dealer_index = (self.dealer_index + 1) % NUM_PLAYERS
        self.picking = None
        self._emit("hand_scored", result=result.to_dict())
        logger.info(
            f"Hand scored ({result.type}): {result.scores}",
            extra={"hand_id": self.hand_id},
        )

    # -------------------------------------------------------------------------
    # Dealing
    # -------------------------------------------------------------------------

    def start_hand(self) -> ActionResult:
        """
        Shuffle and deal.

        Six cards go to each seat one at a time, starting with the seat
        at index 0, and the last two cards form the blind. Picking starts
        left of the dealer.
        """
        if self.phase != HandPhase.DEALING:
            return self._reject(RejectionCode.PHASE, "Hand has already been dealt")

        deck = Deck(seed=self.seed)
        self.deck_seed = deck.seed
        dealt, blind = deck.deal(NUM_PLAYERS)

        self.hands = {
            player_id: sort_hand(cards)
            for player_id, cards in zip(self.seat_order, dealt)
        }
        self.blind = blind
        self.tricks_won = {player_id: [] for player_id in self.seat_order}
        self.picking = PickingState(index=self._left_of_dealer())
        self.phase = HandPhase.PICKING

        self._emit(
            "hand_started",
            dealer_index=self.dealer_index,
            deck_seed=self.deck_seed,
            hands={pid: [c.id for c in cards] for pid, cards in self.hands.items()},
            blind=[c.id for c in self.blind],
        )
        logger.info(
            f"Hand dealt, dealer seat {self.dealer_index}",
            extra={"hand_id": self.hand_id},
        )

        return ActionResult(
            success=True,
            data={"first_to_pick": self.current_player_id()},
        )

    # -------------------------------------------------------------------------
    # Picking
    # -------------------------------------------------------------------------

    def pick(self, player_id: str, wants_to_pick: bool) -> ActionResult:
        """
        Pick up the blind or pass.

        Args:
            player_id: The seat being offered the blind.
            wants_to_pick: True to pick, False to pass.

        Returns:
            ActionResult with "picked" or "passed". When the fifth seat
            passes, the hand is scored as a Schwanzer and the result has
            "schwanzer", "hand_complete" and "results".
        """
        if self.phase != HandPhase.PICKING:
            return self._reject(RejectionCode.PHASE, "Not in picking phase")
        if player_id != self.current_player_id():
            return self._reject(RejectionCode.TURN, "Not your turn to pick")

        if wants_to_pick:
            blind = self.blind
            self.picker = player_id
            self.hands[player_id] = sort_hand(self.hands[player_id] + blind)
            self.blind = []
            self.picking = None
            self.phase = HandPhase.CALLING
            self._emit("blind_picked", player_id=player_id, blind=[c.id for c in blind])
            logger.info(f"Seat {player_id} picked", extra={"hand_id": self.hand_id})
            return ActionResult(success=True, data={"picked": True, "picker": player_id})

        self.picking.passed.append(player_id)
        self._emit("player_passed", player_id=player_id)

        if len(self.picking.passed) == NUM_PLAYERS:
            self.is_schwanzer = True
            result = score_schwanzer(self.seat_order, self.hands)
            self._finish(result)
            return ActionResult(
                success=True,
                data={
                    "passed": True,
                    "schwanzer": True,
                    "hand_complete": True,
                    "results": result.to_dict(),
                },
            )

        self.picking.index = (self.picking.index + 1) % NUM_PLAYERS
        return ActionResult(
            success=True,
            data={"passed": True, "next_player": self.current_player_id()},
        )

    # -------------------------------------------------------------------------
    # Calling
    # -------------------------------------------------------------------------

    def call_partner(
        self,
        player_id: str,
        suit: Optional[Union[Suit, str]] = None,
        go_alone: bool = False,
        under_card_id: Optional[str] = None,
    ) -> ActionResult:
        """
        Make the partner call.

        Args:
            player_id: Must be the picker.
            suit: Fail suit to call (Suit or its string value).
            go_alone: Play without a partner. Always allowed, and the only
                choice when the picker holds every fail ace and ten.
            under_card_id: Card nominated as the under card. Required
                when the available calls are under calls of an ace.
        """
        if self.phase != HandPhase.CALLING:
            return self._reject(RejectionCode.PHASE, "Not in calling phase")
        if player_id != self.picker:
            return self._reject(RejectionCode.AUTHORITY, "You are not the picker")

        if go_alone:
            self.call = PartnerCall(go_alone=True)
            self.phase = HandPhase.BURYING
            self._emit("partner_called", player_id=player_id, **self.call.to_dict())
            logger.info(f"Picker {player_id} goes alone", extra={"hand_id": self.hand_id})
            return ActionResult(success=True, data={"go_alone": True})

        options = callable_options(self.hands[player_id])
        if options.go_alone:
            return self._reject(
                RejectionCode.RULE,
                f"You must go alone - {options.reason}",
                must_go_alone=True,
            )

        try:
            called_suit = suit if isinstance(suit, Suit) else Suit(suit)
        except ValueError:
            return self._reject(RejectionCode.RULE, "Cannot call that suit")

        option = options.find(called_suit)
        if option is None:
            return self._reject(RejectionCode.RULE, "Cannot call that suit")

        chosen_under_card = None
        if options.must_select_under_card:
            if not under_card_id:
                return self._reject(
                    RejectionCode.RULE,
                    "Under call requires selecting an under card",
                    needs_under_card=True,
                )
            if self._held_card(player_id, under_card_id) is None:
                return self._reject(RejectionCode.HAND_CONTENT, "Under card not in hand")
            chosen_under_card = under_card_id

        self.call = PartnerCall(
            suit=option.suit,
            rank=option.rank,
            call_type=option.type,
            under_card_id=chosen_under_card,
        )
        self.phase = HandPhase.BURYING
        self._emit("partner_called", player_id=player_id, **self.call.to_dict())
        logger.info(
            f"Picker called {option.rank.value} of {option.suit.value} ({option.type.value})",
            extra={"hand_id": self.hand_id},
        )

        return ActionResult(
            success=True,
            data={
                "called_suit": option.suit.value,
                "called_rank": option.rank.value,
                "call_type": option.type.value,
                "is_under_call": self.call.is_under_call,
            },
        )

    # -------------------------------------------------------------------------
    # Burying
    # -------------------------------------------------------------------------

    def bury(self, player_id: str, card_ids: list[str]) -> ActionResult:
        """
        Bury two cards from the picker's hand.

        Any card may be buried except the under card. When a suit was
        called and the picker holds a fail card of it, at least one
        such card must stay in hand.
        """
        if self.phase != HandPhase.BURYING:
            return self._reject(RejectionCode.PHASE, "Not in burying phase")
        if player_id != self.picker:
            return self._reject(RejectionCode.AUTHORITY, "You are not the picker")

        if not isinstance(card_ids, (list, tuple)) or len(card_ids) != BLIND_SIZE:
            return self._reject(
                RejectionCode.HAND_CONTENT, f"Must bury exactly {BLIND_SIZE} cards"
            )

        cards = [self._held_card(player_id, card_id) for card_id in card_ids]
        if any(card is None for card in cards):
            return self._reject(RejectionCode.HAND_CONTENT, "Card not in hand")
        if len(set(cards)) != len(cards):
            return self._reject(RejectionCode.HAND_CONTENT, "Cannot bury the same card twice")

        call = self.call
        if call.is_under_call and call.under_card_id in card_ids:
            return self._reject(RejectionCode.RULE, "Cannot bury your under card")

        if call.suit is not None:
            hold_cards = [
                card for card in self.hands[player_id]
                if card.effective_suit == call.suit.value
            ]
            if hold_cards and all(card in cards for card in hold_cards):
                return self._reject(
                    RejectionCode.RULE,
                    f"Must keep at least one {call.suit.value} to call that suit",
                )

        self.hands[player_id] = [c for c in self.hands[player_id] if c not in cards]
        self.buried = cards
        self.play = TrickPlay(current_index=self._left_of_dealer())
        self.phase = HandPhase.PLAYING

        self._emit("cards_buried", player_id=player_id, cards=[c.id for c in cards])
        logger.info("Picker buried, play begins", extra={"hand_id": self.hand_id})

        return ActionResult(
            success=True,
            data={
                "buried": [c.id for c in cards],
                "first_player": self.current_player_id(),
            },
        )

    # -------------------------------------------------------------------------
    # Trick play
    # -------------------------------------------------------------------------

    def play_card(self, player_id: str, card_id: str) -> ActionResult:
        """
        Play a card to the current trick.

        Returns:
            ActionResult with "card" and "is_under_card", "partner_revealed"
            (player id or None) and "trick_complete". A completed trick adds
            "trick", "winner" and "points"; the last trick adds
            "hand_complete" and "results".
        """
        if self.phase != HandPhase.PLAYING:
            return self._reject(RejectionCode.PHASE, "Not in playing phase")
        if player_id != self.current_player_id():
            return self._reject(RejectionCode.TURN, "Not your turn")

        card = self._held_card(player_id, card_id)
        if card is None:
            return self._reject(RejectionCode.HAND_CONTENT, "Card not in hand")

        call = self.call
        play = self.play
        is_under_card = (
            call.is_under_call
            and player_id == self.picker
            and not play.under_card_played
            and card.id == call.under_card_id
        )

        if self._must_play_under_card(player_id) and not is_under_card:
            return self._reject(
                RejectionCode.RULE,
                "You must play your under card when the called suit is led",
            )
        if card not in self.legal_cards(player_id):
            return self._reject(RejectionCode.RULE, "Cannot play that card")

        self.hands[player_id].remove(card)
        play.current_trick.append(Play(player_id, card, is_under_card))
        self._emit(
            "card_played",
            player_id=player_id,
            card=card.id,
            is_under_card=is_under_card,
        )

        revealed = None
        if is_under_card:
            play.under_card_played = True
            if self.partner is None:
                revealed = player_id
        elif (
            self.partner is None
            and call.called_card is not None
            and card == call.called_card
        ):
            revealed = player_id

        if revealed is not None:
            self.partner = revealed
            self._emit("partner_revealed", player_id=revealed)
            logger.info(f"Partner revealed: {revealed}", extra={"hand_id": self.hand_id})

        data = {
            "card": card.to_dict(),
            "is_under_card": is_under_card,
            "partner_revealed": revealed,
            "trick_complete": False,
        }

        if len(play.current_trick) < NUM_PLAYERS:
            play.current_index = (play.current_index + 1) % NUM_PLAYERS
            data["next_player"] = self.current_player_id()
            return ActionResult(success=True, data=data)

        data.update(self._complete_trick())
        return ActionResult(success=True, data=data)

    def _complete_trick(self) -> dict:
        play = self.play
        lead = play.lead_play()
        eligible = [p for p in play.current_trick if not p.is_under_card]
        winner = trick_winner(eligible)

        trick = CompletedTrick(
            plays=list(play.current_trick),
            winner=winner.player_id,
            points=points_in(p.card for p in play.current_trick),
        )
        play.completed.append(trick)
        self.tricks_won[winner.player_id].append(trick)

        if (
            self.call.suit is not None
            and lead is not None
            and lead.card.effective_suit == self.call.suit.value
        ):
            play.called_suit_led = True

        play.current_trick = []
        play.current_index = self.seat_order.index(winner.player_id)

        self._emit(
            "trick_completed",
            player_id=winner.player_id,
            trick_num=len(play.completed),
            points=trick.points,
        )

        data = {
            "trick_complete": True,
            "trick": trick.to_dict(),
            "winner": winner.player_id,
            "points": trick.points,
            "hand_complete": False,
        }

        if len(play.completed) == TRICKS_PER_HAND:
            result = score_normal_hand(
                self.seat_order,
                self.picker,
                self.partner,
                {pid: [t.cards for t in tricks] for pid, tricks in self.tricks_won.items()},
                self.buried,
                called_suit=self.call.suit,
                called_rank=self.call.rank,
            )
            self._finish(result)
            data["hand_complete"] = True
            data["results"] = result.to_dict()

        return data

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Full-information view of the hand for storage and debugging.

        Includes every seat's cards, the blind, the buried cards and the
        under card. Never send this to a client.
        """
        play = self.play
        return {
            "hand_id": self.hand_id,
            "phase": self.phase.value,
            "seat_order": list(self.seat_order),
            "dealer_index": self.dealer_index,
            "deck_seed": self.deck_seed,
            "hands": {pid: [c.id for c in cards] for pid, cards in self.hands.items()},
            "blind": [c.id for c in self.blind],
            "buried": [c.id for c in self.buried],
            "picker": self.picker,
            "partner": self.partner,
            "call": self.call.to_dict() if self.call else None,
            "picking": (
                {"index": self.picking.index, "passed": list(self.picking.passed)}
                if self.picking else None
            ),
            "play": (
                {
                    "current_index": play.current_index,
                    "current_trick": [p.to_dict() for p in play.current_trick],
                    "completed": [t.to_dict() for t in play.completed],
                    "under_card_played": play.under_card_played,
                    "called_suit_led": play.called_suit_led,
                }
                if play else None
            ),
            "tricks_won": {pid: len(tricks) for pid, tricks in self.tricks_won.items()},
            "is_schwanzer": self.is_schwanzer,
            "result": self.result.to_dict() if self.result else None,
            "next_dealer_index": self.next_dealer_index,
        }

    def _play_view(self, play: Play, for_player_id: Optional[str]) -> dict:
        # The under card goes down face-down for everyone but the picker
        if play.is_under_card and for_player_id != self.picker:
            return {"player_id": play.player_id, "card": None, "is_under_card": True}
        return play.to_dict()

    def get_state(self, for_player_id: Optional[str]) -> dict:
        """
        Get the hand as seen from one seat.

        Other seats' cards are shown only as counts, the blind is never
        shown, and the under card is identified only to the picker while
        it is still in hand. Phase-specific hints are added for the seat
        that has to act.

        Args:
            for_player_id: The seat receiving this state, or None for a
                spectator view.

        Returns:
            Dict suitable for JSON serialization.
        """
        call = self.call
        play = self.play
        is_picker = for_player_id is not None and for_player_id == self.picker
        current = self.current_player_id()

        players_data = []
        for index, player_id in enumerate(self.seat_order):
            players_data.append({
                "id": player_id,
                "name": self.name_lookup(player_id),
                "seat_index": index,
                "card_count": len(self.hands.get(player_id, [])),
                "is_dealer": index == self.dealer_index,
                "is_picker": player_id == self.picker,
                "is_partner": player_id == self.partner,
                "tricks_won": len(self.tricks_won.get(player_id, [])),
            })

        state = {
            "hand_id": self.hand_id,
            "phase": self.phase.value,
            "players": players_data,
            "hand": [c.to_dict() for c in self.hands.get(for_player_id, [])],
            "dealer_index": self.dealer_index,
            "current_player_id": current,
            "picker": self.picker,
            "partner": self.partner,
            "called_suit": call.suit.value if call and call.suit else None,
            "called_rank": call.rank.value if call and call.rank else None,
            "is_under_call": call.is_under_call if call else False,
            "go_alone": call.go_alone if call else False,
            "blind_size": len(self.blind),
            "is_schwanzer": self.is_schwanzer,
            "current_trick": [],
            "tricks": [],
            "under_card_played": play.under_card_played if play else False,
        }

        if play:
            state["current_trick"] = [
                self._play_view(p, for_player_id) for p in play.current_trick
            ]
            state["tricks"] = [
                {
                    "plays": [self._play_view(p, for_player_id) for p in trick.plays],
                    "winner": trick.winner,
                    "points": trick.points,
                }
                for trick in play.completed
            ]

        under_card_in_hand = not (play and play.under_card_played)
        if is_picker and call and call.is_under_call and under_card_in_hand:
            state["under_card_id"] = call.under_card_id

        if is_picker and self.buried:
            state["buried"] = [c.to_dict() for c in self.buried]

        if self.phase == HandPhase.PICKING:
            state["passed_players"] = list(self.picking.passed)

        if self.phase == HandPhase.CALLING and is_picker:
            state["callable_options"] = callable_options(self.hands[self.picker]).to_dict()

        if self.phase == HandPhase.BURYING and is_picker:
            state["need_to_bury"] = BLIND_SIZE

        if self.phase == HandPhase.PLAYING and for_player_id == current:
            state["must_play_under_card"] = self._must_play_under_card(for_player_id)
            state["playable_cards"] = [c.id for c in self.legal_cards(for_player_id)]

        if self.phase == HandPhase.SCORING:
            state["results"] = self.result.to_dict()
            state["buried"] = [c.to_dict() for c in self.buried]

        return state

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(self) -> list[str]:
        """
        Human-readable lines describing the finished hand.

        Empty until the hand has been scored.
        """
        if self.result is None:
            return []

        name = self.name_lookup
        result = self.result
        lines = []

        if isinstance(result, SchwanzerResult):
            lines.append("Everyone passed - Schwanzer")
            losers = ", ".join(name(pid) for pid in result.losers)
            lines.append(f"{losers} lost with {result.max_points} Schwanzer points")
        else:
            call = self.call
            if call.go_alone:
                lines.append(f"{name(result.picker)} picked and played alone")
            elif result.is_alone:
                lines.append(
                    f"{name(result.picker)} picked, called the "
                    f"{call.rank.value} of {call.suit.value} and played the under card"
                )
            else:
                lines.append(
                    f"{name(result.picker)} picked and called the "
                    f"{call.rank.value} of {call.suit.value}; "
                    f"partner was {name(result.partner)}"
                )
            outcome = "won" if result.pickers_win else "lost"
            extra = ""
            if result.schwarz:
                extra = " (schwarz)"
            elif result.schneider:
                extra = " (schneider)"
            lines.append(
                f"Pickers {outcome}{extra} with {result.picking_points} points "
                f"to {result.defending_points}"
            )

        for pid in self.seat_order:
            score = result.scores[pid]
            lines.append(f"{name(pid)}: {score:+d}")

        return lines
