"""
Play and calling rules for 5-handed Wisconsin Sheepshead.

Two pure resolvers live here, both called by the Hand state machine:

legal_plays:
    Which cards in a hand may be played to the current trick, given the
    partner call. Covers following suit, the obligation for the partner
    to play the called card the first time its suit is led, and the
    picker's "hold card" (one fail card of the called suit that must
    stay in hand until the suit is led).

callable_options:
    Which partner calls the picker may make with their 8-card hand:
    a normal ace call, an under call (with a nominated under card),
    a ten call when holding every fail ace, or a forced alone.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from cards import FAIL_SUITS, Card, Rank, Suit
from constants import RUN_SUIT_MIN_CARDS


# =============================================================================
# Legal plays
# =============================================================================

def _called_suit_cards(hand: list[Card], called_suit: Suit) -> list[Card]:
    """Fail cards of the called suit; trump never counts toward it."""
    return [card for card in hand if card.effective_suit == called_suit.value]


def legal_plays(
    hand: list[Card],
    trick: list[Card],
    called_suit: Optional[Suit] = None,
    called_suit_led: bool = False,
    is_picker: bool = False,
    called_rank: Rank = Rank.ACE,
) -> list[Card]:
    """
    Compute the cards that may legally be played.

    Args:
        hand: Cards currently held by the player to act.
        trick: Cards already played to this trick that can win it, in
            play order. An under card is never included, so the first
            entry is the card that sets the lead suit.
        called_suit: Suit of the called card, or None when the picker
            is alone.
        called_suit_led: Whether the called suit had been led in an
            earlier trick of this hand.
        is_picker: Whether the player to act is the picker.
        called_rank: Rank of the called card (Ace, or Ten for a ten call).

    Returns:
        The legal subset of `hand`, in hand order. Never empty while the
        hand has cards: if the restrictions would exclude every card,
        the whole hand is legal.
    """
    if not hand:
        return []

    if not trick:
        legal = _legal_leads(hand, called_suit, called_suit_led, is_picker, called_rank)
    else:
        legal = _legal_follows(
            hand, trick[0], called_suit, called_suit_led, is_picker, called_rank
        )

    return legal or list(hand)


def _legal_leads(
    hand: list[Card],
    called_suit: Optional[Suit],
    called_suit_led: bool,
    is_picker: bool,
    called_rank: Rank,
) -> list[Card]:
    legal = list(hand)
    if called_suit is None:
        return legal

    called_card = Card(called_suit, called_rank)
    suit_cards = _called_suit_cards(hand, called_suit)

    # Partner may not lead the called suit with a small card unless running it
    if called_card in hand and len(suit_cards) < RUN_SUIT_MIN_CARDS:
        legal = [
            card for card in legal
            if card.effective_suit != called_suit.value or card == called_card
        ]

    if is_picker and not called_suit_led and len(suit_cards) == 1:
        legal = [card for card in legal if card not in suit_cards]

    return legal


def _legal_follows(
    hand: list[Card],
    lead: Card,
    called_suit: Optional[Suit],
    called_suit_led: bool,
    is_picker: bool,
    called_rank: Rank,
) -> list[Card]:
    lead_suit = lead.effective_suit
    following = [card for card in hand if card.effective_suit == lead_suit]

    if following:
        if (
            called_suit is not None
            and lead_suit == called_suit.value
            and not called_suit_led
        ):
            called_card = Card(called_suit, called_rank)
            if called_card in following:
                return [called_card]
        return following

    # Void in the lead suit: anything goes, except the picker's hold card
    if is_picker and called_suit is not None and not called_suit_led:
        suit_cards = _called_suit_cards(hand, called_suit)
        if len(suit_cards) == 1:
            return [card for card in hand if card not in suit_cards]

    return list(hand)


# =============================================================================
# Calling options
# =============================================================================

class CallType(str, Enum):
    """How the partner is identified."""

    NORMAL = "normal"
    UNDER = "under"


@dataclass(frozen=True)
class CallOption:
    """A single partner call the picker may make."""

    suit: Suit
    rank: Rank
    type: CallType

    def to_dict(self) -> dict:
        return {
            "suit": self.suit.value,
            "rank": self.rank.value,
            "type": self.type.value,
        }


@dataclass
class CallOptions:
    """
    The picker's calling choices.

    Attributes:
        go_alone: No call is possible; the picker must play alone.
        must_select_under_card: Accepting any option also requires
            nominating an under card from the picker's hand.
        options: The calls on offer (empty when go_alone).
        reason: Explanation for a forced alone.
    """

    go_alone: bool = False
    must_select_under_card: bool = False
    options: list[CallOption] = field(default_factory=list)
    reason: Optional[str] = None

    def find(self, suit: Suit) -> Optional[CallOption]:
        """The option for `suit`, or None if that suit cannot be called."""
        for option in self.options:
            if option.suit == suit:
                return option
        return None

    def to_dict(self) -> dict:
        data = {
            "go_alone": self.go_alone,
            "must_select_under_card": self.must_select_under_card,
            "options": [option.to_dict() for option in self.options],
        }
        if self.reason:
            data["reason"] = self.reason
        return data


def callable_options(hand: list[Card]) -> CallOptions:
    """
    Work out which partner calls the picker may make.

    Rules, checked in order:
        1. Holding all three fail aces: call the ten of any fail suit
           whose ten is not held (no under card needed). Holding all
           three fail tens as well forces the picker to go alone.
        2. Holding fail cards of a suit without its ace: call the ace of
           any such suit.
        3. Otherwise (every fail suit held includes its ace, or no fail
           held at all): call "under" the ace of any suit whose ace is
           not held, nominating an under card.

    Args:
        hand: The picker's hand after picking up the blind.

    Returns:
        CallOptions describing the available calls.
    """
    aces_held = {suit for suit in FAIL_SUITS if Card(suit, Rank.ACE) in hand}
    tens_held = {suit for suit in FAIL_SUITS if Card(suit, Rank.TEN) in hand}
    suits_held = {card.suit for card in hand if not card.is_trump}

    if len(aces_held) == len(FAIL_SUITS):
        options = [
            CallOption(suit, Rank.TEN, CallType.UNDER)
            for suit in FAIL_SUITS
            if suit not in tens_held
        ]
        if not options:
            return CallOptions(
                go_alone=True,
                reason="Holding all 3 fail aces and all 3 fail tens",
            )
        return CallOptions(options=options)

    normal = [
        CallOption(suit, Rank.ACE, CallType.NORMAL)
        for suit in FAIL_SUITS
        if suit in suits_held and suit not in aces_held
    ]
    if normal:
        return CallOptions(options=normal)

    return CallOptions(
        must_select_under_card=True,
        options=[
            CallOption(suit, Rank.ACE, CallType.UNDER)
            for suit in FAIL_SUITS
            if suit not in aces_held
        ],
    )
