"""
Card model for 5-handed Wisconsin Sheepshead.

The game uses a 32-card piquet deck (7 through Ace in four suits). Every
Queen, every Jack and every Diamond is trump; the remaining 18 cards form
the three fail suits (hearts, spades, clubs).

Trump, lowest to highest:
    7♦ 8♦ 9♦ K♦ 10♦ A♦ J♦ J♥ J♠ J♣ Q♦ Q♥ Q♠ Q♣

Fail, lowest to highest within a suit:
    7 8 9 K 10 A

A trick is won by the highest trump played, or if no trump was played,
by the highest card of the suit that was led. Off-suit fail never wins.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from constants import BLIND_SIZE, CARD_POINTS, CARDS_PER_PLAYER, NUM_PLAYERS

TRUMP = "trump"

# Wide enough that every ordering of 32 cards is reachable (32! < 2**118)
SEED_BITS = 128


class Suit(Enum):
    """Card suits. Diamonds are entirely trump."""

    DIAMONDS = "diamonds"
    HEARTS = "hearts"
    SPADES = "spades"
    CLUBS = "clubs"


class Rank(Enum):
    """Card ranks present in the 32-card deck."""

    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


FAIL_SUITS: tuple[Suit, ...] = (Suit.HEARTS, Suit.SPADES, Suit.CLUBS)

# Court cards rank by suit: clubs > spades > hearts > diamonds
_COURT_SUIT_ORDER = (Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES, Suit.CLUBS)

TRUMP_ORDER: tuple[tuple[Rank, Suit], ...] = (
    (Rank.SEVEN, Suit.DIAMONDS),
    (Rank.EIGHT, Suit.DIAMONDS),
    (Rank.NINE, Suit.DIAMONDS),
    (Rank.KING, Suit.DIAMONDS),
    (Rank.TEN, Suit.DIAMONDS),
    (Rank.ACE, Suit.DIAMONDS),
    *((Rank.JACK, suit) for suit in _COURT_SUIT_ORDER),
    *((Rank.QUEEN, suit) for suit in _COURT_SUIT_ORDER),
)

FAIL_ORDER: tuple[Rank, ...] = (
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.KING,
    Rank.TEN,
    Rank.ACE,
)

_TRUMP_POWER = {key: power for power, key in enumerate(TRUMP_ORDER)}
_FAIL_POWER = {rank: power for power, rank in enumerate(FAIL_ORDER)}


@dataclass(frozen=True)
class Card:
    """
    An immutable playing card.

    Attributes:
        suit: Printed suit.
        rank: Printed rank.
    """

    suit: Suit
    rank: Rank

    @property
    def id(self) -> str:
        """Stable identifier, e.g. "A_hearts" or "10_clubs"."""
        return f"{self.rank.value}_{self.suit.value}"

    @property
    def points(self) -> int:
        return CARD_POINTS[self.rank.value]

    @property
    def is_trump(self) -> bool:
        return (
            self.suit == Suit.DIAMONDS
            or self.rank in (Rank.QUEEN, Rank.JACK)
        )

    @property
    def effective_suit(self) -> str:
        """"trump" for every trump card, otherwise the printed suit value."""
        return TRUMP if self.is_trump else self.suit.value

    @property
    def trump_power(self) -> int:
        """0 (7♦) to 13 (Q♣); -1 for fail cards."""
        return _TRUMP_POWER.get((self.rank, self.suit), -1)

    @property
    def fail_power(self) -> int:
        """0 (7) to 5 (A) within a fail suit; -1 for trump."""
        if self.is_trump:
            return -1
        return _FAIL_POWER[self.rank]

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "suit": self.suit.value,
            "rank": self.rank.value,
            "points": self.points,
            "is_trump": self.is_trump,
        }

    def __str__(self) -> str:
        return self.id


def card_from_id(card_id: str) -> Card:
    """
    Parse a card id such as "Q_clubs".

    Raises:
        ValueError: If the id does not name a card in the 32-card deck.
    """
    if not isinstance(card_id, str) or "_" not in card_id:
        raise ValueError(f"Invalid card id: {card_id!r}")
    rank_str, suit_str = card_id.split("_", 1)
    return Card(Suit(suit_str), Rank(rank_str))


def make_deck() -> list[Card]:
    """Return the 32 cards in a fixed, unshuffled order."""
    return [Card(suit, rank) for suit in Suit for rank in Rank]


def points_in(cards: Iterable[Card]) -> int:
    """Total card points in a collection."""
    return sum(card.points for card in cards)


def sort_hand(cards: Iterable[Card]) -> list[Card]:
    """
    Sort a hand for display.

    Trump first (strongest first), then fail grouped as hearts, spades,
    clubs with the strongest card of each suit first.
    """
    def key(card: Card) -> tuple[int, int, int]:
        if card.is_trump:
            return (0, 0, -card.trump_power)
        return (1, FAIL_SUITS.index(card.suit), -card.fail_power)

    return sorted(cards, key=key)


def compare_cards(card: Card, other: Card, lead_suit: str) -> int:
    """
    Compare two cards played to the same trick.

    Args:
        card: The challenging card.
        other: The card currently winning.
        lead_suit: Effective suit of the card that led the trick.

    Returns:
        1 if `card` beats `other`, -1 if it does not. 0 when neither
        card can win (both off-suit fail), in which case the earlier
        card keeps the trick.
    """
    if card.is_trump and other.is_trump:
        return 1 if card.trump_power > other.trump_power else -1
    if card.is_trump:
        return 1
    if other.is_trump:
        return -1

    card_follows = card.suit.value == lead_suit
    other_follows = other.suit.value == lead_suit
    if card_follows and other_follows:
        return 1 if card.fail_power > other.fail_power else -1
    if card_follows:
        return 1
    if other_follows:
        return -1
    return 0


@dataclass(frozen=True)
class Play:
    """One card played to a trick."""

    player_id: str
    card: Card
    is_under_card: bool = False

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "card": self.card.to_dict(),
            "is_under_card": self.is_under_card,
        }


def trick_winner(plays: list[Play]) -> Play:
    """
    Determine which play takes the trick.

    The first play sets the lead suit. Only plays that are eligible to
    win should be passed in.

    Raises:
        ValueError: If `plays` is empty.
    """
    if not plays:
        raise ValueError("Cannot resolve an empty trick")
    lead_suit = plays[0].card.effective_suit
    winner = plays[0]
    for play in plays[1:]:
        if compare_cards(play.card, winner.card, lead_suit) > 0:
            winner = play
    return winner


class Deck:
    """
    The 32-card deck for one hand.

    The deck can be initialized with a seed for deterministic shuffling,
    so a hand can be replayed exactly. Without one, a random seed is
    generated and stored.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed: int = seed if seed is not None else random.getrandbits(SEED_BITS)
        self.cards: list[Card] = make_deck()
        self.shuffle()

    def shuffle(self, seed: Optional[int] = None) -> None:
        """
        Randomize the order of cards in the deck.

        Args:
            seed: Optional seed to use. If None, uses the deck's stored seed.
        """
        if seed is not None:
            self.seed = seed
        random.Random(self.seed).shuffle(self.cards)

    def deal(
        self,
        num_players: int = NUM_PLAYERS,
        cards_each: int = CARDS_PER_PLAYER,
    ) -> tuple[list[list[Card]], list[Card]]:
        """
        Deal one card at a time around the table, then set aside the blind.

        Returns:
            (hands, blind): one list per seat in seat order, and the
            remaining cards as the blind.

        Raises:
            ValueError: If the deck does not hold exactly enough cards.
        """
        if len(self.cards) != num_players * cards_each + BLIND_SIZE:
            raise ValueError(
                f"Deck has {len(self.cards)} cards, cannot deal "
                f"{cards_each} to {num_players} players plus a blind"
            )
        hands: list[list[Card]] = [[] for _ in range(num_players)]
        position = 0
        for _ in range(cards_each):
            for seat in range(num_players):
                hands[seat].append(self.cards[position])
                position += 1
        blind = self.cards[position:]
        self.cards = []
        return hands, blind
